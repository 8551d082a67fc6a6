# File: tests/conftest.py
from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from pathlib import Path
from typing import Dict, List, Optional

import pytest
from aiohttp import web

from site_snapshot.config import CrawlConfig
from site_snapshot.crawler.crawler import SiteCrawler
from site_snapshot.crawler.fetcher import Fetcher
from site_snapshot.crawler.models import FetchOutcome, HttpError, Success
from site_snapshot.logger import LOGGER_NAME

BASE = "http://site.test"


def html_page(body: str) -> Success:
    """Build an HTML Success outcome around *body*."""
    return Success(200, "text/html; charset=utf-8", f"<html><body>{body}</body></html>")


class RecordingFetcher(Fetcher):
    """In-memory fetcher: serves canned outcomes and records every call."""

    mode = "raw"

    def __init__(self, config: CrawlConfig, site: Dict[str, FetchOutcome]) -> None:
        super().__init__(config)
        self.site = site
        self.calls: List[str] = []

    async def fetch(self, url: str) -> FetchOutcome:
        self.calls.append(url)
        return self.site.get(url, HttpError(404, "text/html"))


@pytest.fixture()
def raw_config(tmp_path: Path) -> Callable[..., CrawlConfig]:
    """Factory for raw-mode configs writing into a temporary directory."""

    def _make(base_url: str = BASE, output: Optional[Path] = None, **kwargs) -> CrawlConfig:
        return CrawlConfig(
            base_url=base_url,
            output_dir=output or tmp_path / "snapshots",
            mode="raw",
            **kwargs,
        )

    return _make


@pytest.fixture()
def make_crawler(raw_config) -> Callable[..., tuple[SiteCrawler, RecordingFetcher]]:
    """Build a SiteCrawler over an in-memory site."""

    def _make(site: Dict[str, FetchOutcome], **kwargs) -> tuple[SiteCrawler, RecordingFetcher]:
        config = raw_config(**kwargs)
        fetcher = RecordingFetcher(config, site)
        return SiteCrawler(config, fetcher=fetcher), fetcher

    return _make


async def serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app, shutdown_timeout=0.5)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()


@pytest.fixture()
def project_log(caplog):
    """caplog wired to the SiteSnapshot logger, which does not propagate to root."""
    lg = logging.getLogger(LOGGER_NAME)
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    lg.addHandler(caplog.handler)
    try:
        yield caplog
    finally:
        lg.removeHandler(caplog.handler)
