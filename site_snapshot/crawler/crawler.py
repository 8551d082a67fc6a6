from __future__ import annotations

import logging
import time
from typing import List, Optional

from site_snapshot.config import CrawlConfig
from site_snapshot.crawler.fetcher import Fetcher, create_fetcher
from site_snapshot.crawler.link_extractor import LinkExtractor, create_extractor
from site_snapshot.crawler.models import (
    ERROR_STATUS,
    CrawlState,
    Failure,
    FetchOutcome,
    HttpError,
    PageResult,
    Redirect,
    Success,
)
from site_snapshot.crawler.snapshot import SnapshotWriter
from site_snapshot.crawler.urls import MalformedURL, canonicalize, pathname, same_origin
from site_snapshot.logger import LOGGER_NAME

__all__ = ("SiteCrawler",)


class SiteCrawler:
    """Breadth-first crawler of one origin: one fetch in flight, each URL fetched once."""

    def __init__(
        self,
        config: CrawlConfig,
        *,
        fetcher: Optional[Fetcher] = None,
        extractor: Optional[LinkExtractor] = None,
        writer: Optional[SnapshotWriter] = None,
    ) -> None:
        self.config = config
        # raises MalformedURL: an unusable seed is fatal
        self.base_url = canonicalize(str(config.base_url))
        self.fetcher = fetcher if fetcher is not None else create_fetcher(config)
        self.extractor = extractor if extractor is not None else create_extractor(config.mode, self.base_url)
        self.writer = writer if writer is not None else SnapshotWriter(config.output_dir, pretty=config.pretty_html)
        self.logger = logging.getLogger(LOGGER_NAME)

    async def __aenter__(self) -> SiteCrawler:
        self.writer.prepare()
        await self.fetcher.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.fetcher.__aexit__(exc_type, exc, tb)

    async def crawl(self) -> List[PageResult]:
        """Run until the frontier is empty and return one result per fetched URL."""
        self.logger.info("Crawl start: %s (%s mode)", self.base_url, self.fetcher.mode or self.config.mode)
        start = time.monotonic()
        state = CrawlState()
        state.discover(self.base_url)
        results: List[PageResult] = []

        while state:
            url = state.next()
            outcome = await self.fetcher.fetch(url)
            result = self._record(url, outcome, state)
            results.append(result)
            self.logger.debug("%s %s", result.status_code, result.path)
            self.logger.info("Crawled: %d pages, Queue: %d", len(results), len(state))

        duration = time.monotonic() - start
        self.logger.info("Finished: %d pages in %.2f s", len(results), duration)
        return results

    def _record(self, url: str, outcome: FetchOutcome, state: CrawlState) -> PageResult:
        path = pathname(url)

        if isinstance(outcome, Success):
            if not outcome.is_html:
                return PageResult(
                    url, path, outcome.status_code, content_type=outcome.content_type, skipped="not HTML"
                )
            self.writer.save(url, outcome)
            for link in sorted(self.extractor.extract(outcome, url)):
                state.discover(link)
            return PageResult(url, path, outcome.status_code, content_type=outcome.content_type, saved=True)

        if isinstance(outcome, Redirect):
            self._follow(outcome.target, state)
            return PageResult(
                url, path, outcome.status_code, redirect_target=outcome.target, skipped="redirect"
            )

        if isinstance(outcome, HttpError):
            return PageResult(
                url, path, outcome.status_code, content_type=outcome.content_type,
                skipped=f"HTTP {outcome.status_code}",
            )

        if isinstance(outcome, Failure):
            self.logger.warning("Error on %s: %s", path, outcome.error)
            return PageResult(url, path, ERROR_STATUS, error=outcome.error)

        raise TypeError(f"Unexpected fetch outcome: {outcome!r}")

    def _follow(self, target: str, state: CrawlState) -> None:
        try:
            canonical = canonicalize(target)
            if not same_origin(canonical, self.base_url):
                self.logger.debug("Redirect leaves origin: %s", target)
                return
        except MalformedURL as exc:
            self.logger.debug("Redirect target dropped: %s", exc)
            return
        state.discover(canonical)
