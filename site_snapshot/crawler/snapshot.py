"""
Snapshot writer: persists markup and screenshot of each saved HTML page.

Layout under the output directory::

    html/<filename>.html
    screenshots/<filename>.png

``<filename>`` comes from :func:`site_snapshot.crawler.urls.filename_for`.
Files are overwritten on every run. Distinct URLs can share a filename
(``/a_b`` and ``/a/b``); the later page wins and a warning is logged.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Union

from bs4 import BeautifulSoup

from site_snapshot.crawler.models import Success
from site_snapshot.crawler.urls import filename_for
from site_snapshot.logger import LOGGER_NAME

__all__ = ("SnapshotError", "SnapshotWriter")


class SnapshotError(OSError):
    """Output directory could not be prepared or an artifact could not be written."""


class SnapshotWriter:
    """Writes artifact pairs below ``output_dir``."""

    def __init__(self, output_dir: Union[str, Path], pretty: bool = False) -> None:
        self.output_dir = Path(output_dir)
        self.html_dir = self.output_dir / "html"
        self.screenshot_dir = self.output_dir / "screenshots"
        self.pretty = pretty
        self.logger = logging.getLogger(LOGGER_NAME)
        # filename -> URL saved under it during the current run
        self._written: Dict[str, str] = {}

    def prepare(self) -> None:
        """Create the output tree; must succeed before anything is fetched."""
        self._written.clear()
        for directory in (self.html_dir, self.screenshot_dir):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise SnapshotError(f"Cannot create {directory}: {exc.strerror or exc}") from exc

    def html_path(self, url: str) -> Path:
        return self.html_dir / f"{filename_for(url)}.html"

    def screenshot_path(self, url: str) -> Path:
        return self.screenshot_dir / f"{filename_for(url)}.png"

    def save(self, url: str, page: Success) -> Path:
        """Write markup (and screenshot if the page has one). Returns the HTML path."""
        name = filename_for(url)
        previous = self._written.setdefault(name, url)
        if previous != url:
            self.logger.warning("Snapshot %r of %s overwrites the one of %s", name, url, previous)
            self._written[name] = url
        html_file = self.html_path(url)
        markup = page.content
        if isinstance(markup, bytes):
            markup = markup.decode("utf-8", errors="replace")
        if self.pretty:
            markup = BeautifulSoup(markup, "html.parser").prettify()
        try:
            html_file.write_text(markup, encoding="utf-8")
            if page.screenshot is not None:
                self.screenshot_path(url).write_bytes(page.screenshot)
        except OSError as exc:
            raise SnapshotError(f"Cannot write snapshot for {url}: {exc.strerror or exc}") from exc
        return html_file
