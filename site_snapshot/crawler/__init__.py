"""site_snapshot.crawler: canonicalization, fetching, link extraction, snapshots and the crawl loop."""

from .crawler import SiteCrawler
from .models import ERROR_STATUS, CrawlState, PageResult
from .urls import MalformedURL, canonicalize, filename_for

__all__ = [
    "SiteCrawler",
    "CrawlState",
    "PageResult",
    "ERROR_STATUS",
    "MalformedURL",
    "canonicalize",
    "filename_for",
]
