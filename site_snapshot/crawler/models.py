"""
Data models for the SiteSnapshot crawler.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, FrozenSet, Literal, Optional, Set, Union

#: Synthetic status recorded for fetches that never produced an HTTP response.
ERROR_STATUS: Literal["ERROR"] = "ERROR"

_HTML_MARKERS = ("text/html", "application/xhtml+xml")


def is_html(content_type: Optional[str]) -> bool:
    """True if the Content-Type header denotes an HTML document."""
    if not content_type:
        return False
    ctype = content_type.lower()
    return any(marker in ctype for marker in _HTML_MARKERS)


# --------------------------------------------------------------------------- #
# Fetch outcomes                                                              #
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class Success:
    """2xx response. ``content`` is the body (raw mode) or the rendered DOM.

    ``final_url`` is set when the response came from a different address than
    the one requested (a redirect onto the same canonical URL, e.g. ``/about``
    → ``/about/``); relative links must be resolved against it.
    """

    status_code: int
    content_type: str
    content: Union[str, bytes]
    screenshot: Optional[bytes] = None
    dom_links: Optional[FrozenSet[str]] = None
    final_url: Optional[str] = None

    @property
    def is_html(self) -> bool:
        return is_html(self.content_type)


@dataclass(frozen=True, slots=True)
class Redirect:
    """3xx response with a Location header; ``target`` is absolute."""

    status_code: int
    target: str


@dataclass(frozen=True, slots=True)
class HttpError:
    """Completed response that is neither a success nor a followable redirect."""

    status_code: int
    content_type: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Failure:
    """No usable response: deadline exceeded or a connection/protocol error."""

    error: str
    kind: Literal["timeout", "network"] = "network"


FetchOutcome = Union[Success, Redirect, HttpError, Failure]


# --------------------------------------------------------------------------- #
# Crawl results                                                               #
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class PageResult:
    """Outcome of one fetched URL, as it appears in the manifest."""

    url: str
    path: str
    status_code: Union[int, Literal["ERROR"]]
    content_type: Optional[str] = None
    error: Optional[str] = None
    redirect_target: Optional[str] = None
    saved: bool = False
    skipped: Optional[str] = None


@dataclass(slots=True)
class CrawlState:
    """Visited set plus FIFO frontier of canonical URLs for a single run."""

    visited: Set[str] = field(default_factory=set)
    frontier: Deque[str] = field(default_factory=deque)
    _queued: Set[str] = field(default_factory=set, repr=False)

    def discover(self, url: str) -> bool:
        """Queue *url* unless it was already fetched or is waiting. Returns True if queued."""
        if url in self.visited or url in self._queued:
            return False
        self.frontier.append(url)
        self._queued.add(url)
        return True

    def next(self) -> str:
        """Pop the oldest queued URL and mark it visited."""
        url = self.frontier.popleft()
        self._queued.discard(url)
        self.visited.add(url)
        return url

    def __bool__(self) -> bool:
        return bool(self.frontier)

    def __len__(self) -> int:
        return len(self.frontier)
