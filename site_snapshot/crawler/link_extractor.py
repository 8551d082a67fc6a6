"""
Link extraction for SiteSnapshot.

Two strategies matching the two fetch modes, one set of filtering rules:

* :class:`MarkupLinkExtractor` scans raw markup for ``href`` and ``src``
  attributes (BeautifulSoup, tolerant of broken HTML).
* :class:`DomLinkExtractor` uses the anchors read from the live document by
  the browser fetcher, which includes links injected by scripts.
"""
from __future__ import annotations

from typing import Iterable, Set

from bs4 import BeautifulSoup
from bs4.element import Tag

from site_snapshot.crawler.models import Success
from site_snapshot.crawler.urls import MalformedURL, canonicalize, same_origin

__all__ = (
    "SKIP_SCHEMES",
    "filter_links",
    "LinkExtractor",
    "MarkupLinkExtractor",
    "DomLinkExtractor",
    "create_extractor",
)

SKIP_SCHEMES = ("mailto:", "tel:", "javascript:", "data:")

_LINK_ATTRS = ("href", "src")


def _has_link_attr(tag: Tag) -> bool:
    return any(tag.has_attr(attr) for attr in _LINK_ATTRS)


def filter_links(refs: Iterable[str], page_url: str, base_url: str) -> Set[str]:
    """
    Turn raw references into canonical same-origin URLs.

    Drops non-navigable schemes, fragment-only references, anything that fails
    to resolve against *page_url* and anything outside the origin of *base_url*.
    """
    links: Set[str] = set()
    for ref in refs:
        ref = ref.strip()
        if not ref or ref.startswith("#"):
            continue
        if ref.lower().startswith(SKIP_SCHEMES):
            continue
        try:
            absolute = canonicalize(ref, page_url)
            if not same_origin(absolute, base_url):
                continue
        except MalformedURL:
            continue
        links.add(absolute)
    return links


class LinkExtractor:
    """Base strategy: ``extract(page, page_url)`` returns canonical URLs."""

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url

    def references(self, page: Success) -> Iterable[str]:
        raise NotImplementedError

    def extract(self, page: Success, page_url: str) -> Set[str]:
        return filter_links(self.references(page), page.final_url or page_url, self.base_url)


class MarkupLinkExtractor(LinkExtractor):
    """Scans raw markup for href- and src-bearing references."""

    def references(self, page: Success) -> Iterable[str]:
        content = page.content
        if isinstance(content, bytes):
            content = content.decode("utf-8", errors="replace")
        soup = BeautifulSoup(content, "html.parser")
        for tag in soup.find_all(_has_link_attr):
            if not isinstance(tag, Tag):
                continue
            for attr in _LINK_ATTRS:
                value = tag.get(attr)
                if isinstance(value, str):
                    yield value


class DomLinkExtractor(LinkExtractor):
    """Uses anchors queried from the rendered document."""

    def references(self, page: Success) -> Iterable[str]:
        return page.dom_links or ()


def create_extractor(mode: str, base_url: str) -> LinkExtractor:
    if mode == "raw":
        return MarkupLinkExtractor(base_url)
    return DomLinkExtractor(base_url)
