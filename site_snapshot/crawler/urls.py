"""
URL canonicalization for SiteSnapshot.

A canonical URL is the dedup key of the crawl and the source of snapshot
filenames: ``scheme://host[:port]/path`` with query and fragment removed,
scheme and host lower-cased and default ports dropped. The path has its dot
segments and repeated slashes removed, is percent-encoded one fixed way
(``/café`` and ``/caf%C3%A9`` give the same key) and keeps no trailing slash
except on the root.
"""
from __future__ import annotations

import posixpath
from typing import Optional, Tuple
from urllib.parse import quote, unquote, urljoin, urlsplit

__all__ = (
    "MalformedURL",
    "canonicalize",
    "origin",
    "same_origin",
    "pathname",
    "filename_for",
)

_DEFAULT_PORTS = {"http": 80, "https": 443}

# RFC 3986 pchar sub-delims stay literal; "%" is always re-encoded so the key is stable.
_PATH_SAFE = "/:@!$&'()*+,;="


class MalformedURL(ValueError):
    """Raised when a reference cannot be parsed or resolved to an absolute URL."""

    def __init__(self, url: str, reason: str = "cannot be parsed") -> None:
        super().__init__(f"Malformed URL {url!r}: {reason}")
        self.url = url
        self.reason = reason


def _split(url: str):
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError as exc:
        raise MalformedURL(url, str(exc)) from exc
    scheme = parts.scheme.lower()
    host = parts.hostname
    if not scheme or not host:
        raise MalformedURL(url, "missing scheme or host")
    if port is None:
        port = _DEFAULT_PORTS.get(scheme)
    return parts, scheme, host, port


def canonicalize(url: str, base: Optional[str] = None) -> str:
    """Return the canonical form of *url*, resolved against *base* if given."""
    try:
        joined = urljoin(base, url) if base else url
    except ValueError as exc:
        raise MalformedURL(url, str(exc)) from exc
    parts, scheme, host, port = _split(joined)

    netloc = f"[{host}]" if ":" in host else host
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        netloc = f"{netloc}:{port}"

    return f"{scheme}://{netloc}{_normalize_path(parts.path)}"


def _normalize_path(path: str) -> str:
    """Decode, drop dot segments and re-encode; no trailing slash except on ``/``."""
    norm = posixpath.normpath(unquote(path or "/"))
    # normpath keeps a leading "//"
    norm = "/" + norm.lstrip("/")
    return quote(norm, safe=_PATH_SAFE)


def origin(url: str) -> Tuple[str, str, Optional[int]]:
    """Return ``(scheme, host, port)`` with the default port filled in."""
    _, scheme, host, port = _split(url)
    return scheme, host, port


def same_origin(url: str, other: str) -> bool:
    return origin(url) == origin(other)


def pathname(url: str) -> str:
    return urlsplit(url).path or "/"


def filename_for(url: str) -> str:
    """Map a canonical URL to a flat artifact name: ``/blog/post`` → ``blog_post``."""
    name = pathname(url).lstrip("/").replace("/", "_")
    return name or "index"
