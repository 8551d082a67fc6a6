"""
Fetcher module: retrieves one URL with a deadline and reports what happened.

Two interchangeable strategies share the ``fetch(url) -> FetchOutcome``
contract:

* :class:`HttpFetcher` – plain GET through one reused aiohttp session,
  scripts are not executed.
* :class:`BrowserFetcher` – headless Chromium through Playwright; waits for
  network idle and returns the rendered DOM, its anchors and a full-page PNG.

Neither strategy retries. A deadline overrun or a connection error is turned
into :class:`~site_snapshot.crawler.models.Failure` and only aborts that fetch.
"""
from __future__ import annotations

import asyncio
from typing import Optional
from urllib.parse import urljoin

from aiohttp import ClientError, ClientSession, ClientTimeout
from playwright.async_api import Browser, BrowserContext, Page, Playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Response as PlaywrightResponse
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from site_snapshot.config import CrawlConfig
from site_snapshot.crawler.models import (
    FetchOutcome,
    Failure,
    HttpError,
    Redirect,
    Success,
    is_html,
)
from site_snapshot.crawler.urls import MalformedURL, canonicalize

__all__ = ("Fetcher", "HttpFetcher", "BrowserFetcher", "create_fetcher")

#: Max hops followed inside one fetch when a redirect lands on the same canonical URL.
MAX_CANONICAL_HOPS = 5

#: Collects the resolved ``href`` of every anchor in the live document.
_ANCHORS_JS = "anchors => anchors.map(a => a.href)"


def _same_key(url: str, other: str) -> bool:
    try:
        return canonicalize(url) == canonicalize(other)
    except MalformedURL:
        return False


class Fetcher:
    """Common interface: async context manager with ``fetch``."""

    mode: str = ""

    def __init__(self, config: CrawlConfig) -> None:
        self.config = config
        self.timeout: float = config.fetch_timeout

    async def __aenter__(self) -> Fetcher:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def fetch(self, url: str) -> FetchOutcome:
        raise NotImplementedError

    def _timeout_failure(self, detail: str = "") -> Failure:
        message = f"TimeoutError: no response within {self.timeout:g}s"
        if detail:
            message = f"{message} ({detail})"
        return Failure(message, kind="timeout")


class HttpFetcher(Fetcher):
    """Raw-HTTP strategy backed by a single aiohttp session."""

    mode = "raw"

    def __init__(self, config: CrawlConfig) -> None:
        super().__init__(config)
        self.session: Optional[ClientSession] = None

    async def __aenter__(self) -> HttpFetcher:
        self.session = ClientSession(
            timeout=ClientTimeout(total=self.timeout),
            headers={"User-Agent": self.config.user_agent},
            raise_for_status=False,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def fetch(self, url: str) -> FetchOutcome:
        """GET *url*; redirects onto the same canonical URL are followed in place."""
        current = url
        outcome = await self._get(current)
        hops = 0
        while (
            isinstance(outcome, Redirect)
            and hops < MAX_CANONICAL_HOPS
            and outcome.target != current
            and _same_key(outcome.target, url)
        ):
            current = outcome.target
            hops += 1
            outcome = await self._get(current)
        if isinstance(outcome, Success) and current != url:
            return Success(
                outcome.status_code,
                outcome.content_type,
                outcome.content,
                final_url=current,
            )
        return outcome

    async def _get(self, url: str) -> FetchOutcome:
        if not self.session:
            raise RuntimeError("Session not initialized")
        try:
            async with self.session.get(url, allow_redirects=False) as resp:
                status = resp.status
                ctype = resp.headers.get("Content-Type", "")
                if 300 <= status < 400:
                    location = resp.headers.get("Location")
                    if location:
                        try:
                            return Redirect(status, urljoin(url, location))
                        except ValueError:
                            pass
                    return HttpError(status, ctype or None)
                if not 200 <= status < 300:
                    return HttpError(status, ctype or None)
                if is_html(ctype):
                    return Success(status, ctype, await resp.text(errors="replace"))
                return Success(status, ctype, b"")
        except asyncio.TimeoutError:
            return self._timeout_failure()
        except ClientError as exc:
            return Failure(f"{type(exc).__name__}: {exc}")


class BrowserFetcher(Fetcher):
    """Rendered strategy: one Playwright page reused for every navigation."""

    mode = "rendered"

    def __init__(self, config: CrawlConfig) -> None:
        super().__init__(config)
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None

    async def __aenter__(self) -> BrowserFetcher:
        self._playwright = await async_playwright().start()
        launch_kwargs = {}
        if self.config.browser_channel:
            launch_kwargs["channel"] = self.config.browser_channel
        try:
            self._browser = await self._playwright.chromium.launch(**launch_kwargs)
            self._context = await self._browser.new_context(
                viewport={"width": self.config.viewport_width, "height": self.config.viewport_height},
                user_agent=self.config.user_agent,
            )
            self.page = await self._context.new_page()
        except BaseException:
            await self.__aexit__(None, None, None)
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def fetch(self, url: str) -> FetchOutcome:
        """Navigate, wait for network idle, then read DOM, anchors and screenshot."""
        if self.page is None:
            raise RuntimeError("Browser not initialized")
        page = self.page
        timeout_ms = self.timeout * 1000
        try:
            response = await page.goto(url, wait_until="networkidle", timeout=timeout_ms)
            if response is None:
                return Failure("Error: navigation produced no response")

            final_url = page.url
            if response.request.redirected_from is not None and not _same_key(final_url, url):
                return await self._first_hop(response)

            status = response.status
            ctype = await response.header_value("content-type") or ""
            if not 200 <= status < 300:
                return HttpError(status, ctype or None)
            if not is_html(ctype):
                return Success(status, ctype, b"")

            html = await page.content()
            hrefs = await page.eval_on_selector_all("a[href]", _ANCHORS_JS)
            screenshot = await page.screenshot(full_page=True, timeout=timeout_ms)
            return Success(
                status,
                ctype,
                html,
                screenshot=screenshot,
                dom_links=frozenset(h for h in hrefs if isinstance(h, str)),
                final_url=final_url if final_url != url else None,
            )
        except PlaywrightTimeoutError as exc:
            return self._timeout_failure(exc.message.splitlines()[0] if exc.message else "")
        except PlaywrightError as exc:
            return Failure(f"{type(exc).__name__}: {exc.message}")

    @staticmethod
    async def _first_hop(response: PlaywrightResponse) -> FetchOutcome:
        """Report a followed redirect chain as the redirect of its first hop."""
        first = response.request.redirected_from
        while first.redirected_from is not None:
            first = first.redirected_from
        first_response = await first.response()
        target = response.url
        status = 302
        if first_response is not None:
            status = first_response.status
            location = await first_response.header_value("location")
            if location:
                target = urljoin(first.url, location)
        return Redirect(status, target)


def create_fetcher(config: CrawlConfig) -> Fetcher:
    """Pick the fetch strategy for ``config.mode``."""
    if config.mode == "raw":
        return HttpFetcher(config)
    return BrowserFetcher(config)
