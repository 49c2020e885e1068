"""Single-use Playwright browser session.

A :class:`BrowserSession` owns one Chromium instance and one page for the
duration of a single job: open, navigate once, extract, close.  Sessions
are never pooled so cookies, scroll position and in-page script state
cannot leak between jobs.
"""

from __future__ import annotations

import logging
from typing import Any

from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    Response,
    async_playwright,
)
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright_stealth import Stealth

from vitrine.config import Settings, get_settings
from vitrine.scrapers import dom

logger = logging.getLogger(__name__)

# Scrolls the document in fixed steps until the offset passes the
# scrollable height, so lazy images start loading.  The height is re-read on
# every tick; maxSteps (null for no cap) only bounds endlessly growing feeds.
_SCROLL_SCRIPT = """
async ([step, interval, maxSteps]) => {
    await new Promise((resolve) => {
        let offset = 0;
        let steps = 0;
        const timer = setInterval(() => {
            window.scrollBy(0, step);
            offset += step;
            steps += 1;
            if (offset >= document.body.scrollHeight || (maxSteps !== null && steps >= maxSteps)) {
                clearInterval(timer);
                resolve();
            }
        }, interval);
    });
}
"""


def stealth_for(settings: Settings) -> Stealth:
    """Anti-detection patches matching the session's locale."""
    return Stealth(
        navigator_languages_override=(settings.locale, settings.locale.split("-")[0]),
    )


class NavigationError(Exception):
    """The target page could not be rendered."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(message)
        self.url = url
        self.message = message


class BrowserSession:
    """One headless browser + one page, released on every exit path."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._playwright = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("BrowserSession is not open")
        return self._page

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> Page:
        """Launch an isolated headless Chromium and return its page."""
        if self._page is not None:
            return self._page

        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self.settings.scraping_headless,
            args=self.settings.browser_args,
        )
        self._context = await self._browser.new_context(
            viewport={"width": 1280, "height": 800},
            locale=self.settings.locale,
            user_agent=self.settings.user_agent,
            extra_http_headers={"Accept-Language": self.settings.accept_language},
        )
        self._page = await self._context.new_page()
        if self.settings.scraping_stealth:
            # Hides navigator.webdriver and patches plugins/languages
            await stealth_for(self.settings).apply_stealth_async(self._page)
        return self._page

    async def close(self) -> None:
        """Release the page, context, browser and driver.

        Safe to call more than once and after a partial ``open()``.  Failures
        are logged and never raised.
        """
        page, self._page = self._page, None
        context, self._context = self._context, None
        browser, self._browser = self._browser, None
        driver, self._playwright = self._playwright, None

        for name, closer in (
            ("page", page.close if page else None),
            ("context", context.close if context else None),
            ("browser", browser.close if browser else None),
            ("playwright", driver.stop if driver else None),
        ):
            if closer is None:
                continue
            try:
                await closer()
            except Exception:
                logger.warning("Failed to close %s", name, exc_info=True)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    async def navigate(self, url: str, timeout_ms: int | None = None) -> Response | None:
        """Load *url* and wait for the network to go idle.

        Raises :class:`NavigationError` on timeout, unreachable host or a
        non-HTML main document.
        """
        page = await self.open()
        timeout = timeout_ms or self.settings.scraping_timeout
        logger.info("Navigating to %s (timeout %d ms)", url, timeout)
        try:
            response = await page.goto(url, wait_until="networkidle", timeout=timeout)
        except PlaywrightTimeoutError as exc:
            raise NavigationError(url, f"Timeout after {timeout} ms loading {url}") from exc
        except PlaywrightError as exc:
            raise NavigationError(url, exc.message or str(exc)) from exc

        if response is not None:
            content_type = response.headers.get("content-type", "")
            if content_type and "html" not in content_type.lower():
                raise NavigationError(url, f"Unsupported content type '{content_type}'")
        return response

    async def trigger_lazy_load(
        self,
        step: int | None = None,
        interval: int | None = None,
    ) -> None:
        """Scroll top to bottom in fixed steps so lazy images begin loading."""
        await dom.evaluate(
            self.page,
            _SCROLL_SCRIPT,
            [
                step or self.settings.scroll_step,
                interval or self.settings.scroll_interval,
                self.settings.scroll_max_steps,
            ],
        )

    async def settle(self, delay_ms: int | None = None) -> None:
        """Pause so images requested while scrolling can finish decoding."""
        delay = self.settings.settle_delay if delay_ms is None else delay_ms
        if delay <= 0:
            return
        try:
            await self.page.wait_for_timeout(delay)
        except PlaywrightError:
            logger.debug("Settle wait interrupted", exc_info=True)

    # ------------------------------------------------------------------
    # DOM access
    # ------------------------------------------------------------------

    async def query(self, selector: str) -> Any | None:
        return await dom.query(self.page, selector)

    async def query_all(self, selector: str) -> list[Any]:
        return await dom.query_all(self.page, selector)
