"""Headless Chromium session lifecycle for price lookups."""

from __future__ import annotations

import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, List, Optional

from playwright.async_api import Browser, Page, Playwright, async_playwright

from .models import SessionLaunchError
from .utils import USER_AGENT

logger = logging.getLogger("price_search.browser")

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
]
VIEWPORT = {"width": 1280, "height": 720}

# Third party ad/tracker hosts whose failed requests are expected noise.
IGNORED_REQUEST_FAILURE_HOSTS = (
    "tatadigital.com",
    "bidswitch.net",
    "socdm.com",
    "casalemedia.com",
    "dmxleo.com",
    "adingo.jp",
    "360yield.com",
    "rlcdn.com",
    "media.net",
    "outbrain.com",
    "pubmatic.com",
    "rubiconproject.com",
    "smartadserver.com",
    "teads.tv",
    "clmbtech.com",
    "3lift.com",
    "1rx.io",
)


def _macos_candidates(home: str) -> List[str]:
    return [
        "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
        f"{home}/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
        "/Applications/Chromium.app/Contents/MacOS/Chromium",
        f"{home}/Applications/Chromium.app/Contents/MacOS/Chromium",
    ]


def resolve_browser_executable(
    primary: Optional[str] = None,
    secondary: Optional[str] = None,
    platform: str = sys.platform,
    home: Optional[str] = None,
) -> Optional[str]:
    """Pick the Chromium binary to launch.

    Explicit overrides win, then known macOS install locations. ``None``
    lets Playwright use its bundled Chromium.
    """
    if primary:
        return primary
    if secondary:
        return secondary

    if platform == "darwin":
        home_dir = home if home is not None else os.environ.get("HOME", "")
        for candidate in _macos_candidates(home_dir):
            if os.path.exists(candidate):
                return candidate

    return None


def _is_ignored_request_failure(url: str, error_text: Optional[str]) -> bool:
    if error_text == "net::ERR_ABORTED":
        return True
    return any(host in url for host in IGNORED_REQUEST_FAILURE_HOSTS)


def _attach_page_listeners(page: Page) -> None:
    """Log crashes and noisy failures coming from inside Chromium."""

    def on_crash(_page: Any) -> None:
        logger.warning("Page crashed: %s", page.url)

    def on_page_error(error: Any) -> None:
        logger.info("Page script error: %s", getattr(error, "message", error))

    def on_request_failed(request: Any) -> None:
        error_text = request.failure
        if _is_ignored_request_failure(request.url or "", error_text):
            return
        logger.info("Request failed: %s %s", request.url, error_text or "unknown")

    page.on("crash", on_crash)
    page.on("pageerror", on_page_error)
    page.on("requestfailed", on_request_failed)


class BrowserSession:
    """One running Chromium process, scoped to a single fetch cycle."""

    def __init__(self, playwright: Playwright, browser: Browser) -> None:
        self.playwright = playwright
        self.browser = browser

    @asynccontextmanager
    async def open_page(self) -> AsyncIterator[Page]:
        """Yield an isolated page that is closed on every exit path."""
        context = await self.browser.new_context(
            user_agent=USER_AGENT, viewport=VIEWPORT
        )
        page: Optional[Page] = None
        try:
            page = await context.new_page()
            _attach_page_listeners(page)
            yield page
        finally:
            if page is not None:
                try:
                    await page.close()
                except Exception as exc:
                    logger.warning("Failed closing page: %s", exc)
            try:
                await context.close()
            except Exception as exc:
                logger.warning("Failed closing browser context: %s", exc)


class BrowserSessionManager:
    """Launch and tear down browser sessions."""

    def __init__(
        self,
        executable_path: Optional[str] = None,
        headless: bool = True,
        driver_factory: Callable[[], Any] = async_playwright,
    ) -> None:
        self.executable_path = executable_path
        self.headless = headless
        self.driver_factory = driver_factory

    async def acquire(self) -> BrowserSession:
        """Start Playwright and Chromium, raising SessionLaunchError on failure."""
        playwright: Optional[Playwright] = None
        try:
            playwright = await self.driver_factory().start()
            launch_options: dict[str, Any] = {
                "headless": self.headless,
                "args": LAUNCH_ARGS,
            }
            if self.executable_path:
                launch_options["executable_path"] = self.executable_path
            browser = await playwright.chromium.launch(**launch_options)
        except Exception as exc:
            logger.error("Browser launch failed: %s", exc)
            if playwright is not None:
                try:
                    await playwright.stop()
                except Exception as stop_exc:
                    logger.warning("Failed stopping Playwright: %s", stop_exc)
            raise SessionLaunchError(f"Unable to launch browser: {exc}") from exc

        logger.debug("Browser session started (executable=%s)", self.executable_path)
        return BrowserSession(playwright, browser)

    async def release(self, session: BrowserSession) -> None:
        """Close the browser and stop Playwright. Never raises."""
        try:
            await session.browser.close()
        except Exception as exc:
            logger.warning("Failed closing browser: %s", exc)
        try:
            await session.playwright.stop()
        except Exception as exc:
            logger.warning("Failed stopping Playwright: %s", exc)
