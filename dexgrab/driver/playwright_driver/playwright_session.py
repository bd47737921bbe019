"""Playwright implementation of the remote session capability.

Each PlaywrightSession owns its own Playwright instance, browser, context
and page. The sync API binds those objects to the thread that started
them, so a session must be opened on the worker thread that uses it; see
playwright_session_factory().

Downloads are captured with ``page.expect_download()`` and saved into the
configured folder under the browser's suggested filename, which is what
the finalizer looks for.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from playwright.sync_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    sync_playwright,
)
from playwright.sync_api import (
    Error as PlaywrightError,
)
from playwright.sync_api import (
    TimeoutError as PlaywrightTimeoutError,
)

from dexgrab.common.exceptions import (
    SessionException,
    SessionTimeoutException,
)
from dexgrab.config import HarvestConfig
from dexgrab.driver.session import SessionFactory

logger = logging.getLogger(__name__)


def _ms(seconds: float) -> float:
    # Playwright treats 0 as "no timeout"; keep an expired budget expired.
    return max(seconds * 1000.0, 1.0)


@contextmanager
def _translate_errors(action: str, timeout: float) -> Iterator[None]:
    try:
        yield
    except PlaywrightTimeoutError as e:
        logger.debug(f"Playwright timeout during {action}: {e}")
        raise SessionTimeoutException(action, timeout) from e
    except PlaywrightError as e:
        raise SessionException(e.message, action) from e


class PlaywrightSession:
    """RemoteSession backed by a single Playwright page.

    Args:
        playwright: Started sync Playwright instance.
        browser: Browser launched from ``playwright``.
        context: Browser context with downloads enabled.
        page: The page every command runs against.

    Example:
        with PlaywrightSession.open(browser_type="chromium") as session:
            session.navigate("about:blank", timeout=10)
    """

    def __init__(
        self,
        playwright: Playwright,
        browser: Browser,
        context: BrowserContext,
        page: Page,
    ) -> None:
        self.playwright = playwright
        self.browser = browser
        self.context = context
        self.page = page
        self.download_dir: Path | None = None

    @classmethod
    @contextmanager
    def open(
        cls,
        browser_type: str = "chromium",
        headless: bool = True,
    ) -> Iterator[PlaywrightSession]:
        """Launch a browser and yield a session on a fresh page.

        The browser and Playwright driver are always shut down on exit.

        Args:
            browser_type: "chromium", "firefox", or "webkit".
            headless: Run without a window (default: True).
        """
        playwright = sync_playwright().start()
        try:
            launcher = getattr(playwright, browser_type)
            launch_args = ["--no-sandbox"] if browser_type == "chromium" else []
            browser = launcher.launch(headless=headless, args=launch_args)
            try:
                context = browser.new_context(accept_downloads=True)
                try:
                    page = context.new_page()
                    yield cls(playwright, browser, context, page)
                finally:
                    context.close()
            finally:
                browser.close()
        finally:
            playwright.stop()

    def configure_downloads(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)
        self.download_dir = path

    def navigate(self, url: str, timeout: float) -> None:
        with _translate_errors("navigate", timeout):
            self.page.goto(url, wait_until="load", timeout=_ms(timeout))

    def evaluate(self, script: str, arg: Any, timeout: float) -> Any:
        # page.evaluate takes no timeout. wait_for_function does, and the
        # wrapper is truthy on its first call, so the script runs once.
        wrapped = f"(arg) => ({{ value: ({script})(arg) }})"
        with _translate_errors("evaluate", timeout):
            handle = self.page.wait_for_function(
                wrapped, arg=arg, timeout=_ms(timeout)
            )
            try:
                return handle.json_value().get("value")
            finally:
                handle.dispose()

    def poll(
        self, predicate: str, arg: Any, timeout: float, interval: float
    ) -> None:
        with _translate_errors("poll", timeout):
            self.page.wait_for_function(
                predicate,
                arg=arg,
                timeout=_ms(timeout),
                polling=_ms(interval),
            )

    def text(self, selector: str, timeout: float) -> str:
        with _translate_errors("text", timeout):
            return self.page.locator(selector).first.inner_text(
                timeout=_ms(timeout)
            )

    def click(self, selector: str, timeout: float) -> None:
        with _translate_errors("click", timeout):
            self.page.locator(selector).first.click(timeout=_ms(timeout))

    def download(self, selector: str, timeout: float) -> Path:
        if self.download_dir is None:
            raise SessionException("no download folder configured", "download")

        started = time.monotonic()
        with _translate_errors("download", timeout):
            with self.page.expect_download(timeout=_ms(timeout)) as info:
                self.page.locator(selector).first.click(timeout=_ms(timeout))
            download = info.value
            target = self.download_dir / download.suggested_filename
            download.save_as(target)

        logger.debug(
            f"Saved {target.name} in {time.monotonic() - started:.2f}s"
        )
        return target

    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            self.page.wait_for_timeout(seconds * 1000.0)


def playwright_session_factory(config: HarvestConfig) -> SessionFactory:
    """Build a factory that opens one PlaywrightSession per call.

    The returned callable is invoked on each worker thread.
    """

    def factory() -> Any:
        return PlaywrightSession.open(
            browser_type=config.browser_type,
            headless=config.headless,
        )

    return factory
