"""Playwright-based remote sessions.

This module provides the production RemoteSession: one headless browser
page per worker, driven through Playwright's sync API.
"""

from dexgrab.driver.playwright_driver.playwright_session import (
    PlaywrightSession,
    playwright_session_factory,
)

__all__ = ["PlaywrightSession", "playwright_session_factory"]
