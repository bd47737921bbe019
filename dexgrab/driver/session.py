"""Remote session capability.

The harvest pipeline never touches a browser directly. It talks to a
RemoteSession, which any implementation can satisfy: the Playwright
session used in production, or the scripted double used in tests.

All timeouts are in seconds. Implementations raise SessionTimeoutException
when a command runs out of time and SessionException for any other remote
failure.
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Any, Protocol


class RemoteSession(Protocol):
    """A long-lived handle to one remote interactive page."""

    def configure_downloads(self, path: Path) -> None:
        """Save subsequent downloads into ``path``."""
        ...

    def navigate(self, url: str, timeout: float) -> None: ...

    def evaluate(self, script: str, arg: Any, timeout: float) -> Any:
        """Run a JS function expression in the page with ``arg``."""
        ...

    def poll(
        self, predicate: str, arg: Any, timeout: float, interval: float
    ) -> None:
        """Block until the JS predicate returns a truthy value."""
        ...

    def text(self, selector: str, timeout: float) -> str:
        """Inner text of the first element matching ``selector``."""
        ...

    def click(self, selector: str, timeout: float) -> None:
        """Click the first element matching ``selector``."""
        ...

    def download(self, selector: str, timeout: float) -> Path:
        """Click an element that starts a download and save the file.

        Returns:
            Path of the file in the configured download folder.
        """
        ...

    def sleep(self, seconds: float) -> None: ...


SessionFactory = Callable[[], AbstractContextManager[RemoteSession]]
