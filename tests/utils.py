"""Test utilities for harvester tests.

The remote site is replaced by FakeSession, a scripted RemoteSession that
records every command and writes the downloaded card to disk the way the
browser would.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, urlparse

from dexgrab.common.exceptions import (
    SessionException,
    SessionTimeoutException,
)

NAMES = {
    1: "Bulba",
    2: "Ivy",
    3: "Venu",
    4: "Charm",
    5: "Charmel",
    151: "Mew",
    152: "Chiko",
}


class FakeSession:
    """Scripted stand-in for a browser session.

    Args:
        names: Display name per entity ID. Unknown IDs get ``Mon<id>``.
        fail: Map of (entity_id, mode value) to the step that should raise
            SessionException for that job. Steps: navigate, select,
            wait_ready, read_name, download.
        hang: Set of (entity_id, mode value) whose readiness poll never
            succeeds; the poll blocks for its full timeout.
        fail_warmup: Raise on the about:blank warm-up navigation.
        download_delay: Seconds before the downloaded file appears on disk.
        saved_name: Override for the file name the "browser" writes.
    """

    def __init__(
        self,
        names: dict[int, str] | None = None,
        fail: dict[tuple[int, str], str] | None = None,
        hang: set[tuple[int, str]] | None = None,
        fail_warmup: bool = False,
        download_delay: float = 0.0,
        saved_name: Callable[[str], str] | None = None,
    ) -> None:
        self.names = names if names is not None else NAMES
        self.fail = fail or {}
        self.hang = hang or set()
        self.fail_warmup = fail_warmup
        self.download_delay = download_delay
        self.saved_name = saved_name or (lambda name: f"pokedex_{name}.bmp")

        self.calls: list[tuple[str, Any]] = []
        self.jobs: list[tuple[int, str]] = []
        self.thread_ids: set[int] = set()
        self.download_dir: Path | None = None
        self.current_id: int | None = None
        self.current_mode: str | None = None

    def _record(self, action: str, value: Any = None) -> None:
        self.thread_ids.add(threading.get_ident())
        self.calls.append((action, value))

    def _maybe_fail(self, step: str) -> None:
        # The mode is only known after "select", so a navigate failure
        # hits every mode of that ID.
        for (entity_id, mode), failing_step in self.fail.items():
            if (
                failing_step == step
                and entity_id == self.current_id
                and (step == "navigate" or mode == self.current_mode)
            ):
                raise SessionException(
                    f"scripted failure for {entity_id} [{mode}]", step
                )

    @property
    def remote_calls(self) -> list[tuple[str, Any]]:
        """Calls other than the warm-up navigation."""
        return [c for c in self.calls if c != ("navigate", "about:blank")]

    def name_for(self, entity_id: int) -> str:
        return self.names.get(entity_id, f"Mon{entity_id}")

    def configure_downloads(self, path: Path) -> None:
        self._record("configure_downloads", path)
        self.download_dir = path

    def navigate(self, url: str, timeout: float) -> None:
        self._record("navigate", url)
        if url == "about:blank":
            if self.fail_warmup:
                raise SessionException("browser did not start", "navigate")
            return
        self.current_id = int(parse_qs(urlparse(url).query)["id"][0])
        self.current_mode = None
        self._maybe_fail("navigate")

    def evaluate(self, script: str, arg: Any, timeout: float) -> Any:
        self._record("evaluate", arg)
        mode, entity_id = arg
        self.current_mode = mode
        self.current_id = entity_id
        self.jobs.append((entity_id, mode))
        self._maybe_fail("select")
        return None

    def poll(
        self, predicate: str, arg: Any, timeout: float, interval: float
    ) -> None:
        self._record("poll", arg)
        if (self.current_id, self.current_mode) in self.hang:
            time.sleep(timeout)
            raise SessionTimeoutException("poll", timeout)
        self._maybe_fail("wait_ready")
        assert arg == f"{self.current_id:04d}"

    def text(self, selector: str, timeout: float) -> str:
        self._record("text", selector)
        self._maybe_fail("read_name")
        return f" {self.name_for(self.current_id)}\n"

    def click(self, selector: str, timeout: float) -> None:
        self._record("click", selector)

    def download(self, selector: str, timeout: float) -> Path:
        self._record("download", selector)
        self._maybe_fail("download")
        assert self.download_dir is not None
        target = self.download_dir / self.saved_name(
            self.name_for(self.current_id)
        )
        if self.download_delay:
            timer = threading.Timer(
                self.download_delay, target.write_bytes, args=(b"BM",)
            )
            timer.start()
        else:
            target.write_bytes(b"BM")
        return target

    def sleep(self, seconds: float) -> None:
        self._record("sleep", seconds)
        if seconds > 0:
            time.sleep(seconds)


class FakeSessionFactory:
    """SessionFactory that hands out a new FakeSession per call.

    Args:
        failing_starts: How many of the first sessions fail warm-up.
        **session_kwargs: Passed to every FakeSession.
    """

    def __init__(self, failing_starts: int = 0, **session_kwargs: Any) -> None:
        self.failing_starts = failing_starts
        self.session_kwargs = session_kwargs
        self.sessions: list[FakeSession] = []
        self.closed: list[FakeSession] = []
        self._lock = threading.Lock()

    def __call__(self) -> Any:
        with self._lock:
            fail_warmup = len(self.sessions) < self.failing_starts
            session = FakeSession(fail_warmup=fail_warmup, **self.session_kwargs)
            self.sessions.append(session)
        return self._open(session)

    @contextmanager
    def _open(self, session: FakeSession) -> Iterator[FakeSession]:
        try:
            yield session
        finally:
            with self._lock:
                self.closed.append(session)

    @property
    def all_jobs(self) -> list[tuple[int, str]]:
        return [job for session in self.sessions for job in session.jobs]


def saved_files(root: Path) -> list[str]:
    """Relative paths of every file under root, sorted."""
    return sorted(
        path.relative_to(root).as_posix()
        for path in root.rglob("*") if path.is_file()
    )
