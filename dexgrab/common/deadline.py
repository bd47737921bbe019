"""Per-job deadlines.

A Deadline is the cancellation scope of one job. The protocol passes it to
every step, and each step gets at most the time that remains, so a hung
remote call ends close to the deadline instead of after its own timeout.
The session the job runs on is untouched when a deadline expires.
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from dexgrab.common.exceptions import DeadlineExceeded


@dataclass(frozen=True)
class Deadline:
    """Absolute expiry on the monotonic clock.

    Attributes:
        expires_at: ``time.monotonic()`` value at which the deadline passes.
    """

    expires_at: float

    @classmethod
    def after(cls, seconds: float) -> Deadline:
        return cls(time.monotonic() + seconds)

    def remaining(self) -> float:
        """Seconds left, never negative."""
        return max(0.0, self.expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0.0

    def bound(self, seconds: float) -> float:
        """Clamp a step's own timeout to the time that remains."""
        return min(seconds, self.remaining())

    def check(self, step: str, entity_id: int, mode: str) -> None:
        """Raise DeadlineExceeded if no time remains for ``step``."""
        if self.expired:
            raise DeadlineExceeded(step, entity_id, mode)


@contextmanager
def job_deadline(seconds: float) -> Iterator[Deadline]:
    """Open a deadline scope for one job.

    Example::

        with job_deadline(config.per_job_timeout) as deadline:
            run_protocol(session, job, download_dir, deadline, config)
    """
    yield Deadline.after(seconds)
