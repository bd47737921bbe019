"""Tests for per-job deadlines."""

import time

import pytest

from dexgrab.common.deadline import Deadline, job_deadline
from dexgrab.common.exceptions import DeadlineExceeded, ProtocolFailure


class TestDeadline:
    def test_remaining_counts_down(self) -> None:
        deadline = Deadline.after(10.0)

        assert 9.0 < deadline.remaining() <= 10.0
        assert deadline.expired is False

    def test_remaining_never_negative(self) -> None:
        deadline = Deadline.after(-5.0)

        assert deadline.remaining() == 0.0
        assert deadline.expired is True

    def test_bound_clamps_to_remaining(self) -> None:
        deadline = Deadline.after(0.5)

        assert deadline.bound(3.0) <= 0.5
        assert deadline.bound(0.1) == 0.1

    def test_check_raises_once_expired(self) -> None:
        """An expired deadline is reported as a protocol failure."""
        deadline = Deadline.after(0.01)
        time.sleep(0.02)

        with pytest.raises(DeadlineExceeded) as exc_info:
            deadline.check("wait_ready", 7, "about")

        assert isinstance(exc_info.value, ProtocolFailure)
        assert exc_info.value.step == "wait_ready"
        assert exc_info.value.entity_id == 7

    def test_check_passes_with_time_left(self) -> None:
        Deadline.after(5.0).check("navigate", 1, "about")


class TestJobDeadline:
    def test_scope_yields_fresh_deadline(self) -> None:
        with job_deadline(2.0) as deadline:
            assert 1.5 < deadline.remaining() <= 2.0
