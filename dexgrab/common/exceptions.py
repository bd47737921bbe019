"""Exception types for harvest errors.

Session implementations raise TransientException subclasses. The protocol
and finalizer turn those into JobException subclasses that carry the job
identity; the job runner logs them and moves on. Only
SessionStartupFailure ends a worker.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

# =============================================================================
# Transient exceptions raised by remote sessions
# =============================================================================


class TransientException(Exception):
    """Base class for errors that might resolve on a later attempt.

    Transient exceptions represent temporary failures of the remote side:
    navigation errors, missing elements, timeouts. The job runner is
    responsible for backing off; nothing below it retries.
    """

    pass


class SessionException(TransientException):
    """Raised when a remote session command fails."""

    def __init__(self, message: str, action: str) -> None:
        """Initialize the exception.

        Args:
            message: Description of the failure.
            action: The session command that failed (navigate, click, ...).
        """
        self.action = action
        super().__init__(f"{action}: {message}")


class SessionTimeoutException(SessionException):
    """Raised when a remote session command runs out of time."""

    def __init__(self, action: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"timed out after {timeout:.1f}s", action)


# =============================================================================
# Job exceptions
# =============================================================================


class JobException(Exception):
    """Base class for failures of a single (ID, mode) job.

    Subclasses provide specific context about which stage failed. A job
    exception never aborts more than the job it belongs to.
    """

    def __init__(
        self,
        message: str,
        entity_id: int,
        mode: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable description of the failure.
            entity_id: ID of the job that failed.
            mode: Mode value of the job that failed.
            context: Optional dict of additional context.
        """
        self.message = message
        self.entity_id = entity_id
        self.mode = mode
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [self.message]
        parts.append(f"Job: {self.entity_id:04d} [{self.mode}]")

        if self.context:
            parts.append("Context:")
            for key, value in self.context.items():
                parts.append(f"  {key}: {value}")

        return "\n".join(parts)


class ProtocolFailure(JobException):
    """Raised when a step of the remote session protocol fails.

    Attributes:
        step: Name of the protocol step that failed.
    """

    def __init__(
        self,
        step: str,
        reason: str,
        entity_id: int,
        mode: str,
    ) -> None:
        self.step = step
        self.reason = reason
        super().__init__(
            f"Remote step '{step}' failed: {reason}",
            entity_id,
            mode,
            {"step": step},
        )


class DeadlineExceeded(ProtocolFailure):
    """Raised when the per-job deadline expires mid-protocol."""

    def __init__(self, step: str, entity_id: int, mode: str) -> None:
        super().__init__(step, "job deadline exceeded", entity_id, mode)


class FinalizeTimeout(JobException):
    """Raised when the downloaded file never shows up on disk.

    Attributes:
        expected: File names that were looked for.
        retries: Number of polling attempts made.
    """

    def __init__(
        self,
        expected: list[str],
        retries: int,
        entity_id: int,
        mode: str,
    ) -> None:
        self.expected = expected
        self.retries = retries
        super().__init__(
            f"File {expected[0]} did not appear after {retries} attempts",
            entity_id,
            mode,
            {"expected": ", ".join(expected), "retries": retries},
        )


class RenameFailure(JobException):
    """Raised when the downloaded file cannot be moved to its final name."""

    def __init__(
        self,
        source: Path,
        target: Path,
        reason: str,
        entity_id: int,
        mode: str,
    ) -> None:
        self.source = source
        self.target = target
        super().__init__(
            f"Could not rename {source.name} to {target.name}: {reason}",
            entity_id,
            mode,
            {"source": source, "target": target},
        )


# =============================================================================
# Worker exceptions
# =============================================================================


class SessionStartupFailure(Exception):
    """Raised when a worker cannot bring its session up.

    Fatal to that worker only. The worker exits without pulling any IDs.
    """

    def __init__(self, worker_id: int, reason: str) -> None:
        self.worker_id = worker_id
        self.reason = reason
        super().__init__(f"Worker {worker_id} failed to start: {reason}")
