"""Core data types for the harvester.

A unit of work is a Job: one entity ID fetched in one Mode. Jobs are never
persisted; they are rebuilt from the ID range on every run and checked
against the filesystem ledger.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

ARTIFACT_PREFIX = "pokedex_"
ARTIFACT_SUFFIX = ".bmp"
ID_WIDTH = 4


class Mode(Enum):
    """Named view of an entity on the remote site.

    The value is written verbatim into the remote ``viewMode`` field.
    """

    ABOUT = "about"
    STATS = "stats"


def pad_id(entity_id: int) -> str:
    """Zero-pad an entity ID the way the remote display renders it."""
    return f"{entity_id:0{ID_WIDTH}d}"


@dataclass(frozen=True)
class Job:
    """One (entity ID, mode) pair.

    Attributes:
        entity_id: Catalog number in ``[1, max_id]``.
        mode: Which view of the entity to fetch.
    """

    entity_id: int
    mode: Mode

    @property
    def padded_id(self) -> str:
        return pad_id(self.entity_id)

    @property
    def label(self) -> str:
        return f"{self.padded_id} [{self.mode.value}]"

    def __str__(self) -> str:
        return self.label


class JobOutcome(Enum):
    """Terminal state of a single job run."""

    SKIPPED = "skipped"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class WorkerReport:
    """Outcome tally owned by exactly one worker thread.

    Attributes:
        worker_id: 1-based worker number.
        started: False if the worker's session never came up.
        ids_processed: Entity IDs this worker pulled off the queue.
        outcomes: Count per JobOutcome.
    """

    worker_id: int
    started: bool = False
    ids_processed: int = 0
    outcomes: dict[JobOutcome, int] = field(
        default_factory=lambda: {outcome: 0 for outcome in JobOutcome}
    )

    def record(self, outcome: JobOutcome) -> None:
        self.outcomes[outcome] += 1


@dataclass
class RunSummary:
    """Merged view of every worker's report after the completion barrier.

    Attributes:
        workers: Reports in worker order.
        unprocessed: IDs left on the queue when all workers had exited.
    """

    workers: list[WorkerReport]
    unprocessed: int = 0

    def count(self, outcome: JobOutcome) -> int:
        return sum(report.outcomes[outcome] for report in self.workers)

    @property
    def completed(self) -> int:
        return self.count(JobOutcome.COMPLETED)

    @property
    def skipped(self) -> int:
        return self.count(JobOutcome.SKIPPED)

    @property
    def failed(self) -> int:
        return self.count(JobOutcome.FAILED)

    @property
    def workers_started(self) -> int:
        return sum(1 for report in self.workers if report.started)

    @property
    def drained(self) -> bool:
        """True when every queued ID was handed to some worker."""
        return self.unprocessed == 0
