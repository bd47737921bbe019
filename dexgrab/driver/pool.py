"""Worker pool and dispatcher.

HarvestDriver enumerates the whole ID range into a queue before any worker
starts. Nothing is added after that, so an empty queue means the run is
drained. Each worker thread opens its own session, pulls IDs until the
queue is empty, and runs every configured mode for an ID before pulling
the next one. The dispatcher blocks on joining every worker.

Workers keep their own WorkerReport. No counters are shared across
threads; the reports are merged after the join.
"""

from __future__ import annotations

import logging
import queue
import threading

from dexgrab.common.exceptions import SessionStartupFailure
from dexgrab.config import HarvestConfig
from dexgrab.data_types import Job, RunSummary, WorkerReport
from dexgrab.driver.job_runner import process
from dexgrab.driver.session import RemoteSession, SessionFactory

logger = logging.getLogger(__name__)

WARMUP_URL = "about:blank"


class HarvestDriver:
    """Thread-pool driver for a full harvest run.

    Args:
        config: Run configuration.
        session_factory: Zero-argument callable returning a context
            manager that yields a RemoteSession. Called once per worker,
            on that worker's thread.
        stop_event: Optional threading.Event for graceful shutdown. When
            set, workers finish the ID in hand and stop pulling new ones.

    Example:
        from dexgrab.driver.playwright_driver import playwright_session_factory

        driver = HarvestDriver(config, playwright_session_factory(config))
        summary = driver.run()
    """

    def __init__(
        self,
        config: HarvestConfig,
        session_factory: SessionFactory,
        stop_event: threading.Event | None = None,
    ) -> None:
        self.config = config
        self.session_factory = session_factory
        self.stop_event = stop_event
        self.job_queue: queue.Queue[int] = queue.Queue(maxsize=config.max_id)

    def _fill_queue(self) -> None:
        self.job_queue = queue.Queue(maxsize=self.config.max_id)
        for entity_id in range(1, self.config.max_id + 1):
            self.job_queue.put_nowait(entity_id)

    def _next_id(self) -> int | None:
        """Pull the next ID, or None once the queue is drained."""
        try:
            return self.job_queue.get_nowait()
        except queue.Empty:
            return None

    def run(self) -> RunSummary:
        """Process every ID in ``[1, max_id]`` and wait for all workers.

        Returns:
            Merged outcome counts of all workers.
        """
        if self.stop_event and self.stop_event.is_set():
            return RunSummary(workers=[], unprocessed=self.config.max_id)

        self._fill_queue()
        logger.info(
            f"Queued {self.config.max_id} IDs for "
            f"{self.config.num_workers} worker(s)"
        )

        reports = [
            WorkerReport(worker_id=i)
            for i in range(1, self.config.num_workers + 1)
        ]
        threads = [
            threading.Thread(
                target=self._worker,
                args=(report,),
                name=f"dexgrab-worker-{report.worker_id}",
            )
            for report in reports
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        summary = RunSummary(workers=reports, unprocessed=self.job_queue.qsize())
        if summary.drained:
            logger.info("All workers finished successfully!")
        else:
            logger.warning(
                f"{summary.unprocessed} ID(s) were never picked up "
                f"({summary.workers_started}/{len(reports)} workers started)"
            )
        return summary

    def _worker(self, report: WorkerReport) -> None:
        """Worker thread body: own one session, drain the queue."""
        try:
            with self.session_factory() as session:
                self._warm_up(session, report.worker_id)
                report.started = True
                self._drain(session, report)
        except SessionStartupFailure as e:
            logger.error(str(e))
        except Exception as e:
            if report.started:
                logger.error(
                    f"Worker {report.worker_id} stopped: {e!r}", exc_info=True
                )
            else:
                logger.error(
                    str(SessionStartupFailure(report.worker_id, repr(e)))
                )

    def _warm_up(self, session: RemoteSession, worker_id: int) -> None:
        try:
            session.navigate(WARMUP_URL, timeout=self.config.per_job_timeout)
        except Exception as e:
            raise SessionStartupFailure(worker_id, str(e)) from e
        logger.debug(f"Worker {worker_id} ready")

    def _drain(self, session: RemoteSession, report: WorkerReport) -> None:
        while not (self.stop_event and self.stop_event.is_set()):
            entity_id = self._next_id()
            if entity_id is None:
                break
            report.ids_processed += 1
            for mode in self.config.modes:
                report.record(process(session, Job(entity_id, mode), self.config))
        logger.debug(
            f"Worker {report.worker_id} exiting after "
            f"{report.ids_processed} ID(s)"
        )
