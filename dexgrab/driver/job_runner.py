"""Run one (ID, mode) job from ledger check to renamed file.

process() is the only place job errors are caught. Whatever goes wrong
with one job is logged with the job's identity, followed by a fixed
cooldown so a struggling remote is not hit again straight away, and the
worker carries on with the next job.
"""

from __future__ import annotations

import logging
import time

from dexgrab.common.deadline import job_deadline
from dexgrab.common.exceptions import JobException
from dexgrab.common.ledger import bucket_dir, exists, ledger_prefix
from dexgrab.config import HarvestConfig
from dexgrab.data_types import Job, JobOutcome
from dexgrab.driver.finalizer import finalize
from dexgrab.driver.protocol import run_protocol
from dexgrab.driver.session import RemoteSession

logger = logging.getLogger(__name__)


def process(
    session: RemoteSession, job: Job, config: HarvestConfig
) -> JobOutcome:
    """Harvest one card unless the ledger already has it.

    Args:
        session: The calling worker's session. Never closed here.
        job: The (ID, mode) pair to harvest.
        config: Run configuration.

    Returns:
        SKIPPED if the ledger already has the job, COMPLETED if the card
        was downloaded and renamed, FAILED otherwise.
    """
    target_dir = bucket_dir(config, job)

    # exists() creates the folder.
    if exists(target_dir, ledger_prefix(job.entity_id)):
        logger.debug(f"Skipping {job}: already in ledger")
        return JobOutcome.SKIPPED

    logger.info(f"Worker processing ID {job}")

    try:
        with job_deadline(config.per_job_timeout) as deadline:
            name = run_protocol(session, job, target_dir, deadline, config)
            # The finalizer keeps its own retry budget past the deadline.
            final = finalize(
                target_dir,
                job.entity_id,
                name,
                retries=config.finalize_retries,
                interval=config.finalize_interval,
                mode=job.mode,
            )
    except JobException as e:
        logger.error(f"Error ID {job}: {e.message}")
    except Exception as e:
        logger.error(f"Error ID {job}: unexpected {e!r}", exc_info=True)
    else:
        logger.info(f"Saved {job} as {final.name}")
        return JobOutcome.COMPLETED

    time.sleep(config.error_cooldown)
    return JobOutcome.FAILED
