"""Filesystem completion ledger.

A job is done when its mode's generation folder holds a file named
``pokedex_<paddedID>_...``. That file is written by the finalizer's rename
and nothing else, so scanning the folders is enough to know what remains
after any interruption.
"""

from __future__ import annotations

import logging
from pathlib import Path

from dexgrab.common.partition import bucket
from dexgrab.config import HarvestConfig
from dexgrab.data_types import ARTIFACT_PREFIX, Job, pad_id

logger = logging.getLogger(__name__)


def ledger_prefix(entity_id: int) -> str:
    """Filename prefix that marks an entity as harvested."""
    return f"{ARTIFACT_PREFIX}{pad_id(entity_id)}_"


def bucket_dir(config: HarvestConfig, job: Job) -> Path:
    """Folder a job's artifact is downloaded into and renamed within."""
    return config.root_for(job.mode) / bucket(job.entity_id)


def exists(directory: Path, prefix: str, create: bool = True) -> bool:
    """Report whether ``directory`` holds an entry starting with ``prefix``.

    The directory is created if absent, unless ``create`` is False. If it
    cannot be created or listed the answer is False: the job is reprocessed
    rather than skipped.

    Args:
        directory: Generation folder for one mode.
        prefix: Ledger prefix of the job, see ledger_prefix().
        create: Create the folder when it is missing.

    Returns:
        True if a matching entry was found.
    """
    try:
        if create:
            directory.mkdir(parents=True, exist_ok=True)
        elif not directory.is_dir():
            return False
        return any(
            entry.name.startswith(prefix) for entry in directory.iterdir()
        )
    except OSError as e:
        logger.warning(
            f"Could not list {directory}, treating {prefix} as not done: {e}"
        )
        return False


def is_done(config: HarvestConfig, job: Job) -> bool:
    """Read-only ledger check; never creates folders."""
    return exists(
        bucket_dir(config, job), ledger_prefix(job.entity_id), create=False
    )


def missing_jobs(config: HarvestConfig) -> list[Job]:
    """List every configured job that has no ledger entry yet."""
    return [
        job
        for entity_id in range(1, config.max_id + 1)
        for job in (Job(entity_id, mode) for mode in config.modes)
        if not is_done(config, job)
    ]
