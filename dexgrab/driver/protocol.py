"""The sequence of remote interactions that produces one card.

run_protocol() drives the card generator page for one job: point downloads
at the job's folder, open the entity's page, switch the view mode, wait for
the page to render *this* entity, read its name, and press download.

The remote page's field ids and selectors are fixed by the site and listed
below. If the site changes its markup, this is the only module to update.
"""

from __future__ import annotations

import logging
from pathlib import Path

from dexgrab.common.deadline import Deadline
from dexgrab.common.exceptions import (
    DeadlineExceeded,
    ProtocolFailure,
    SessionTimeoutException,
    TransientException,
)
from dexgrab.config import HarvestConfig
from dexgrab.data_types import Job
from dexgrab.driver.session import RemoteSession

logger = logging.getLogger(__name__)

DISPLAY_NAME_SELECTOR = "#disp-name"
DOWNLOAD_SELECTOR = ".btn-download"

# Switch the page to the requested view and fire its own fetch routine.
SELECT_SCRIPT = """([mode, id]) => {
    document.getElementById('viewMode').value = mode;
    document.getElementById('pokeSearch').value = String(id);
    fetchData();
}"""

# The number badge only shows the padded ID once the fetch for that ID has
# rendered, which guards against a slow render left over from the last job.
READY_PREDICATE = """(expected) => {
    const el = document.getElementById('disp-num');
    return el !== null && el.innerText === expected;
}"""


def run_protocol(
    session: RemoteSession,
    job: Job,
    download_dir: Path,
    deadline: Deadline,
    config: HarvestConfig,
) -> str:
    """Run every remote step for ``job`` and return the display name.

    Args:
        session: RemoteSession owned by the calling worker.
        job: The (ID, mode) pair to fetch.
        download_dir: Folder the browser should save the card into.
        deadline: Job deadline; each step only gets the time that remains.
        config: Run configuration (URL template, poll and settle timings).

    Returns:
        The entity's display name as shown on the page.

    Raises:
        ProtocolFailure: If any step fails.
        DeadlineExceeded: If the deadline expires before or during a step.
    """
    entity_id, mode = job.entity_id, job.mode.value

    def step(name: str) -> float:
        deadline.check(name, entity_id, mode)
        return deadline.remaining()

    current = "configure_downloads"
    try:
        step(current)
        session.configure_downloads(download_dir)

        current = "navigate"
        session.navigate(config.url_for(entity_id), timeout=step(current))

        current = "select"
        session.evaluate(
            SELECT_SCRIPT, [mode, entity_id], timeout=step(current)
        )

        current = "wait_ready"
        session.poll(
            READY_PREDICATE,
            job.padded_id,
            timeout=step(current),
            interval=config.poll_interval,
        )

        current = "read_name"
        name = session.text(DISPLAY_NAME_SELECTOR, timeout=step(current))
        name = name.strip()
        if not name:
            raise ProtocolFailure(
                current, "display name is empty", entity_id, mode
            )

        current = "download"
        saved = session.download(DOWNLOAD_SELECTOR, timeout=step(current))
        logger.debug(f"Download for {job} landed as {saved}")

        current = "settle"
        step(current)
        settle = deadline.bound(config.settle_delay)
        session.sleep(settle)
        if settle < config.settle_delay:
            raise DeadlineExceeded(current, entity_id, mode)
    except SessionTimeoutException as e:
        if deadline.expired:
            raise DeadlineExceeded(current, entity_id, mode) from e
        raise ProtocolFailure(current, str(e), entity_id, mode) from e
    except TransientException as e:
        raise ProtocolFailure(current, str(e), entity_id, mode) from e

    return name
