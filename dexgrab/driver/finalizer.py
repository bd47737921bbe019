"""Turn a freshly downloaded card into its ledger entry.

The browser saves a card as ``pokedex_<Name>.bmp``. Two entities can share
a name, and the ledger is keyed on IDs, so the file is renamed to
``pokedex_<paddedID>_<NAME>.bmp``. That rename is the only write that marks
a job complete.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from dexgrab.common.exceptions import FinalizeTimeout, RenameFailure
from dexgrab.data_types import (
    ARTIFACT_PREFIX,
    ARTIFACT_SUFFIX,
    Mode,
    pad_id,
)

logger = logging.getLogger(__name__)


def transient_names(display_name: str) -> list[str]:
    """File names the browser may have saved the card under."""
    names = [f"{ARTIFACT_PREFIX}{display_name}{ARTIFACT_SUFFIX}"]
    upper = f"{ARTIFACT_PREFIX}{display_name.upper()}{ARTIFACT_SUFFIX}"
    if upper not in names:
        names.append(upper)
    return names


def canonical_name(entity_id: int, display_name: str) -> str:
    return (
        f"{ARTIFACT_PREFIX}{pad_id(entity_id)}_"
        f"{display_name.upper()}{ARTIFACT_SUFFIX}"
    )


def finalize(
    download_dir: Path,
    entity_id: int,
    display_name: str,
    retries: int,
    interval: float,
    mode: Mode = Mode.ABOUT,
) -> Path:
    """Wait for the downloaded card and rename it to its canonical name.

    Args:
        download_dir: Folder the browser saved into.
        entity_id: ID the card belongs to.
        display_name: Name read from the page.
        retries: Number of times to look for the file.
        interval: Seconds to wait between looks.
        mode: Job mode, for error context only.

    Returns:
        Path of the renamed file.

    Raises:
        FinalizeTimeout: If the file never appeared. Nothing is renamed.
        RenameFailure: If the rename itself failed.
    """
    candidates = transient_names(display_name)
    target = download_dir / canonical_name(entity_id, display_name)

    for attempt in range(retries):
        for name in candidates:
            source = download_dir / name
            if source.is_file():
                try:
                    source.replace(target)
                except OSError as e:
                    raise RenameFailure(
                        source, target, str(e), entity_id, mode.value
                    ) from e
                logger.debug(
                    f"Renamed {source.name} -> {target.name} "
                    f"after {attempt + 1} attempt(s)"
                )
                return target
        if attempt < retries - 1:
            time.sleep(interval)

    raise FinalizeTimeout(candidates, retries, entity_id, mode.value)
