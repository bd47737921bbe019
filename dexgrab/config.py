"""Run configuration.

Every tunable of a harvest run lives on HarvestConfig and is handed to the
driver explicitly, so tests can shrink the ID range and timings.

Example::

    from dexgrab.config import HarvestConfig

    config = HarvestConfig(max_id=151, num_workers=2)
    config.root_for(Mode.ABOUT)  # -> /abs/path/about
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dexgrab.data_types import Mode

DEFAULT_URL_TEMPLATE = "https://basvanderploeg.nl/xteink/pokemon/?id={id}"


class HarvestConfig(BaseModel):
    """Parameters for a harvest run.

    Attributes:
        max_id: Highest entity ID to enumerate (IDs run from 1).
        num_workers: Number of worker threads, one browser session each.
        per_job_timeout: Deadline in seconds for one (ID, mode) job.
        finalize_retries: How many times to look for the downloaded file.
        finalize_interval: Seconds between those looks.
        error_cooldown: Seconds to pause after a failed job.
        settle_delay: Seconds to wait after triggering a download.
        poll_interval: Seconds between readiness checks on the remote page.
        about_dir: Output root for ``about`` cards.
        stats_dir: Output root for ``stats`` cards.
        modes: Modes fetched for every ID, in order.
        url_template: Resource address with an ``{id}`` placeholder.
        browser_type: Playwright browser engine.
        headless: Run the browser without a window.
    """

    model_config = ConfigDict(frozen=True)

    max_id: int = Field(default=1025, ge=1)
    num_workers: int = Field(default=4, ge=1)
    per_job_timeout: float = Field(default=45.0, gt=0)
    finalize_retries: int = Field(default=15, ge=1)
    finalize_interval: float = Field(default=1.0, ge=0)
    error_cooldown: float = Field(default=2.0, ge=0)
    settle_delay: float = Field(default=3.0, ge=0)
    poll_interval: float = Field(default=0.1, gt=0)
    about_dir: Path = Field(default=Path("about"), validate_default=True)
    stats_dir: Path = Field(default=Path("stats"), validate_default=True)
    modes: tuple[Mode, ...] = (Mode.ABOUT, Mode.STATS)
    url_template: str = DEFAULT_URL_TEMPLATE
    browser_type: Literal["chromium", "firefox", "webkit"] = "chromium"
    headless: bool = True

    @field_validator("about_dir", "stats_dir")
    @classmethod
    def _absolute(cls, value: Path) -> Path:
        return value.expanduser().resolve()

    @field_validator("url_template")
    @classmethod
    def _has_id_placeholder(cls, value: str) -> str:
        if "{id}" not in value:
            raise ValueError("url_template must contain an '{id}' placeholder")
        return value

    @field_validator("modes")
    @classmethod
    def _non_empty_modes(cls, value: tuple[Mode, ...]) -> tuple[Mode, ...]:
        if not value:
            raise ValueError("at least one mode is required")
        return value

    def root_for(self, mode: Mode) -> Path:
        """Output root directory for a mode."""
        return self.stats_dir if mode is Mode.STATS else self.about_dir

    def url_for(self, entity_id: int) -> str:
        return self.url_template.format(id=entity_id)
