"""Shared fixtures for harvester tests."""

from pathlib import Path

import pytest

from dexgrab.config import HarvestConfig
from tests.utils import FakeSession, FakeSessionFactory


@pytest.fixture
def config(tmp_path: Path) -> HarvestConfig:
    """Small, fast configuration writing under tmp_path.

    Returns:
        Config for IDs 1-5 on one worker, with no cooldown or settle delay.
    """
    return HarvestConfig(
        max_id=5,
        num_workers=1,
        per_job_timeout=2.0,
        finalize_retries=3,
        finalize_interval=0.01,
        error_cooldown=0.0,
        settle_delay=0.0,
        poll_interval=0.01,
        about_dir=tmp_path / "about",
        stats_dir=tmp_path / "stats",
        url_template="https://dex.test/pokemon/?id={id}",
    )


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def session_factory() -> FakeSessionFactory:
    """A factory whose sessions always succeed."""
    return FakeSessionFactory()
