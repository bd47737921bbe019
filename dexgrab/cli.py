"""dexgrab CLI: run a harvest and inspect what is left.

Usage:
    dexgrab run                         # Harvest IDs 1..1025 with 4 workers
    dexgrab run --max-id 151 --workers 2
    dexgrab missing                     # List jobs without a saved card
    dexgrab missing --format json
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from dexgrab.config import HarvestConfig


def build_config(**overrides: Any) -> HarvestConfig:
    """Build a HarvestConfig from CLI options, dropping unset ones.

    Raises:
        click.BadParameter: If the options do not validate.
    """
    values = {k: v for k, v in overrides.items() if v is not None}
    try:
        return HarvestConfig(**values)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise click.BadParameter(details) from e


def _configure_logging(verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.group()
@click.version_option(package_name="dexgrab")
def cli() -> None:
    """dexgrab: browser-driven Pokédex card harvester."""


_range_options = [
    click.option(
        "--max-id",
        type=int,
        default=None,
        help="Highest entity ID to harvest.  [default: 1025]",
    ),
    click.option(
        "--about-dir",
        type=click.Path(file_okay=False, path_type=Path),
        default=None,
        help="Output root for 'about' cards.  [default: ./about]",
    ),
    click.option(
        "--stats-dir",
        type=click.Path(file_okay=False, path_type=Path),
        default=None,
        help="Output root for 'stats' cards.  [default: ./stats]",
    ),
]


def range_options(func: Any) -> Any:
    for option in reversed(_range_options):
        func = option(func)
    return func


@cli.command()
@range_options
@click.option(
    "--workers",
    type=int,
    default=None,
    help="Number of concurrent browser sessions.  [default: 4]",
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Per-job deadline in seconds.  [default: 45]",
)
@click.option(
    "--browser",
    type=click.Choice(["chromium", "firefox", "webkit"]),
    default=None,
    help="Browser engine.  [default: chromium]",
)
@click.option(
    "--headless/--no-headless",
    default=True,
    show_default=True,
    help="Hide the browser window.",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
def run(
    max_id: int | None,
    about_dir: Path | None,
    stats_dir: Path | None,
    workers: int | None,
    timeout: float | None,
    browser: str | None,
    headless: bool,
    verbose: bool,
) -> None:
    """Harvest every card that is not on disk yet.

    \b
    Examples:
        dexgrab run
        dexgrab run --max-id 151 --workers 2 --no-headless
    """
    _configure_logging(verbose)

    config = build_config(
        max_id=max_id,
        about_dir=about_dir,
        stats_dir=stats_dir,
        num_workers=workers,
        per_job_timeout=timeout,
        browser_type=browser,
        headless=headless,
    )

    try:
        from dexgrab.driver.playwright_driver import (
            playwright_session_factory,
        )
    except ImportError as e:
        raise click.ClickException(
            f"Missing dependency: {e}. "
            "Install Playwright and its browsers: "
            "pip install playwright && playwright install chromium"
        ) from e

    from dexgrab.driver.pool import HarvestDriver

    click.echo(f"Starting harvest with {config.num_workers} workers...")
    click.echo(f"About:   {config.about_dir}")
    click.echo(f"Stats:   {config.stats_dir}")
    click.echo("-" * 57)

    stop_event = threading.Event()
    driver = HarvestDriver(
        config, playwright_session_factory(config), stop_event=stop_event
    )
    try:
        summary = driver.run()
    except KeyboardInterrupt:
        stop_event.set()
        raise click.Abort() from None

    click.echo(
        f"Completed: {summary.completed}  Skipped: {summary.skipped}  "
        f"Failed: {summary.failed}"
    )
    if summary.drained:
        click.echo("\nAll workers finished successfully!")
    else:
        raise click.ClickException(
            f"{summary.unprocessed} ID(s) were not processed; "
            f"{summary.workers_started}/{len(summary.workers)} workers started"
        )


@cli.command()
@range_options
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    show_default=True,
    help="Output format.",
)
def missing(
    max_id: int | None,
    about_dir: Path | None,
    stats_dir: Path | None,
    output_format: str,
) -> None:
    """List jobs that have no saved card yet.

    Only the output folders are scanned; the remote site is not contacted.
    """
    from dexgrab.common.ledger import missing_jobs
    from dexgrab.common.partition import bucket

    config = build_config(
        max_id=max_id, about_dir=about_dir, stats_dir=stats_dir
    )
    jobs = missing_jobs(config)

    if output_format == "json":
        click.echo(
            json.dumps(
                [
                    {
                        "id": job.entity_id,
                        "mode": job.mode.value,
                        "bucket": bucket(job.entity_id),
                    }
                    for job in jobs
                ],
                indent=2,
            )
        )
        return

    for job in jobs:
        click.echo(f"{job.padded_id}  {job.mode.value:<6} {bucket(job.entity_id)}")
    total = config.max_id * len(config.modes)
    click.echo(f"Total: {len(jobs)} missing of {total}")


def main() -> None:
    """Entry point for the ``dexgrab`` console script."""
    cli()
