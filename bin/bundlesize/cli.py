from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from bundlesize import BundleSizeError
from bundlesize.analysis import BundleSizeAnalyser
from bundlesize.config import DEFAULT_CONFIG_FILE, Config
from bundlesize.report import render_report

_LOGGER = logging.getLogger(__name__)


def _configure_logging(debug: bool, log: Optional[str]) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log:
        handlers.append(logging.FileHandler(log))
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(name)-15s %(levelname)-8s %(message)s",
        handlers=handlers,
        force=True,
    )


@click.command()
@click.option(
    "-c",
    "--config",
    "config_path",
    default=DEFAULT_CONFIG_FILE,
    metavar="CONFIG",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Read component size budgets from CONFIG",
    show_default=True,
)
@click.option(
    "--update-baseline/--no-update-baseline",
    default=True,
    help="Record this run's sizes as the new baseline",
    show_default=True,
)
@click.option(
    "--failure-report",
    metavar="REPORT",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write failures to REPORT instead of the configured failureReportFile",
)
@click.option("--debug/--no-debug", help="Turn on debugging")
@click.option("--log", metavar="LOGFILE", help="Log to LOGFILE", type=click.Path(dir_okay=False, writable=True))
def cli(config_path: Path, update_baseline: bool, failure_report: Optional[Path], debug: bool, log: Optional[str]):
    """Check compiled component bundles against their size budgets.

    Exits with 1 if any component exceeds its max size or grew more than allowed since the last
    recorded baseline.
    """
    _configure_logging(debug, log)
    try:
        config = Config.load(config_path)
        if failure_report:
            config = config.model_copy(update={"failure_report_file": failure_report})
        run = BundleSizeAnalyser().analyse(config, update_baseline=update_baseline)
    except (BundleSizeError, OSError) as e:
        _LOGGER.debug("Analysis aborted", exc_info=True)
        raise click.ClickException(str(e)) from e

    for line in render_report(run, config.compression):
        click.echo(line)

    if run.has_warnings:
        click.secho("One or more components exceeded size thresholds.", fg="red", err=True)
        sys.exit(1)
    click.secho("All components are within size thresholds.", fg="green")
