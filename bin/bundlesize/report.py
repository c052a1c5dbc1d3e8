"""Console report and failure report output."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

import click
import humanfriendly

from bundlesize.config import CompressionConfig
from bundlesize.thresholds import ComparisonResult, FailureRecord

if TYPE_CHECKING:
    from bundlesize.analysis import AnalysisRun

_LOGGER = logging.getLogger(__name__)

REPORT_TITLE = "Bundle Size Analyser Report"


def format_delta(size_bytes: float) -> str:
    sign = "-" if size_bytes < 0 else "+"
    return f"{sign}{humanfriendly.format_size(abs(size_bytes), binary=True)}"


def _max_size_line(result: ComparisonResult) -> str:
    if result.max_size_bytes is None:
        return "No max size limit configured."
    if result.exceeds_max_size:
        return click.style(f"Exceeded max size of {result.max_size} by {result.overflow_kb:.2f} KB", fg="red")
    return click.style(f"Within max size limit of {result.max_size}", fg="green")


def _growth_line(result: ComparisonResult) -> str:
    if not result.has_baseline:
        return "No baseline size to compare against."
    if result.exceeds_warn_increase:
        return click.style(
            f"Size increased by {result.percentage_increase}% since last recorded size, "
            f"exceeding threshold of {result.warn_on_increase}",
            fg="red",
        )
    return click.style(
        f"Size increase of {result.percentage_increase}% since last recorded size "
        f"is within threshold of {result.warn_on_increase}",
        fg="green",
    )


def render_result(result: ComparisonResult, compression: CompressionConfig) -> list[str]:
    size = result.size
    lines = [
        click.style(f"Component: {result.key}", fg="blue", bold=True),
        f"Total Size: {size.raw_kb:.2f} KB",
    ]
    if compression.gzip and size.gzip_kb is not None:
        lines.append(f"Gzip Size: {size.gzip_kb:.2f} KB")
    if compression.brotli and size.brotli_kb is not None:
        lines.append(f"Brotli Size: {size.brotli_kb:.2f} KB")
    lines.append(_max_size_line(result))
    if result.has_baseline:
        lines.append(f"Change since last recorded size: {format_delta(result.size_increase_bytes)}")
    lines.append(_growth_line(result))
    lines.append("")
    return lines


def render_report(run: AnalysisRun, compression: CompressionConfig) -> list[str]:
    lines = ["", click.style(REPORT_TITLE, bold=True), ""]
    for result in run.results.values():
        lines.extend(render_result(result, compression))
    return lines


def write_failure_report(path: Path, failures: Iterable[FailureRecord]) -> None:
    """Write ``failures`` to ``path`` as a pretty-printed JSON array."""
    records = [failure.to_json() for failure in failures]
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(records, indent=2) + "\n", encoding="utf-8")
    _LOGGER.info("Wrote %d failure records to %s", len(records), path)


def remove_failure_report(path: Path) -> None:
    _LOGGER.debug("Removing any stale failure report at %s", path)
    path.unlink(missing_ok=True)
