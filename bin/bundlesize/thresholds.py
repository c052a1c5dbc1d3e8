"""Compare measured sizes against absolute size caps and growth over the recorded baseline."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from bundlesize.sizes import KIB, SizeResult

NOT_AVAILABLE = "N/A"

_SIZE_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*(B|KB|MB)?$", re.IGNORECASE)
_PERCENTAGE_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*%$")

_HUNDREDTHS = Decimal("0.01")

_UNIT_MULTIPLIERS = {
    "B": 1,
    "KB": KIB,
    "MB": KIB * KIB,
}


def parse_size(value: Any) -> float | None:
    """Parse a size such as ``"5"``, ``"5KB"`` or ``"1.5 MB"`` into bytes.

    Units are binary and case-insensitive; a bare number is bytes. Anything else, including a
    non-string, parses to None, meaning "no limit".
    """
    if not isinstance(value, str):
        return None
    match = _SIZE_RE.match(value.strip())
    if not match:
        return None
    unit = (match.group(2) or "B").upper()
    return float(match.group(1)) * _UNIT_MULTIPLIERS[unit]


def parse_percentage(value: Any) -> float | None:
    """Parse ``"10%"`` into ``10.0``. The percent sign is required."""
    if not isinstance(value, str):
        return None
    match = _PERCENTAGE_RE.match(value.strip())
    if not match:
        return None
    return float(match.group(1))


@dataclass(frozen=True)
class Limits:
    max_size: str | None = None
    warn_on_increase: str | None = None


@dataclass(frozen=True)
class ComparisonResult:
    key: str
    size: SizeResult
    exceeds_max_size: bool
    max_size: str | None
    max_size_bytes: float | None
    previous_size_bytes: float
    size_increase_bytes: float
    percentage_increase: str
    percentage_increase_value: float | None
    exceeds_warn_increase: bool
    warn_on_increase: str | None

    @property
    def size_increase_kb(self) -> float:
        return self.size_increase_bytes / KIB

    @property
    def overflow_kb(self) -> float | None:
        """How far the raw size is over the cap, or None when within it."""
        if not self.exceeds_max_size or self.max_size_bytes is None:
            return None
        return self.size.raw_kb - self.max_size_bytes / KIB

    @property
    def has_baseline(self) -> bool:
        return self.percentage_increase_value is not None

    @property
    def has_warnings(self) -> bool:
        return self.exceeds_max_size or self.exceeds_warn_increase


@dataclass(frozen=True)
class FailureRecord:
    component: str
    expected_threshold: str | None
    actual_size_kb: float

    def to_json(self) -> dict[str, Any]:
        return {
            "component": self.component,
            "expectedThreshold": self.expected_threshold,
            "actualSizeKB": round(self.actual_size_kb, 2),
        }


def evaluate(size: SizeResult, key: str, baseline: Mapping[str, float], limits: Limits) -> ComparisonResult:
    """Compare ``size`` with its cap and with the baseline recorded under ``key``.

    A missing baseline entry is treated as zero: the percentage is then "N/A" and the growth check is
    skipped rather than failed. The percentage is rounded to two decimals, halves away from
    zero, and the growth check compares that rounded value.
    """
    current = size.raw_bytes
    max_size_bytes = parse_size(limits.max_size)
    exceeds_max_size = max_size_bytes is not None and current > max_size_bytes

    previous = baseline.get(key) or 0
    increase = current - previous

    percentage_value = None
    percentage = NOT_AVAILABLE
    if previous > 0:
        rounded = Decimal(increase * 100 / previous).quantize(_HUNDREDTHS, rounding=ROUND_HALF_UP)
        percentage_value = float(rounded)
        percentage = str(rounded)

    exceeds_warn_increase = False
    if percentage_value is not None and limits.warn_on_increase:
        threshold = parse_percentage(limits.warn_on_increase)
        exceeds_warn_increase = threshold is not None and percentage_value > threshold

    return ComparisonResult(
        key=key,
        size=size,
        exceeds_max_size=exceeds_max_size,
        max_size=limits.max_size,
        max_size_bytes=max_size_bytes,
        previous_size_bytes=previous,
        size_increase_bytes=increase,
        percentage_increase=percentage,
        percentage_increase_value=percentage_value,
        exceeds_warn_increase=exceeds_warn_increase,
        warn_on_increase=limits.warn_on_increase,
    )


def failure_for(result: ComparisonResult) -> FailureRecord | None:
    if not result.exceeds_max_size:
        return None
    return FailureRecord(component=result.key, expected_threshold=result.max_size, actual_size_kb=result.size.raw_kb)
