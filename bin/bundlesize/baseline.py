"""Persisted record of the last measured size of every result key."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path

_LOGGER = logging.getLogger(__name__)


def load_baseline(path: Path) -> dict[str, float]:
    """Read the baseline at ``path``.

    A missing, unreadable or malformed file is the normal first-run state and gives an empty
    baseline. Entries that are not numbers are dropped.
    """
    try:
        with path.open(encoding="utf-8") as baseline_file:
            data = json.load(baseline_file)
    except FileNotFoundError:
        _LOGGER.info("No baseline at %s, sizes will not be compared", path)
        return {}
    except (OSError, ValueError) as e:
        _LOGGER.warning("Ignoring unreadable baseline %s: %s", path, e)
        return {}

    if not isinstance(data, dict):
        _LOGGER.warning("Ignoring baseline %s: expected a JSON object", path)
        return {}

    baseline = {}
    for key, value in data.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            _LOGGER.warning("Ignoring non-numeric baseline entry %r in %s", key, path)
            continue
        baseline[key] = value
    _LOGGER.debug("Loaded %d baseline sizes from %s", len(baseline), path)
    return baseline


def persist_baseline(path: Path, sizes: Mapping[str, float]) -> None:
    """Replace the baseline at ``path`` with ``sizes``, pretty-printed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as temp_file:
            json.dump(dict(sizes), temp_file, indent=2)
            temp_file.write("\n")
        os.replace(temp_name, path)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise
    _LOGGER.info("Wrote %d baseline sizes to %s", len(sizes), path)
