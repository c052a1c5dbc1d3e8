"""Resolve which files make up each component, and split them into bundle variants."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from bundlesize import BundleSizeError
from bundlesize.config import ConfigError, ResolvedComponent, SelectionMode
from bundlesize.filesystem import FileSystem

_LOGGER = logging.getLogger(__name__)

SCRIPT_PATTERNS = ("**/*.js", "**/*.mjs", "**/*.cjs")

ENTRY = "entry"
ENTRY_COMPANION = "entry+companion"
ENTRY_COMPANION_OTHER = "entry+companion+other"
ENTRY_OTHER = "entry+other"


class DistFolderNotFound(BundleSizeError):
    def __init__(self, component: str, folder: Path):
        super().__init__(f"Distribution folder for component '{component}' does not exist: {folder}")
        self.component = component
        self.folder = folder


def resolve(include_patterns: Iterable[str], exclude_patterns: Iterable[str], fs: FileSystem) -> set[str]:
    """Return every file matched by an include pattern and by no exclude pattern.

    Excludes are matched by absolute path, so ``./dist/a.js``, ``dist/a.js`` and the absolute
    spelling all name the same file.
    """
    included: set[str] = set()
    for pattern in include_patterns:
        included |= fs.glob(pattern)

    excluded: set[str] = set()
    for pattern in exclude_patterns:
        excluded |= {os.path.abspath(path) for path in fs.glob(pattern)}

    return {path for path in included if os.path.abspath(path) not in excluded}


def dist_folder_patterns(folder: Path) -> list[str]:
    return [(folder / pattern).as_posix() for pattern in SCRIPT_PATTERNS]


def resolve_dist_folder(component: ResolvedComponent, fs: FileSystem) -> set[str]:
    """Resolve all script files beneath a component's distribution folder.

    Raises:
        ConfigError: If the component has no distribution folder.
        DistFolderNotFound: If the folder is missing on disk.
    """
    if component.dist_folder is None:
        raise ConfigError(f"Component '{component.name}' has no distribution folder to scan")
    folder = component.dist_folder
    if not fs.is_dir(str(folder)):
        raise DistFolderNotFound(component.name, folder.resolve())
    return resolve(dist_folder_patterns(folder), component.exclude, fs)


@dataclass(frozen=True)
class PartitionedFiles:
    entry: frozenset[str]
    companion: frozenset[str]
    other: frozenset[str]


def partition(files: Iterable[str], entry_file_name: str, companion_file_name: str) -> PartitionedFiles:
    """Split files into entry, companion and other groups by filename suffix.

    A file whose name ends with both suffixes counts as an entry file.
    """
    entry, companion, other = set(), set(), set()
    for file in files:
        if file.endswith(entry_file_name):
            entry.add(file)
        elif file.endswith(companion_file_name):
            companion.add(file)
        else:
            other.add(file)
    return PartitionedFiles(entry=frozenset(entry), companion=frozenset(companion), other=frozenset(other))


@dataclass(frozen=True)
class Variant:
    """One combination of a component's files, evaluated as its own size metric."""

    key: str
    label: str
    files: frozenset[str]


def variant_key(component: str, label: str) -> str:
    if label == ENTRY:
        return component
    return f"{component}/{label}"


def variants_for(component: str, files: PartitionedFiles) -> list[Variant]:
    """Build the variants evaluated for a folder-scanned component.

    The entry bundle is always evaluated. Companion runtime files add an entry+companion variant,
    and an entry+companion+other variant when there are other files too; without companions, other
    files give an entry+other variant.
    """
    combinations = [(ENTRY, files.entry)]
    if files.companion:
        combinations.append((ENTRY_COMPANION, files.entry | files.companion))
        if files.other:
            combinations.append((ENTRY_COMPANION_OTHER, files.entry | files.companion | files.other))
    elif files.other:
        combinations.append((ENTRY_OTHER, files.entry | files.other))
    return [Variant(key=variant_key(component, label), label=label, files=group) for label, group in combinations]


def component_variants(component: ResolvedComponent, fs: FileSystem) -> list[Variant]:
    """Resolve a component's files and return the variants to evaluate for it."""
    if component.mode == SelectionMode.DIST:
        files = resolve_dist_folder(component, fs)
        _LOGGER.debug("Component %s: %d script files under %s", component.name, len(files), component.dist_folder)
        return variants_for(component.name, partition(files, component.entry_file_name, component.companion_file_name))

    files = resolve(component.include, component.exclude, fs)
    _LOGGER.debug("Component %s: %d files matched", component.name, len(files))
    return [Variant(key=variant_key(component.name, ENTRY), label=ENTRY, files=frozenset(files))]
