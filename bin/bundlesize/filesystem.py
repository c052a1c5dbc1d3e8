"""Collaborators the analyser talks to: files, globs and compression codecs.

Everything here is injected into the resolver, the calculator and the analyser so tests can
substitute in-memory doubles for the real filesystem.
"""

from __future__ import annotations

import glob
import gzip
import logging
import os
from pathlib import Path
from typing import Protocol

import brotli

_LOGGER = logging.getLogger(__name__)

GZIP_LEVEL = 9
BROTLI_QUALITY = 11


class FileSystem(Protocol):
    def read_bytes(self, path: str) -> bytes: ...

    def glob(self, pattern: str) -> set[str]: ...

    def is_dir(self, path: str) -> bool: ...


class LocalFileSystem:
    """The real filesystem, relative paths resolved against the process working directory."""

    def read_bytes(self, path: str) -> bytes:
        return Path(path).read_bytes()

    def glob(self, pattern: str) -> set[str]:
        matches = {os.path.normpath(match) for match in glob.glob(pattern, recursive=True) if Path(match).is_file()}
        _LOGGER.debug("Pattern %s matched %d files", pattern, len(matches))
        return matches

    def is_dir(self, path: str) -> bool:
        return Path(path).is_dir()


def gzip_size(content: bytes) -> int:
    return len(gzip.compress(content, compresslevel=GZIP_LEVEL))


def brotli_size(content: bytes) -> int:
    return len(brotli.compress(content, quality=BROTLI_QUALITY))
