"""Raw and compressed size measurement for sets of bundle files."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from bundlesize import BundleSizeError
from bundlesize.config import CompressionConfig
from bundlesize.filesystem import FileSystem, brotli_size, gzip_size

_LOGGER = logging.getLogger(__name__)

KIB = 1024

Compressor = Callable[[bytes], int]


class CompressionError(BundleSizeError):
    pass


@dataclass(frozen=True)
class FileSize:
    raw: int
    gzip: int | None
    brotli: int | None


@dataclass(frozen=True)
class SizeResult:
    """Total sizes of a set of files, each file compressed on its own.

    Compressed totals are None when that metric is disabled.
    """

    raw_bytes: int
    gzip_bytes: int | None = None
    brotli_bytes: int | None = None
    file_count: int = 0

    @property
    def raw_kb(self) -> float:
        return self.raw_bytes / KIB

    @property
    def gzip_kb(self) -> float | None:
        return None if self.gzip_bytes is None else self.gzip_bytes / KIB

    @property
    def brotli_kb(self) -> float | None:
        return None if self.brotli_bytes is None else self.brotli_bytes / KIB


def _compress(name: str, compressor: Compressor, content: bytes) -> int:
    try:
        return compressor(content)
    except Exception as e:
        raise CompressionError(f"{name} compression failed: {e}") from e


class SizeCalculator:
    """Measures files through an injected filesystem and pair of compressors.

    Files are read and compressed on a thread pool; the totals are only summed once every file has
    been measured, so they do not depend on the number of workers.
    """

    def __init__(
        self,
        fs: FileSystem,
        gzip: Compressor = gzip_size,
        brotli: Compressor = brotli_size,
        max_workers: int | None = None,
    ):
        self.fs = fs
        self.gzip = gzip
        self.brotli = brotli
        self.max_workers = max_workers or min(32, (os.cpu_count() or 1) + 4)

    def measure(self, path: str, compression: CompressionConfig) -> FileSize:
        content = self.fs.read_bytes(path)
        return FileSize(
            raw=len(content),
            gzip=_compress("gzip", self.gzip, content) if compression.gzip else None,
            brotli=_compress("brotli", self.brotli, content) if compression.brotli else None,
        )

    def calculate(
        self,
        paths: Iterable[str],
        compression: CompressionConfig,
        measured: dict[str, FileSize] | None = None,
    ) -> SizeResult:
        """Total the sizes of ``paths``.

        ``measured`` caches per-file sizes across calls made with the same compression settings; paths
        already in it are not read again, and newly measured paths are added to it.
        """
        paths = sorted(paths)
        if measured is None:
            measured = {}
        pending = [path for path in paths if path not in measured]
        if pending:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                measured.update(zip(pending, executor.map(lambda path: self.measure(path, compression), pending)))
        file_sizes = [measured[path] for path in paths]

        result = SizeResult(
            raw_bytes=sum(size.raw for size in file_sizes),
            gzip_bytes=sum(size.gzip or 0 for size in file_sizes) if compression.gzip else None,
            brotli_bytes=sum(size.brotli or 0 for size in file_sizes) if compression.brotli else None,
            file_count=len(file_sizes),
        )
        _LOGGER.debug("Measured %d files: %d bytes raw", result.file_count, result.raw_bytes)
        return result
