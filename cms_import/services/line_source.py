"""
Line source for story exports.

Streams a line-delimited file one line at a time, gunzipping transparently
when the path ends in .gz. Nothing is materialized beyond the current line.
"""

import gzip
import io
import logging
import os
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

from cms_import.services.errors import InputCorruptError, InputUnavailableError

logger = logging.getLogger(__name__)

GZIP_SUFFIXES = (".gz", ".gzip")


def is_gzipped(path: str | Path) -> bool:
    return str(path).lower().endswith(GZIP_SUFFIXES)


class LineSource:
    """
    Iterable over the lines of an export file.

    Each iteration opens a fresh stream, so the optional counting pass and
    the processing pass read the file independently.

    Usage:
        source = LineSource("/tmp/export.jsonl.gz")
        source.check()
        total = source.count_lines()
        for line in source:
            ...
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._raw: BinaryIO | None = None

    @property
    def compressed(self) -> bool:
        return is_gzipped(self.path)

    @property
    def size_bytes(self) -> int:
        """Size of the file on disk (compressed size for .gz)."""
        try:
            return os.path.getsize(self.path)
        except OSError:
            return 0

    @property
    def bytes_read(self) -> int:
        """Bytes of the underlying file consumed by the active iteration."""
        if self._raw is None or self._raw.closed:
            return 0
        try:
            return self._raw.tell()
        except (OSError, ValueError):
            return 0

    def check(self) -> None:
        """Fail fast if the input cannot be opened or its first line cannot be decoded."""
        try:
            with open(self.path, "rb") as raw, self._open_text(raw) as text:
                text.readline()
        except (gzip.BadGzipFile, EOFError) as e:
            raise InputCorruptError(f"Cannot read input file {self.path}: {e}") from e
        except OSError as e:
            raise InputUnavailableError(f"Cannot open input file {self.path}: {e}") from e

    def _open_text(self, raw: BinaryIO) -> io.TextIOWrapper:
        stream: BinaryIO = gzip.GzipFile(fileobj=raw, mode="rb") if self.compressed else raw
        return io.TextIOWrapper(stream, encoding="utf-8", errors="replace", newline=None)

    def __iter__(self) -> Iterator[str]:
        try:
            raw = open(self.path, "rb")
        except OSError as e:
            raise InputUnavailableError(f"Cannot open input file {self.path}: {e}") from e

        self._raw = raw
        try:
            with self._open_text(raw) as text:
                for line in text:
                    yield line.rstrip("\n")
        except (OSError, EOFError) as e:
            # gzip.BadGzipFile is an OSError; a truncated stream ends in EOFError
            raise InputCorruptError(f"Cannot read input file {self.path}: {e}") from e
        finally:
            raw.close()
            self._raw = None

    def count_lines(self) -> int:
        """Full pass over the input, only to get a denominator for progress/ETA."""
        total = 0
        for _ in self:
            total += 1
        logger.info(
            f"Counted {total} lines in {self.path}",
            extra={"event": "input_counted", "path": str(self.path), "items_processed": total},
        )
        return total
