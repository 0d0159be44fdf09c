"""Lazy line reading for large DSF text dumps and terrain files."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from types import TracebackType

TERMINATORS = "\r\n"


class LineSource:
    """Forward-only iterator over the lines of a text file.

    The file is opened on construction (``OSError`` if that fails) and read
    one line at a time with its ``\\n``, ``\\r\\n`` or ``\\r`` terminator
    removed. The handle is closed at end of file or on ``close()``.
    """

    def __init__(self, path: Path, *, encoding: str = "utf-8") -> None:
        self.path = path
        self._handle = path.open("r", encoding=encoding, errors="replace", newline="")

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        if self._handle.closed:
            raise StopIteration
        raw_line = self._handle.readline()
        if not raw_line:
            self.close()
            raise StopIteration
        return raw_line.rstrip(TERMINATORS)

    def close(self) -> None:
        self._handle.close()

    def __enter__(self) -> LineSource:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

