"""Self-cleaning temporary files for DSFTool text output."""

from __future__ import annotations

import logging
import tempfile
import threading
import uuid
from pathlib import Path
from types import TracebackType

LOGGER = logging.getLogger(__name__)

_LOCK = threading.Lock()
_TEMP_DIR: Path | None = None
_ACTIVE = 0


def _acquire_dir() -> Path:
    global _TEMP_DIR, _ACTIVE
    with _LOCK:
        if _TEMP_DIR is None or not _TEMP_DIR.is_dir():
            _TEMP_DIR = Path(tempfile.mkdtemp(prefix="dsfdeps-"))
        _ACTIVE += 1
        return _TEMP_DIR


def _release_dir(directory: Path) -> None:
    global _TEMP_DIR, _ACTIVE
    with _LOCK:
        _ACTIVE = max(0, _ACTIVE - 1)
        if _ACTIVE or _TEMP_DIR != directory:
            return
        try:
            next(directory.iterdir())
        except StopIteration:
            directory.rmdir()
            _TEMP_DIR = None
        except OSError as exc:
            LOGGER.debug("Could not inspect temporary directory %s: %s", directory, exc)


def current_temp_dir() -> Path | None:
    """Return the shared temporary directory if one currently exists."""
    return _TEMP_DIR


class TemporaryFile:
    """A uniquely named file in a shared, lazily created temporary directory.

    Use as a context manager: the file is created on entry and removed on exit,
    and the shared directory is removed once no temporary files remain.
    """

    def __init__(self, suffix: str = ".txt") -> None:
        self.suffix = suffix
        self._path: Path | None = None
        self._directory: Path | None = None

    @property
    def path(self) -> Path:
        if self._path is None:
            raise RuntimeError("TemporaryFile is not open.")
        return self._path

    def __enter__(self) -> TemporaryFile:
        self._directory = _acquire_dir()
        self._path = self._directory / f"{uuid.uuid4().hex}{self.suffix}"
        try:
            self._path.touch(exist_ok=False)
        except OSError:
            _release_dir(self._directory)
            raise
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._path is not None:
            try:
                self._path.unlink(missing_ok=True)
            except OSError as error:
                LOGGER.warning("Could not remove temporary file %s: %s", self._path, error)
        if self._directory is not None:
            _release_dir(self._directory)
        self._path = None
        self._directory = None
