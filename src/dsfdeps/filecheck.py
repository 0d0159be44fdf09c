"""Existence and permission checks for scenery files and tools."""

from __future__ import annotations

import enum
import os
from pathlib import Path


class PathStatus(enum.Enum):
    OK = "ok"
    NOT_EXIST = "missing"
    NOT_FILE = "not a file"
    NOT_READABLE = "unreadable"
    NOT_EXECUTABLE = "not executable"


def check_path(
    path: Path,
    *,
    want_file: bool = False,
    want_readable: bool = False,
    want_executable: bool = False,
) -> PathStatus:
    """Return the first failing requirement for a path, or PathStatus.OK."""
    if not path.exists():
        return PathStatus.NOT_EXIST
    if want_file and not path.is_file():
        return PathStatus.NOT_FILE
    if want_readable and not os.access(path, os.R_OK):
        return PathStatus.NOT_READABLE
    if want_executable and not os.access(path, os.X_OK):
        return PathStatus.NOT_EXECUTABLE
    return PathStatus.OK


def readable_file(path: Path) -> PathStatus:
    """Shorthand for the regular-file and readable requirement."""
    return check_path(path, want_file=True, want_readable=True)
