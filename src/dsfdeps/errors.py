"""Exception types raised while resolving, checking, and copying tiles."""

from __future__ import annotations

from pathlib import Path


class DsfDepsError(Exception):
    """Base class for dsfdeps failures."""


class ConfigurationError(DsfDepsError):
    """Raised when the run cannot proceed at all (bad tool setup)."""


class DsftoolNotFoundError(ConfigurationError):
    """Raised when DSFTool is missing or not executable."""


class TileInputError(DsfDepsError):
    """Raised when a tile file is missing or unreadable."""


class ExtractionError(DsfDepsError):
    """Raised when DSF text or terrain files do not yield the expected references."""


class ConversionError(DsfDepsError):
    """Raised when DSFTool exits with a non-zero status."""

    def __init__(self, message: str, *, returncode: int, stdout: str = "", stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class ConversionTimeoutError(ConversionError):
    """Raised when DSFTool does not finish within the configured timeout."""


class TileStateError(DsfDepsError):
    """Raised when tile operations are called out of order."""


class CopyError(DsfDepsError):
    """Raised when a tile or one of its dependencies cannot be copied."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class SamePackageError(CopyError):
    """Raised when the copy destination is the tile's own package."""
