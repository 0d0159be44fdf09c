"""A single DSF tile and its cached dependency state."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from dsfdeps.errors import (
    ConfigurationError,
    ConversionError,
    DsfDepsError,
    TileInputError,
    TileStateError,
)
from dsfdeps.extract import DependencySet, extract_dependencies
from dsfdeps.logging_utils import tile_context
from dsfdeps.tempfiles import TemporaryFile
from dsfdeps.tools.dsftool import TextConverter
from dsfdeps.validate import ValidationReport, validate_dependencies
from dsfdeps.xplane_paths import package_root_from_dsf, quadrant_from_dsf_path

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Unresolved:
    """Dependencies have not been extracted yet."""


@dataclass(frozen=True)
class Resolved:
    """Dependencies were extracted successfully."""

    dependencies: DependencySet


@dataclass(frozen=True)
class ResolutionFailed:
    """Dependency extraction was attempted and failed."""

    reason: str


ResolutionState = Unresolved | Resolved | ResolutionFailed


class DsfTile:
    """One DSF tile inside a scenery package.

    The package root is three levels above the DSF file
    (``<package>/Earth nav data/<quadrant>/<tile>.dsf``). Dependency
    extraction and validation results are cached until a forced refresh.
    """

    def __init__(self, path: Path) -> None:
        self.name = path.name
        self.path = path.expanduser().resolve()
        self.package_root = package_root_from_dsf(self.path)
        self.quadrant = quadrant_from_dsf_path(self.path)
        self._state: ResolutionState = Unresolved()
        self._validation: ValidationReport | None = None

    def __repr__(self) -> str:
        return f"DsfTile({str(self.path)!r})"

    @property
    def state(self) -> ResolutionState:
        return self._state

    @property
    def dependencies(self) -> DependencySet | None:
        if isinstance(self._state, Resolved):
            return self._state.dependencies
        return None

    @property
    def dependencies_resolved(self) -> bool:
        return isinstance(self._state, Resolved)

    @property
    def validation(self) -> ValidationReport | None:
        return self._validation

    def is_in_package(self, package_root: Path) -> bool:
        """Return True if ``package_root`` resolves to this tile's own package."""
        return package_root.expanduser().resolve() == self.package_root

    def _log_extra(self) -> dict[str, str]:
        return tile_context(self.name)

    def resolve_dependencies(self, converter: TextConverter, *, force: bool = False) -> bool:
        """Extract terrain and texture references; return True on success.

        Tile-scoped failures are logged and cached as ``ResolutionFailed``.
        Configuration errors (unusable DSFTool) propagate to the caller.
        """
        if not force and not isinstance(self._state, Unresolved):
            return self.dependencies_resolved
        self._validation = None
        try:
            with TemporaryFile() as text_file:
                converter.dsf2text(self.path, text_file.path)
                dependencies = extract_dependencies(text_file.path, self.package_root)
        except ConfigurationError:
            raise
        except (ConversionError, TileInputError, OSError) as exc:
            LOGGER.error("%s", exc, extra=self._log_extra())
            self._state = ResolutionFailed(str(exc))
            return False
        except DsfDepsError as exc:
            LOGGER.error("failed to parse DSF text: %s", exc, extra=self._log_extra())
            self._state = ResolutionFailed(str(exc))
            return False
        self._state = Resolved(dependencies)
        LOGGER.debug(
            "%d terrain, %d base texture, %d border texture reference(s)",
            len(dependencies.terrain),
            len(dependencies.base_textures),
            len(dependencies.border_textures),
            extra=self._log_extra(),
        )
        return True

    def validate_dependencies(self, *, force: bool = False, verbose: bool = True) -> ValidationReport:
        """Check that every dependency exists; raises TileStateError if unresolved."""
        if not isinstance(self._state, Resolved):
            raise TileStateError(f"{self.name}: cannot validate unresolved dependencies")
        if self._validation is not None and not force:
            return self._validation
        report = validate_dependencies(self.name, self.package_root, self._state.dependencies)
        if verbose:
            for missing in report.missing:
                LOGGER.error(
                    "missing/unreadable %s",
                    missing.ref,
                    extra=self._log_extra(),
                )
        self._validation = report
        return report
