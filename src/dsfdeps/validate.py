"""Existence checks for a tile's terrain and texture dependencies."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dsfdeps.extract import DependencySet
from dsfdeps.filecheck import PathStatus, readable_file
from dsfdeps.xplane_paths import terrain_dir, textures_dir

FALLBACK_TEXTURE_SUFFIX = ".jpg"

KIND_TERRAIN = "terrain"
KIND_BORDER_TEXTURE = "border_texture"
KIND_BASE_TEXTURE = "base_texture"

STATUS_GOOD = "good"
STATUS_GOOD_FALLBACK = "good-fallback"
STATUS_BAD = "bad"

FALLBACK_WARNING = "warning: unconverted JPEG files present"


@dataclass(frozen=True)
class MissingDependency:
    """A referenced file that is absent, not a regular file, or unreadable."""

    kind: str
    ref: str
    path: Path
    reason: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "ref": self.ref,
            "path": str(self.path),
            "reason": self.reason,
        }


@dataclass(frozen=True)
class TextureSource:
    """Where a base texture reference resolves to on disk."""

    path: Path
    status: PathStatus
    fallback: bool = False


@dataclass(frozen=True)
class ValidationReport:
    """Outcome of checking every dependency of one tile."""

    tile: str
    missing: tuple[MissingDependency, ...] = ()
    fallbacks: tuple[str, ...] = ()

    @property
    def passed(self) -> bool:
        return not self.missing

    @property
    def fallback_used(self) -> bool:
        return bool(self.fallbacks)

    @property
    def status(self) -> str:
        if not self.passed:
            return STATUS_BAD
        if self.fallback_used:
            return STATUS_GOOD_FALLBACK
        return STATUS_GOOD

    def summary_line(self) -> str:
        """Return the one-line good/bad verdict for this tile."""
        if not self.passed:
            return f"{self.tile}: bad tile, dependency check failed"
        if self.fallback_used:
            return f"{self.tile}: good tile, dependency check OK ({FALLBACK_WARNING})"
        return f"{self.tile}: good tile, dependency check OK"


def resolve_base_texture(textures_root: Path, ref: str) -> TextureSource:
    """Resolve a ``.dds`` reference, falling back to a ``.jpg`` sibling if it does not exist."""
    path = textures_root / ref
    status = readable_file(path)
    if status is not PathStatus.NOT_EXIST:
        return TextureSource(path=path, status=status)
    fallback = path.with_suffix(FALLBACK_TEXTURE_SUFFIX)
    if readable_file(fallback) is PathStatus.OK:
        return TextureSource(path=fallback, status=PathStatus.OK, fallback=True)
    return TextureSource(path=path, status=status)


def validate_dependencies(
    tile: str,
    package_root: Path,
    dependencies: DependencySet,
) -> ValidationReport:
    """Check every dependency and collect all missing files (not fail-fast)."""
    missing: list[MissingDependency] = []
    fallbacks: list[str] = []

    terrain_root = terrain_dir(package_root)
    for ref in dict.fromkeys(dependencies.terrain):
        path = terrain_root / ref
        status = readable_file(path)
        if status is not PathStatus.OK:
            missing.append(MissingDependency(KIND_TERRAIN, ref, path, status.value))

    textures_root = textures_dir(package_root)
    for ref in dict.fromkeys(dependencies.border_textures):
        path = textures_root / ref
        status = readable_file(path)
        if status is not PathStatus.OK:
            missing.append(MissingDependency(KIND_BORDER_TEXTURE, ref, path, status.value))

    for ref in dict.fromkeys(dependencies.base_textures):
        source = resolve_base_texture(textures_root, ref)
        if source.status is not PathStatus.OK:
            missing.append(MissingDependency(KIND_BASE_TEXTURE, ref, source.path, source.status.value))
            continue
        if source.fallback:
            fallbacks.append(ref)

    return ValidationReport(tile=tile, missing=tuple(missing), fallbacks=tuple(fallbacks))
