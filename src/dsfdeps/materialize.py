"""Copy a validated tile and its dependency closure into another package."""

from __future__ import annotations

import logging
import os
import shutil
import threading
import uuid
from dataclasses import dataclass, field
from pathlib import Path

from dsfdeps.errors import CopyError, SamePackageError, TileStateError
from dsfdeps.filecheck import PathStatus
from dsfdeps.tile import DsfTile
from dsfdeps.validate import FALLBACK_WARNING, resolve_base_texture
from dsfdeps.xplane_paths import terrain_dir, textures_dir, tile_dir

BACKUP_SUFFIX = ".dsfdeps-bak"
STAGING_SUFFIX = ".dsfdeps-tmp"
LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CopyReport:
    """Files written for one tile copy."""

    tile: str
    destination: Path
    copied: tuple[Path, ...]
    fallbacks: tuple[str, ...] = ()

    @property
    def fallback_used(self) -> bool:
        return bool(self.fallbacks)

    def summary_line(self) -> str:
        if self.fallback_used:
            return f"{self.tile}: tile copy OK ({FALLBACK_WARNING})"
        return f"{self.tile}: tile copy OK"


_LOCKS_GUARD = threading.Lock()
_DESTINATION_LOCKS: dict[Path, threading.Lock] = {}


def destination_lock(package_root: Path) -> threading.Lock:
    """Return the lock shared by every copy into ``package_root``."""
    with _LOCKS_GUARD:
        return _DESTINATION_LOCKS.setdefault(package_root, threading.Lock())


def _sibling(target: Path, suffix: str) -> Path:
    return target.with_name(f".{target.name}.{uuid.uuid4().hex[:12]}{suffix}")


@dataclass
class _CopyJournal:
    """Files created or replaced during one copy, for optional rollback."""

    atomic: bool
    created: list[Path] = field(default_factory=list)
    backups: list[tuple[Path, Path]] = field(default_factory=list)

    def copy(self, source: Path, target: Path) -> None:
        staging = _sibling(target, STAGING_SUFFIX)
        try:
            shutil.copy2(source, staging)
            if self.atomic and (target.exists() or target.is_symlink()):
                backup = _sibling(target, BACKUP_SUFFIX)
                target.replace(backup)
                self.backups.append((target, backup))
            os.replace(staging, target)
        except OSError as exc:
            staging.unlink(missing_ok=True)
            raise CopyError(f"file copy failed for {target}: {exc}", path=target) from exc
        self.created.append(target)

    def commit(self) -> None:
        for _, backup in self.backups:
            backup.unlink(missing_ok=True)

    def rollback(self) -> None:
        for path in reversed(self.created):
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                LOGGER.warning("Rollback could not remove %s: %s", path, exc)
        for target, backup in reversed(self.backups):
            try:
                if backup.exists():
                    backup.replace(target)
            except OSError as exc:
                LOGGER.warning("Rollback could not restore %s: %s", target, exc)


def _ensure_dirs(*directories: Path) -> None:
    for directory in directories:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CopyError(
                f"unable to create directory structure at {directory}: {exc}",
                path=directory,
            ) from exc


def copy_tile_with_dependencies(
    tile: DsfTile,
    destination: Path,
    *,
    atomic: bool = False,
) -> CopyReport:
    """Copy ``tile`` and every file it depends on into the package at ``destination``.

    Existing files at the destination are overwritten. The first failed copy
    raises CopyError; files copied before it are kept unless ``atomic`` is
    set, in which case they are removed and overwritten files restored.
    """
    if tile.is_in_package(destination):
        raise SamePackageError(
            f"{tile.name}: same source/target directory, not copying",
            path=destination,
        )
    report = tile.validation
    dependencies = tile.dependencies
    if dependencies is None or report is None:
        raise TileStateError(f"{tile.name}: dependency check wasn't done, not copying")
    if not report.passed:
        raise CopyError(f"{tile.name}: dependency check wasn't good, not copying")

    target_root = destination.expanduser().resolve()
    target_tiles = tile_dir(target_root, tile.quadrant)
    target_terrain = terrain_dir(target_root)
    target_textures = textures_dir(target_root)
    _ensure_dirs(target_tiles, target_terrain, target_textures)

    source_terrain = terrain_dir(tile.package_root)
    source_textures = textures_dir(tile.package_root)
    journal = _CopyJournal(atomic=atomic)
    fallbacks: list[str] = []
    # Tiles of one package share terrain and texture files; copies into the
    # same destination run one tile at a time.
    with destination_lock(target_root):
        try:
            journal.copy(tile.path, target_tiles / tile.name)
            for ref in dict.fromkeys(dependencies.terrain):
                journal.copy(source_terrain / ref, target_terrain / ref)
            for ref in dict.fromkeys(dependencies.border_textures):
                journal.copy(source_textures / ref, target_textures / ref)
            for ref in dict.fromkeys(dependencies.base_textures):
                source = resolve_base_texture(source_textures, ref)
                if source.status is not PathStatus.OK:
                    raise CopyError(
                        f"file copy failed for {target_textures / ref}: "
                        f"source {source.status.value}",
                        path=target_textures / ref,
                    )
                if source.fallback:
                    fallbacks.append(ref)
                journal.copy(source.path, target_textures / source.path.name)
        except CopyError:
            if atomic:
                journal.rollback()
            raise
        journal.commit()
    return CopyReport(
        tile=tile.name,
        destination=target_root,
        copied=tuple(journal.created),
        fallbacks=tuple(fallbacks),
    )
