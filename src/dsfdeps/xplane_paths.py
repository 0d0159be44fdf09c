"""X-Plane scenery package layout (``Earth nav data``, ``terrain``, ``textures``)."""

from __future__ import annotations

from pathlib import Path

EARTH_NAV_DATA = "Earth nav data"
TERRAIN_DIR = "terrain"
TEXTURES_DIR = "textures"


def quadrant_from_dsf_path(dsf_path: Path) -> str:
    """Return the bucket folder name from a DSF path."""
    return dsf_path.parent.name


def package_root_from_dsf(dsf_path: Path) -> Path:
    """Return the package root for a DSF (tile -> bucket -> Earth nav data -> package)."""
    parents = dsf_path.parents
    return parents[min(2, len(parents) - 1)]


def terrain_dir(package_root: Path) -> Path:
    return package_root / TERRAIN_DIR


def textures_dir(package_root: Path) -> Path:
    return package_root / TEXTURES_DIR


def tile_dir(package_root: Path, quadrant: str) -> Path:
    """Return the Earth nav data bucket folder inside a package."""
    return package_root / EARTH_NAV_DATA / quadrant
