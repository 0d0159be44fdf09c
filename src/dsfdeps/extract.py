"""Dependency extraction from DSFTool text output and terrain definitions."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from dsfdeps.errors import ExtractionError
from dsfdeps.lines import LineSource
from dsfdeps.xplane_paths import terrain_dir

TERRAIN_DEF_PREFIX = "TERRAIN_DEF terrain/"
TERRAIN_SUFFIX = ".ter"
BASE_TEX_PREFIX = "BASE_TEX_NOWRAP ../textures/"
BASE_TEX_SUFFIX = ".dds"
BORDER_TEX_PREFIX = "BORDER_TEX ../textures/"
BORDER_TEX_SUFFIX = ".png"

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class DependencySet:
    """Relative file names a tile needs, in first-seen order.

    ``terrain`` entries live in ``<package>/terrain/``; ``base_textures`` and
    ``border_textures`` live in ``<package>/textures/``. Duplicates are kept.
    """

    terrain: tuple[str, ...]
    base_textures: tuple[str, ...] = ()
    border_textures: tuple[str, ...] = ()


def match_reference(line: str, prefix: str, suffix: str) -> str | None:
    """Return the final path segment of ``line`` if it has ``prefix`` and ``suffix``.

    A single trailing carriage return after the suffix is tolerated.
    """
    if not line.startswith(prefix):
        return None
    if line.endswith(f"{suffix}\r"):
        line = line[:-1]
    elif not line.endswith(suffix):
        return None
    return line.rsplit("/", 1)[-1]


def parse_terrain_defs(lines: Iterable[str]) -> list[str]:
    """Collect ``TERRAIN_DEF terrain/<name>.ter`` references from DSF text."""
    references: list[str] = []
    for line in lines:
        ref = match_reference(line, TERRAIN_DEF_PREFIX, TERRAIN_SUFFIX)
        if ref is not None:
            references.append(ref)
    return references


def parse_terrain_file(lines: Iterable[str]) -> tuple[list[str], list[str]]:
    """Collect base (``.dds``) and border (``.png``) textures from a ``.ter`` file."""
    base: list[str] = []
    border: list[str] = []
    for line in lines:
        ref = match_reference(line, BASE_TEX_PREFIX, BASE_TEX_SUFFIX)
        if ref is not None:
            base.append(ref)
            continue
        ref = match_reference(line, BORDER_TEX_PREFIX, BORDER_TEX_SUFFIX)
        if ref is not None:
            border.append(ref)
    return base, border


def read_terrain_defs(text_path: Path) -> list[str]:
    """Read DSF text from disk and return its terrain references.

    Raises ExtractionError when the text cannot be read or names no terrain.
    """
    try:
        with LineSource(text_path) as lines:
            references = parse_terrain_defs(lines)
    except OSError as exc:
        raise ExtractionError(f"cannot read DSF text {text_path}: {exc}") from exc
    if not references:
        raise ExtractionError("no .ter file definitions found")
    return references


def extract_dependencies(text_path: Path, package_root: Path) -> DependencySet:
    """Build the dependency set for a tile from its DSF text output."""
    terrain = read_terrain_defs(text_path)
    base: list[str] = []
    border: list[str] = []
    terrain_root = terrain_dir(package_root)
    for ref in dict.fromkeys(terrain):
        ter_path = terrain_root / ref
        try:
            with LineSource(ter_path) as lines:
                ter_base, ter_border = parse_terrain_file(lines)
        except OSError as exc:
            # Missing terrain files are reported by validation.
            LOGGER.debug("Skipping terrain file %s: %s", ter_path, exc)
            continue
        if not ter_base and not ter_border:
            raise ExtractionError(f"no definitions in {ref}")
        base.extend(ter_base)
        border.extend(ter_border)
    return DependencySet(
        terrain=tuple(terrain),
        base_textures=tuple(base),
        border_textures=tuple(border),
    )
