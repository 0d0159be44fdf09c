"""Per-tile check and copy orchestration."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dsfdeps.errors import CopyError
from dsfdeps.logging_utils import tile_context
from dsfdeps.materialize import copy_tile_with_dependencies
from dsfdeps.tile import DsfTile, ResolutionFailed
from dsfdeps.tools.dsftool import TextConverter
from dsfdeps.validate import STATUS_BAD, MissingDependency

MODE_CHECK = "check"
MODE_COPY = "copy"

STATUS_COPIED = "copied"
STATUS_COPIED_FALLBACK = "copied-fallback"
STATUS_FAILED = "failed"

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TileOutcome:
    """Result of running one operation on one tile."""

    tile: str
    path: Path
    ok: bool
    status: str
    message: str
    missing: tuple[MissingDependency, ...] = ()
    fallback_used: bool = False
    error: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "tile": self.tile,
            "path": str(self.path),
            "ok": self.ok,
            "status": self.status,
            "message": self.message,
            "missing": [item.as_dict() for item in self.missing],
            "fallback_used": self.fallback_used,
            "error": self.error,
        }


@dataclass(frozen=True)
class BatchResult:
    """Outcomes for every tile of a run, in processing order."""

    mode: str
    outcomes: tuple[TileOutcome, ...]

    @property
    def ok(self) -> bool:
        return bool(self.outcomes) and all(outcome.ok for outcome in self.outcomes)

    @property
    def failed(self) -> tuple[TileOutcome, ...]:
        return tuple(outcome for outcome in self.outcomes if not outcome.ok)


def unique_tile_paths(paths: Iterable[Path | str]) -> list[Path]:
    """Return absolute tile paths with duplicates removed, sorted."""
    unique: dict[Path, None] = {}
    for path in paths:
        unique.setdefault(Path(path).expanduser().resolve(), None)
    return sorted(unique)


def worker_limit(requested: int | None) -> int:
    """Clamp a requested worker count to the available CPUs."""
    max_workers = os.cpu_count() or 1
    if requested is None:
        return 1
    workers = int(requested)
    if workers < 1:
        raise ValueError("Tile jobs must be >= 1.")
    return min(workers, max_workers)


def _resolution_failure(tile: DsfTile) -> TileOutcome:
    state = tile.state
    reason = state.reason if isinstance(state, ResolutionFailed) else "unresolved"
    return TileOutcome(
        tile=tile.name,
        path=tile.path,
        ok=False,
        status=STATUS_BAD,
        message=f"{tile.name}: bad tile, dependency resolution failed",
        error=reason,
    )


def check_tile(path: Path, converter: TextConverter) -> TileOutcome:
    """Resolve and validate one tile."""
    tile = DsfTile(path)
    if not tile.resolve_dependencies(converter):
        return _resolution_failure(tile)
    report = tile.validate_dependencies()
    return TileOutcome(
        tile=tile.name,
        path=tile.path,
        ok=report.passed,
        status=report.status,
        message=report.summary_line(),
        missing=report.missing,
        fallback_used=report.fallback_used,
    )


def copy_tile(
    path: Path,
    destination: Path,
    converter: TextConverter,
    *,
    atomic: bool = False,
) -> TileOutcome:
    """Resolve, validate, and copy one tile into ``destination``."""
    tile = DsfTile(path)
    missing: tuple[MissingDependency, ...] = ()
    if not tile.is_in_package(destination):
        if not tile.resolve_dependencies(converter):
            return _resolution_failure(tile)
        missing = tile.validate_dependencies(verbose=False).missing
    try:
        report = copy_tile_with_dependencies(tile, destination, atomic=atomic)
    except CopyError as exc:
        LOGGER.error("%s", exc, extra=tile_context(tile.name))
        return TileOutcome(
            tile=tile.name,
            path=tile.path,
            ok=False,
            status=STATUS_FAILED,
            message=f"{tile.name}: tile copy failed",
            missing=missing,
            error=str(exc),
        )
    return TileOutcome(
        tile=tile.name,
        path=tile.path,
        ok=True,
        status=STATUS_COPIED_FALLBACK if report.fallback_used else STATUS_COPIED,
        message=report.summary_line(),
        fallback_used=report.fallback_used,
    )


def run_tiles(
    paths: Sequence[Path],
    operation: Callable[[Path], TileOutcome],
    *,
    mode: str,
    jobs: int | None = 1,
    on_outcome: Callable[[TileOutcome], None] | None = None,
) -> BatchResult:
    """Run ``operation`` for each tile, sequentially or on a thread pool.

    Outcomes keep the order of ``paths`` regardless of completion order, and
    ``on_outcome`` is called for each one in that order.
    """
    workers = worker_limit(jobs)
    outcomes: list[TileOutcome] = []
    if workers <= 1 or len(paths) <= 1:
        for path in paths:
            outcome = operation(path)
            outcomes.append(outcome)
            if on_outcome:
                on_outcome(outcome)
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            for outcome in executor.map(operation, paths):
                outcomes.append(outcome)
                if on_outcome:
                    on_outcome(outcome)
    return BatchResult(mode=mode, outcomes=tuple(outcomes))
