"""Run report construction helpers."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from dsfdeps.batch import BatchResult
from dsfdeps.contracts import SCHEMA_VERSION, validate_check_report


def _utc_now() -> str:
    """Return the current UTC timestamp as ISO8601."""
    return datetime.now(timezone.utc).isoformat()


def build_report(result: BatchResult, *, destination: Path | None = None) -> dict[str, Any]:
    """Create a run report dictionary."""
    return {
        "schema_version": SCHEMA_VERSION,
        "created_at": _utc_now(),
        "mode": result.mode,
        "destination": str(destination) if destination else None,
        "ok": result.ok,
        "tiles": [outcome.as_dict() for outcome in result.outcomes],
        "errors": [outcome.error for outcome in result.outcomes if outcome.error],
    }


def write_report(path: Path, report: dict[str, Any]) -> None:
    """Validate a report against the schema and write it as JSON."""
    validate_check_report(report)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(report, indent=2), encoding="utf-8")
