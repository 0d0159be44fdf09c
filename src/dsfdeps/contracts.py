"""Schema validation helpers for run reports."""

from __future__ import annotations

import json
from importlib import resources
from typing import Any, Mapping

import jsonschema

SCHEMA_VERSION = "1"


def _load_schema(name: str) -> dict[str, Any]:
    """Load a JSON schema bundled in the package."""
    with resources.files("dsfdeps.schemas").joinpath(name).open("r", encoding="utf-8") as handle:
        return json.load(handle)


def validate_check_report(report: Mapping[str, Any]) -> None:
    """Validate a check/copy run report against the schema."""
    schema = _load_schema("check_report.schema.json")
    jsonschema.validate(report, schema)
