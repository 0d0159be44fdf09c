"""Tool path configuration (``tool_paths.json``)."""

from __future__ import annotations

import json
import os
from pathlib import Path

from dsfdeps.errors import ConfigurationError

ENV_TOOL_PATHS = "DSFDEPS_TOOL_PATHS"
DSFTOOL_KEY = "dsftool"
CONFIG_NAME = "tool_paths.json"


def _user_config_dir() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME")
    return (Path(base) if base else Path.home() / ".config") / "dsfdeps"


def _default_candidate_paths() -> list[Path]:
    """Return default config locations, highest priority first."""
    return [Path.cwd() / "tools" / CONFIG_NAME, _user_config_dir() / CONFIG_NAME]


def _tool_path(value: str, base_dir: Path) -> Path:
    # Bare program names are left for a PATH lookup; relative paths are
    # relative to the config file.
    path = Path(value).expanduser()
    if path.is_absolute() or len(path.parts) == 1:
        return path
    return base_dir / path


def _parse(candidate: Path) -> dict[str, Path]:
    data = json.loads(candidate.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("top-level JSON value must be an object")
    return {
        key: _tool_path(value, candidate.parent)
        for key, value in data.items()
        if isinstance(value, str) and value
    }


def _load_candidate(candidate: Path) -> dict[str, Path] | None:
    """Load a config found by lookup; unreadable or malformed files count as empty."""
    if not candidate.exists():
        return None
    try:
        return _parse(candidate)
    except (OSError, ValueError):
        return {}


def load_tool_paths(path: Path | None = None) -> dict[str, Path]:
    """Return tool paths from the given config, ``$DSFDEPS_TOOL_PATHS``, or a default location.

    An explicitly given config must exist and parse; ConfigurationError is
    raised otherwise.
    """
    if path:
        try:
            return _parse(path)
        except (OSError, ValueError) as exc:
            raise ConfigurationError(f"cannot load tool paths from {path}: {exc}") from exc
    env_path = os.environ.get(ENV_TOOL_PATHS)
    if env_path:
        return _load_candidate(Path(env_path)) or {}
    for candidate in _default_candidate_paths():
        result = _load_candidate(candidate)
        if result is not None:
            return result
    return {}
