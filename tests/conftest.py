from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

import pytest  # noqa: E402

from dsfdeps.logging_utils import reset_logging  # noqa: E402
from dsfdeps.tools import config as tool_config  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_tool_paths(monkeypatch, tmp_path) -> None:
    """Prevent local tool configs from bleeding into tests."""
    monkeypatch.setenv(tool_config.ENV_TOOL_PATHS, str(tmp_path / "missing_tool_paths.json"))


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop handlers installed by configure_logging after each test."""
    yield
    reset_logging()
