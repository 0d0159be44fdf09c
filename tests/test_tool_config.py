from __future__ import annotations

import json
from pathlib import Path

import pytest

from dsfdeps.errors import ConfigurationError
from dsfdeps.tools import config


def test_load_tool_paths_from_env(tmp_path: Path, monkeypatch) -> None:
    config_path = tmp_path / "tool_paths.json"
    config_path.write_text(
        json.dumps({"dsftool": str(tmp_path / "DSFTool"), "ignored": 3}),
        encoding="utf-8",
    )
    monkeypatch.setenv(config.ENV_TOOL_PATHS, str(config_path))

    assert config.load_tool_paths() == {"dsftool": tmp_path / "DSFTool"}


def test_relative_paths_follow_config_location(tmp_path: Path) -> None:
    config_path = tmp_path / "cfg" / "tool_paths.json"
    config_path.parent.mkdir()
    config_path.write_text(
        json.dumps({"dsftool": "xptools/DSFTool", "other": "DSFTool"}),
        encoding="utf-8",
    )

    tool_paths = config.load_tool_paths(config_path)

    assert tool_paths["dsftool"] == tmp_path / "cfg" / "xptools" / "DSFTool"
    assert tool_paths["other"] == Path("DSFTool")


def test_env_config_invalid_json_is_empty(tmp_path: Path, monkeypatch) -> None:
    config_path = tmp_path / "tool_paths.json"
    config_path.write_text("{not-json", encoding="utf-8")
    monkeypatch.setenv(config.ENV_TOOL_PATHS, str(config_path))

    assert config.load_tool_paths() == {}


def test_env_config_non_dict_is_empty(tmp_path: Path, monkeypatch) -> None:
    config_path = tmp_path / "tool_paths.json"
    config_path.write_text(json.dumps(["not", "dict"]), encoding="utf-8")
    monkeypatch.setenv(config.ENV_TOOL_PATHS, str(config_path))

    assert config.load_tool_paths() == {}


def test_explicit_config_must_load(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="cannot load tool paths"):
        config.load_tool_paths(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("[]", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        config.load_tool_paths(broken)


def test_load_tool_paths_explicit_path(tmp_path: Path) -> None:
    config_path = tmp_path / "custom.json"
    config_path.write_text(json.dumps({"dsftool": "/opt/xptools/DSFTool"}), encoding="utf-8")

    assert config.load_tool_paths(config_path)["dsftool"] == Path("/opt/xptools/DSFTool")


def test_load_tool_paths_defaults(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv(config.ENV_TOOL_PATHS, raising=False)
    monkeypatch.chdir(tmp_path)
    tool_config = tmp_path / "tools" / "tool_paths.json"
    tool_config.parent.mkdir(parents=True, exist_ok=True)
    tool_config.write_text(json.dumps({"dsftool": "bin/DSFTool"}), encoding="utf-8")

    assert config.load_tool_paths()["dsftool"] == tmp_path / "tools" / "bin" / "DSFTool"


def test_load_tool_paths_user_config(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv(config.ENV_TOOL_PATHS, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    user_config = tmp_path / "xdg" / "dsfdeps" / "tool_paths.json"
    user_config.parent.mkdir(parents=True)
    user_config.write_text(json.dumps({"dsftool": "/usr/local/bin/DSFTool"}), encoding="utf-8")

    assert config.load_tool_paths() == {"dsftool": Path("/usr/local/bin/DSFTool")}


def test_load_tool_paths_no_candidates(monkeypatch) -> None:
    monkeypatch.delenv(config.ENV_TOOL_PATHS, raising=False)
    monkeypatch.setattr(config, "_default_candidate_paths", lambda: [])
    assert config.load_tool_paths() == {}
