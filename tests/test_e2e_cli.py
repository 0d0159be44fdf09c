from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

from tests.utils import build_package, with_src_env, write_fake_dsftool

pytestmark = pytest.mark.e2e


def _run_cli(args: list[str], *, cwd: Path) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [sys.executable, "-m", "dsfdeps", *args],
        cwd=cwd,
        env=with_src_env(),
        capture_output=True,
        text=True,
        check=False,
    )


def test_cli_check_then_copy(tmp_path: Path) -> None:
    dsftool = write_fake_dsftool(tmp_path / "bin")
    tile = build_package(tmp_path / "pack", dds=False, jpg=True)
    destination = tmp_path / "dest"

    check = _run_cli(["--dsftool", str(dsftool), str(tile)], cwd=tmp_path)
    assert check.returncode == 0, check.stderr
    assert "good tile, dependency check OK (warning" in check.stdout

    copy = _run_cli(
        ["--copy", str(destination), "--dsftool", str(dsftool), str(tile)],
        cwd=tmp_path,
    )
    assert copy.returncode == 0, copy.stderr
    assert copy.stdout.strip().startswith("+47+008.dsf: tile copy OK")
    assert (destination / "textures" / "tex1.jpg").read_bytes() == b"texture"
    assert not (destination / "textures" / "tex1.dds").exists()


def test_cli_bad_tile_exit_code(tmp_path: Path) -> None:
    dsftool = write_fake_dsftool(tmp_path / "bin")
    tile = build_package(tmp_path / "pack", dds=False)

    result = _run_cli(["--dsftool", str(dsftool), str(tile)], cwd=tmp_path)

    assert result.returncode == 1
    assert "bad tile, dependency check failed" in result.stdout
    assert "tex1.dds" in result.stderr
