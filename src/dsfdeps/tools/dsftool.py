"""Wrapper utilities for locating and running DSFTool."""

from __future__ import annotations

import logging
import shutil
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from dsfdeps.errors import (
    ConversionError,
    ConversionTimeoutError,
    DsftoolNotFoundError,
    TileInputError,
)
from dsfdeps.filecheck import PathStatus, check_path, readable_file
from dsfdeps.subprocess_utils import run_command
from dsfdeps.tools.config import DSFTOOL_KEY

DSFTOOL_NAMES = ("DSFTool", "DSFTool.exe", "dsftool")
LOGGER = logging.getLogger("dsfdeps.dsftool")


@dataclass(frozen=True)
class DsftoolResult:
    """Captured output from a DSFTool invocation."""

    command: list[str]
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False


class TextConverter(Protocol):
    """Anything that can write the text projection of a DSF file."""

    def dsf2text(self, dsf_path: Path, text_path: Path) -> DsftoolResult | None:
        """Write the text form of ``dsf_path`` to ``text_path``."""
        raise NotImplementedError


def _is_python_script(path: Path) -> bool:
    return path.suffix.lower() == ".py"


def _build_command(executable: Path, args: list[str]) -> list[str]:
    """Build the DSFTool command line, handling Python scripts."""
    if _is_python_script(executable):
        return [sys.executable, str(executable), *args]
    return [str(executable), *args]


def executable_status(path: Path) -> PathStatus:
    """Check that a DSFTool candidate can be launched."""
    if _is_python_script(path):
        return check_path(path, want_file=True, want_readable=True)
    return check_path(path, want_file=True, want_executable=True)


def default_program_dir() -> Path:
    """Return the directory holding the running program."""
    return Path(sys.argv[0]).resolve().parent


def find_dsftool(
    override: Path | None = None,
    *,
    tool_paths: Mapping[str, Path] | None = None,
    program_dir: Path | None = None,
) -> Path:
    """Locate DSFTool from an override, tool config, program directory, or PATH."""
    if override is not None:
        status = executable_status(override)
        if status is not PathStatus.OK:
            raise DsftoolNotFoundError(
                f"invalid or missing DSFTool executable at {override} ({status.value})"
            )
        return override.resolve()

    configured = (tool_paths or {}).get(DSFTOOL_KEY)
    if configured is not None:
        if not configured.is_absolute() and len(configured.parts) == 1:
            which = shutil.which(str(configured))
            configured = Path(which) if which else configured
        status = executable_status(configured)
        if status is not PathStatus.OK:
            raise DsftoolNotFoundError(
                f"configured DSFTool at {configured} is unusable ({status.value})"
            )
        return configured.resolve()

    search_dir = program_dir or default_program_dir()
    for name in DSFTOOL_NAMES:
        candidate = search_dir / name
        if executable_status(candidate) is PathStatus.OK:
            return candidate.resolve()

    for name in DSFTOOL_NAMES:
        which = shutil.which(name)
        if which:
            return Path(which).resolve()

    raise DsftoolNotFoundError(
        f"missing DSFTool executable; place it next to this program ({search_dir}) "
        "or pass --dsftool"
    )


def run_dsftool(
    executable: Path,
    args: list[str],
    *,
    timeout: float | None = None,
) -> DsftoolResult:
    """Run DSFTool and capture stdout/stderr."""
    result = run_command(_build_command(executable, args), timeout=timeout)
    return DsftoolResult(
        command=result.command,
        returncode=result.returncode,
        stdout=result.stdout,
        stderr=result.stderr,
        timed_out=result.timed_out,
    )


@dataclass(frozen=True)
class DsfTool:
    """A resolved DSFTool executable plus invocation settings."""

    executable: Path
    timeout: float | None = None

    def dsf2text(self, dsf_path: Path, text_path: Path) -> DsftoolResult:
        """Convert a DSF file to text, raising on any failure.

        Captured stdout and stderr are logged verbatim before a non-zero exit
        is reported.
        """
        dsf_status = readable_file(dsf_path)
        if dsf_status is not PathStatus.OK:
            raise TileInputError(f"invalid/missing DSF file at {dsf_path} ({dsf_status.value})")
        tool_status = executable_status(self.executable)
        if tool_status is not PathStatus.OK:
            raise DsftoolNotFoundError(
                f"invalid/missing DSFTool executable at {self.executable} ({tool_status.value})"
            )

        result = run_dsftool(
            self.executable,
            ["--dsf2text", str(dsf_path), str(text_path)],
            timeout=self.timeout,
        )
        if result.returncode == 0 and not result.timed_out:
            return result

        if result.stdout:
            LOGGER.error("%s", result.stdout.rstrip("\n"))
        if result.stderr:
            LOGGER.error("%s", result.stderr.rstrip("\n"))
        if result.timed_out:
            raise ConversionTimeoutError(
                f"DSFTool dsf2text timed out after {self.timeout} seconds",
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
            )
        raise ConversionError(
            f"DSFTool dsf2text failed with exit code {result.returncode}",
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )
