"""Subprocess helpers with captured output and timeouts."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Sequence

TIMEOUT_RETURNCODE = 124


@dataclass(frozen=True)
class CommandResult:
    """Captured output from a command invocation."""

    command: list[str]
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool


def _decode(raw: str | bytes | None) -> str:
    if raw is None:
        return ""
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    return raw


def run_command(
    command: Sequence[str],
    *,
    timeout: float | None = None,
) -> CommandResult:
    """Run a command to completion, capturing stdout and stderr."""
    cmd_list = [str(item) for item in command]
    try:
        result = subprocess.run(
            cmd_list,
            capture_output=True,
            stdin=subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        stdout = _decode(exc.stdout)
        stderr = _decode(exc.stderr)
        timeout_message = f"Command timed out after {timeout} seconds."
        stderr = f"{stderr}\n{timeout_message}" if stderr else timeout_message
        return CommandResult(cmd_list, TIMEOUT_RETURNCODE, stdout, stderr, True)
    return CommandResult(cmd_list, result.returncode, result.stdout, result.stderr, False)
