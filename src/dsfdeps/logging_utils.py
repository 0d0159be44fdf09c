"""Logging setup for dsfdeps: console verdict noise on stderr, optional JSON log file."""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

TILE_FIELD = "tile"
CONSOLE_FORMAT = "%(levelname)s: %(message)s"
VERBOSE_CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"

_RESERVED_FIELDS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}
_HANDLER_MARK = "_dsfdeps_handler"


@dataclass(frozen=True)
class LogOptions:
    """Logging choices taken from the command line."""

    verbose: int = 0
    quiet: bool = False
    log_file: Path | None = None
    json_console: bool = False


def tile_context(tile: str) -> dict[str, str]:
    """Return the ``extra`` mapping that tags a record with a tile name."""
    return {TILE_FIELD: tile}


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


class JsonFormatter(logging.Formatter):
    """One JSON object per record; the tile name is a top-level key."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": _timestamp(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_FIELDS
        }
        tile = extra.pop(TILE_FIELD, None)
        if tile:
            payload[TILE_FIELD] = tile
        if extra:
            payload["extra"] = extra
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class HumanFormatter(logging.Formatter):
    """Prefix messages with ``[tile]`` when the record names one."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        tile = getattr(record, TILE_FIELD, None)
        return f"[{tile}] {message}" if tile else message


def _console_level(options: LogOptions) -> int:
    if options.quiet:
        return logging.WARNING
    return logging.DEBUG if options.verbose > 0 else logging.INFO


def _install(root: logging.Logger, handler: logging.Handler) -> None:
    setattr(handler, _HANDLER_MARK, True)
    root.addHandler(handler)


def reset_logging() -> None:
    """Remove and close the handlers installed by :func:`configure_logging`."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            root.removeHandler(handler)
            handler.close()


def configure_logging(options: LogOptions) -> logging.Logger:
    """Install dsfdeps handlers on the root logger and return it.

    Calling it again replaces the handlers from the previous call. Handlers
    installed by other code (test harnesses, embedding applications) stay.
    """
    reset_logging()
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(_console_level(options))
    if options.json_console:
        console.setFormatter(JsonFormatter())
    else:
        fmt = VERBOSE_CONSOLE_FORMAT if options.verbose > 1 else CONSOLE_FORMAT
        console.setFormatter(HumanFormatter(fmt))
    _install(root, console)

    if options.log_file:
        options.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(options.log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(JsonFormatter())
        _install(root, file_handler)

    return root
