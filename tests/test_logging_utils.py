from __future__ import annotations

import json
import logging
from pathlib import Path

from dsfdeps.logging_utils import (
    HumanFormatter,
    JsonFormatter,
    LogOptions,
    configure_logging,
    reset_logging,
    tile_context,
)


def _own_handlers() -> list[logging.Handler]:
    return [h for h in logging.getLogger().handlers if getattr(h, "_dsfdeps_handler", False)]


def test_configure_logging_writes_json(tmp_path: Path) -> None:
    log_path = tmp_path / "logs" / "dsfdeps.jsonl"
    configure_logging(LogOptions(log_file=log_path))
    logger = logging.getLogger("dsfdeps.test")
    logger.error("missing/unreadable %s", "ground.ter", extra=tile_context("+47+008.dsf"))
    for handler in _own_handlers():
        handler.flush()

    payload = json.loads(log_path.read_text(encoding="utf-8").strip().splitlines()[-1])
    assert payload["message"] == "missing/unreadable ground.ter"
    assert payload["level"] == "error"
    assert payload["tile"] == "+47+008.dsf"
    assert "extra" not in payload


def test_json_formatter_keeps_other_extras() -> None:
    record = logging.makeLogRecord({"msg": "copied", "tile": "T.dsf", "count": 3})
    payload = json.loads(JsonFormatter().format(record))
    assert payload["tile"] == "T.dsf"
    assert payload["extra"] == {"count": 3}


def test_human_formatter_prefixes_tile() -> None:
    formatter = HumanFormatter("%(levelname)s: %(message)s")
    record = logging.makeLogRecord(
        {"levelname": "ERROR", "msg": "missing/unreadable tex1.png", "tile": "T.dsf"}
    )
    assert formatter.format(record) == "[T.dsf] ERROR: missing/unreadable tex1.png"


def test_console_levels_and_replacement() -> None:
    configure_logging(LogOptions(quiet=True))
    handlers = _own_handlers()
    assert [h.level for h in handlers] == [logging.WARNING]

    configure_logging(LogOptions(verbose=1))
    handlers = _own_handlers()
    assert [h.level for h in handlers] == [logging.DEBUG]


def test_reset_leaves_foreign_handlers() -> None:
    foreign = logging.NullHandler()
    root = logging.getLogger()
    root.addHandler(foreign)
    try:
        configure_logging(LogOptions())
        reset_logging()
        assert foreign in root.handlers
        assert _own_handlers() == []
    finally:
        root.removeHandler(foreign)
