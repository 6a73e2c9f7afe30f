"""Structured event logging for generation runs.

Each call records one event as key=value pairs (or a JSON line) carrying a
timestamp, the level and the logger name. Loggers can be bound to context
fields (a run's seed, a layout id) that are repeated on every event, so the
lines from several concurrent runs stay separable.

Usage:
    from layoutgen.logging_utils import get_logger
    log = get_logger("layoutgen.pipeline").bind(seed=42)
    log.info(event="phase", phase="settling", tick=51)

Level and output mode come from LAYOUTGEN_LOG_LEVEL / LAYOUTGEN_LOG_JSON.
Errors go to stderr, everything else to stdout.
"""

from __future__ import annotations

import json
import os
import sys
import time
from contextlib import contextmanager
from typing import Any, Dict

LEVELS = {"debug": 10, "info": 20, "warn": 30, "error": 40}
CURRENT_LEVEL = LEVELS.get(os.getenv("LAYOUTGEN_LOG_LEVEL", "info").lower(), 20)
JSON_MODE = os.getenv("LAYOUTGEN_LOG_JSON", "0").lower() in ("1", "true", "yes", "on")


def _kv_value(value: Any) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return str(value).replace(" ", "_")
    return str(value)


def render(level: str, record: Dict[str, Any]) -> str:
    """Render one event; None-valued fields are left out."""
    fields = {k: v for k, v in record.items() if v is not None}
    ts = int(time.time())
    if JSON_MODE:
        return json.dumps(dict(fields, level=level, ts=ts), separators=(",", ":"), default=str)
    head = f"level={level} ts={ts}"
    return " ".join([head] + [f"{k}={_kv_value(v)}" for k, v in fields.items()])


class EventLogger:
    def __init__(self, name: str, context: Dict[str, Any] | None = None):
        self.name = name
        self.context = dict(context or {})

    def bind(self, **fields) -> "EventLogger":
        """Child logger repeating ``fields`` on every event."""
        return EventLogger(self.name, {**self.context, **fields})

    def enabled(self, level: str) -> bool:
        return LEVELS[level] >= CURRENT_LEVEL

    def emit(self, level: str, **fields) -> None:
        if not self.enabled(level):
            return
        record = {"logger": self.name, **self.context, **fields}
        stream = sys.stderr if level == "error" else sys.stdout
        print(render(level, record), file=stream)

    def debug(self, **fields):
        self.emit("debug", **fields)

    def info(self, **fields):
        self.emit("info", **fields)

    def warn(self, **fields):
        self.emit("warn", **fields)

    def error(self, **fields):
        self.emit("error", **fields)


_loggers: Dict[str, EventLogger] = {}


def get_logger(name: str) -> EventLogger:
    if name not in _loggers:
        _loggers[name] = EventLogger(name)
    return _loggers[name]


@contextmanager
def quiet(level: str = "error"):
    """Raise the threshold to ``level`` for the duration of the block."""
    global CURRENT_LEVEL
    saved = CURRENT_LEVEL
    CURRENT_LEVEL = max(saved, LEVELS[level])
    try:
        yield
    finally:
        CURRENT_LEVEL = saved


log = get_logger("layoutgen")
