"""Minimal structured logging helper.

Emits key=value pairs (or one JSON object per line) with a timestamp and
level so generation and patch events stay grep-able from the CLI and from
whatever service embeds the engine.

Usage:
    from mapsmith.logging_utils import get_logger
    log = get_logger("mapsmith.dungeon")
    log.info(event="dungeon_generated", seed="abc", rooms=12)

All non-numeric values are str()'d with spaces replaced. Reserved keys: level, ts.
"""

from __future__ import annotations

import json
import os
import sys
import time

LEVELS = {"debug": 10, "info": 20, "warn": 30, "error": 40}
CURRENT_LEVEL = LEVELS.get(os.getenv("MAPSMITH_LOG_LEVEL", "info").lower(), 20)
JSON_MODE = os.getenv("MAPSMITH_LOG_JSON", "0") in ("1", "true", "TRUE", "yes", "on")


def _format(level: str, **fields):
    if JSON_MODE:
        rec = {k: v for k, v in fields.items() if v is not None}
        rec["level"] = level
        rec["ts"] = int(time.time())
        try:
            return json.dumps(rec, separators=(",", ":"), default=str)
        except (TypeError, ValueError):
            return json.dumps({"level": level, "ts": int(time.time()), "error": "json_encode_failed"})
    parts = [f"level={level}", f"ts={int(time.time())}"]
    for k, v in fields.items():
        if v is None:
            continue
        if isinstance(v, (int, float)):
            parts.append(f"{k}={v}")
        else:
            s = str(v).replace(" ", "_")
            parts.append(f"{k}={s}")
    return " ".join(parts)


def set_level(name: str) -> None:
    """Change the process-wide threshold (used by the CLI --log-level flag)."""
    global CURRENT_LEVEL
    CURRENT_LEVEL = LEVELS[name.lower()]


class _Logger:
    def __init__(self, name: str | None = None):
        self.name = name or "mapsmith"

    def _log(self, lvl: str, **fields):
        if not self.is_enabled(lvl):
            return
        if "logger" not in fields:
            fields["logger"] = self.name
        # stdout stays reserved for CLI JSON output
        print(_format(lvl, **fields), file=sys.stderr)

    def is_enabled(self, lvl: str) -> bool:
        return LEVELS[lvl] >= CURRENT_LEVEL

    def debug(self, **fields):
        self._log("debug", **fields)

    def info(self, **fields):
        self._log("info", **fields)

    def warn(self, **fields):
        self._log("warn", **fields)

    def error(self, **fields):
        self._log("error", **fields)


_LOGGER_CACHE = {}


def get_logger(name: str):
    if name not in _LOGGER_CACHE:
        _LOGGER_CACHE[name] = _Logger(name)
    return _LOGGER_CACHE[name]


log = get_logger("mapsmith")
