"""Structured event logging for interview sessions.

Events go to stdout as one human-readable line each. With ``ENABLE_FILE_LOGS``
set they are also written to a rotating JSON-lines file and a rotating
human-readable ``-human.log`` companion.
"""
from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
import time
import uuid
from typing import Any, Callable

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_FILE_LOGS = os.getenv("ENABLE_FILE_LOGS", "0") in ("1", "true", "True")
LOG_FILE = os.getenv("LOG_FILE", "logs/interview.log")
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", "5242880"))
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "5"))

HUMAN_FORMAT = "[%(asctime)s] %(levelname)s %(name)s :: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Keys surfaced on the human line, in this order
HUMAN_KEYS = ("node", "action", "plan_position", "turns", "reason", "ms", "recipient", "error")

_events = logging.getLogger("interview")
_events.setLevel(LOG_LEVEL)
_events.propagate = False


def _json_lines(wanted: bool) -> Callable[[logging.LogRecord], bool]:
    return lambda record: getattr(record, "is_json", False) is wanted


def _attach(handler: logging.Handler, fmt: str, *, json_lines: bool) -> None:
    handler.setLevel(LOG_LEVEL)
    handler.setFormatter(logging.Formatter(fmt, datefmt=DATE_FORMAT))
    handler.addFilter(_json_lines(json_lines))
    _events.addHandler(handler)


def _rotating(path: str) -> logging.handlers.RotatingFileHandler:
    return logging.handlers.RotatingFileHandler(path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT)


def _human_log_path(path: str) -> str:
    base = path[: -len(".log")] if path.endswith(".log") else path
    return f"{base}-human.log"


def _ensure_handlers() -> None:
    if _events.handlers:
        return

    _attach(logging.StreamHandler(stream=sys.stdout), HUMAN_FORMAT, json_lines=False)
    if not ENABLE_FILE_LOGS:
        return

    log_dir = os.path.dirname(LOG_FILE)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    _attach(_rotating(LOG_FILE), "%(message)s", json_lines=True)
    _attach(_rotating(_human_log_path(LOG_FILE)), HUMAN_FORMAT, json_lines=False)


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Send module loggers to stdout in the event line format."""

    if not logging.getLogger().handlers:
        logging.basicConfig(level=level, format=HUMAN_FORMAT, datefmt=DATE_FORMAT, stream=sys.stdout)
    _ensure_handlers()


def _format_human(evt: dict[str, Any]) -> str:
    parts = [f"session={evt.get('session_id')}", f"kind={evt.get('kind')}"]
    parts.extend(f"{key}={evt[key]}" for key in HUMAN_KEYS if key in evt)
    return " ".join(parts)


def _emit(msg: str, *, level: int, is_json: bool) -> None:
    record = _events.makeRecord(_events.name, level, "", 0, msg, (), None)
    record.is_json = is_json  # type: ignore[attr-defined]
    _events.handle(record)


def log_event(kind: str, session_id: str, *, level: int = logging.INFO, **fields: Any) -> dict[str, Any]:
    """Log one session event and return its payload."""

    _ensure_handlers()
    payload: dict[str, Any] = {
        "ts": time.time(),
        "trace": uuid.uuid4().hex,
        "kind": kind,
        "session_id": session_id,
        **fields,
    }
    _emit(_format_human(payload), level=level, is_json=False)
    if ENABLE_FILE_LOGS:
        _emit(json.dumps(payload, ensure_ascii=False, default=str), level=level, is_json=True)
    return payload


__all__ = ["configure_logging", "log_event"]
