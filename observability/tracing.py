"""Timing spans around slow calls such as oracle requests."""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator

from .logger import log_event


@contextmanager
def span(session_id: str, name: str) -> Iterator[None]:
    """Log a ``span`` event with the elapsed milliseconds, even on error."""

    started = time.perf_counter()
    try:
        yield
    finally:
        log_event("span", session_id, node=name, ms=round((time.perf_counter() - started) * 1000))


__all__ = ["span"]
