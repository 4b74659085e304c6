"""Session repository with per-session serialization."""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import ContextManager, Dict, Iterator, Optional, Protocol

from interview.errors import InvalidRequest

from .models import Session


logger = logging.getLogger(__name__)


class SessionRepository(Protocol):  # Storage contract consumed by controllers and routes
    def get(self, session_id: str) -> Optional[Session]: ...

    def put(self, session: Session) -> None: ...

    def locked(self, session_id: str) -> ContextManager[Session]: ...

    def find_by_hr_token(self, token: str) -> Optional[Session]: ...


class InMemorySessionStore:
    """Process-lifetime session map.

    Sessions are mutated in place; ``locked`` serializes every mutation of a
    given session while leaving other sessions free to proceed.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}
        self._hr_tokens: Dict[str, str] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def get(self, session_id: str) -> Optional[Session]:
        with self._guard:
            return self._sessions.get(session_id)

    def put(self, session: Session) -> None:
        with self._guard:
            if session.session_id in self._sessions:
                raise ValueError(f"Session '{session.session_id}' already exists")
            self._sessions[session.session_id] = session
            self._locks[session.session_id] = threading.Lock()
            if session.hr_token:
                self._hr_tokens[session.hr_token] = session.session_id
        logger.info("Session stored session=%s plan=%d", session.session_id, len(session.plan))

    def find_by_hr_token(self, token: str) -> Optional[Session]:
        with self._guard:
            session_id = self._hr_tokens.get(token)
            return self._sessions.get(session_id) if session_id else None

    @contextmanager
    def locked(self, session_id: str) -> Iterator[Session]:
        with self._guard:
            session = self._sessions.get(session_id)
            lock = self._locks.get(session_id)
        if session is None or lock is None:
            raise InvalidRequest(f"Unknown session '{session_id}'")
        with lock:
            yield session

    def __len__(self) -> int:
        with self._guard:
            return len(self._sessions)


__all__ = ["InMemorySessionStore", "SessionRepository"]
