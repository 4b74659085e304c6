from __future__ import annotations  # Session package exports

from .models import BehaviorFlags, Evaluation, PlanQuestion, Report, Scores, Session, Speaker, Turn
from .store import InMemorySessionStore, SessionRepository

__all__ = [
    "BehaviorFlags",
    "Evaluation",
    "InMemorySessionStore",
    "PlanQuestion",
    "Report",
    "Scores",
    "Session",
    "SessionRepository",
    "Speaker",
    "Turn",
]
