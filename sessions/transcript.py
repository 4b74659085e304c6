"""Append-only transcript helpers."""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .models import Session, Speaker, Turn

_ORACLE_ROLES: Dict[str, str] = {"agent": "assistant", "candidate": "user"}
_TRANSCRIPT_LABELS: Dict[str, str] = {"agent": "AI", "candidate": "Candidate"}


def append(
    session: Session,
    speaker: Speaker,
    content: str,
    *,
    plan_index: Optional[int] = None,
    follow_up: bool = False,
) -> Turn:
    """Append a turn to the session transcript and return it."""

    turn = Turn(speaker=speaker, content=content, plan_index=plan_index, follow_up=follow_up)
    session.transcript.append(turn)
    return turn


def last_turn(session: Session) -> Optional[Turn]:
    return session.transcript[-1] if session.transcript else None


def counts(turns: Iterable[Turn]) -> Tuple[int, int]:
    """Return ``(agent, candidate)`` turn counts."""

    agent = candidate = 0
    for turn in turns:
        if turn.speaker == "agent":
            agent += 1
        else:
            candidate += 1
    return agent, candidate


def is_balanced(turns: Sequence[Turn]) -> bool:
    """True when the agent has spoken as often as the candidate or exactly once more."""

    agent, candidate = counts(turns)
    return agent in (candidate, candidate + 1)


def as_oracle_messages(turns: Iterable[Turn]) -> List[Dict[str, str]]:
    return [{"role": _ORACLE_ROLES[turn.speaker], "content": turn.content} for turn in turns]


def render_transcript(turns: Iterable[Turn]) -> str:
    return "\n".join(f"{_TRANSCRIPT_LABELS[turn.speaker]}: {turn.content}" for turn in turns)


__all__ = ["append", "as_oracle_messages", "counts", "is_balanced", "last_turn", "render_transcript"]
