"""Turn-decision state machine for a running interview."""
from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel

from config.settings import settings
from observability import log_event, span
from sessions import Session, SessionRepository, Turn
from sessions import transcript

from .errors import InvalidRequest
from .oracle import DecisionOracle
from .prompts import build_turn_instructions
from .verdict import CONCLUDE, FOLLOW_UP, NEXT_QUESTION, Action, parse_verdict


logger = logging.getLogger(__name__)

PLAN_EXHAUSTED_REASON = "all main questions asked"
DEFAULT_CONCLUDE_REASON = "interview concluded"


class NextStep(BaseModel):
    """What the caller should do after a turn."""

    action: Action
    question: Optional[str] = None
    reason: str = ""


class TurnController:
    """Records each exchange, consults the decision oracle, and picks the next agent turn.

    Plan progress is tracked with ``Session.plan_position``, advanced only here:
    when the controller emits a plan question, or when the caller reports asking
    the next plan question itself.
    """

    def __init__(
        self,
        store: SessionRepository,
        oracle: DecisionOracle,
        *,
        fallback_follow_up: Optional[str] = None,
    ) -> None:
        self._store = store
        self._oracle = oracle
        self._fallback_follow_up = fallback_follow_up or settings.FALLBACK_FOLLOW_UP

    def open_interview(self, session_id: str) -> NextStep:
        """Return the question the candidate should answer first."""

        with self._store.locked(session_id) as session:
            _require_active(session)
            last = transcript.last_turn(session)
            if last is not None and last.speaker == "agent":
                return NextStep(action=NEXT_QUESTION, question=last.content, reason="awaiting answer")
            if session.transcript:
                raise InvalidRequest("Interview already started; submit the pending answer")
            step = self._ask_next_plan_question(session, reason="opening question")
            log_event("interview_opened", session_id, action=step.action, plan_position=session.plan_position)
            return step

    def advance_turn(self, session_id: str, last_question: str, last_answer: str) -> NextStep:
        """Record ``last_question``/``last_answer`` and decide the next step."""

        if not (last_question or "").strip() or not (last_answer or "").strip():
            raise InvalidRequest("Missing lastQuestion/lastAnswer")

        with self._store.locked(session_id) as session:
            _require_active(session)

            asked = self._record_question(session, last_question)
            self._acknowledge_plan_question(session, asked)
            transcript.append(session, "candidate", last_answer)

            messages = transcript.as_oracle_messages(session.transcript)
            instructions = build_turn_instructions(session.expert_terms)
            with span(session_id, "turn_decision"):
                raw = self._oracle.decide(messages, instructions)
            verdict = parse_verdict(raw, session_id=session_id)

            if verdict.action == FOLLOW_UP:
                question = (verdict.follow_up_question or "").strip() or self._fallback_follow_up
                transcript.append(session, "agent", question, follow_up=True)
                step = NextStep(action=FOLLOW_UP, question=question, reason=verdict.reason)
            elif verdict.action == NEXT_QUESTION:
                step = self._ask_next_plan_question(session, reason=verdict.reason)
            else:
                step = NextStep(action=CONCLUDE, reason=verdict.reason or DEFAULT_CONCLUDE_REASON)

            log_event(
                "turn_decision",
                session_id,
                action=step.action,
                plan_position=session.plan_position,
                turns=len(session.transcript),
                reason=step.reason,
            )
            if not transcript.is_balanced(session.transcript):
                logger.warning("Turn counts out of balance session=%s", session_id)
            return step

    def _record_question(self, session: Session, question: str) -> Turn:
        last = transcript.last_turn(session)
        if last is not None and last.speaker == "agent" and last.content == question:
            return last
        return transcript.append(session, "agent", question)

    def _acknowledge_plan_question(self, session: Session, turn: Turn) -> None:
        # Only turns the controller did not write itself are matched, and only against the next plan slot.
        if turn.plan_index is not None or turn.follow_up:
            return
        upcoming = session.next_plan_question()
        if upcoming is not None and turn.content == upcoming.question:
            turn.plan_index = session.plan_position
            session.plan_position += 1

    def _ask_next_plan_question(self, session: Session, *, reason: str) -> NextStep:
        upcoming = session.next_plan_question()
        if upcoming is None:
            return NextStep(action=CONCLUDE, reason=PLAN_EXHAUSTED_REASON)
        transcript.append(session, "agent", upcoming.question, plan_index=session.plan_position)
        session.plan_position += 1
        return NextStep(action=NEXT_QUESTION, question=upcoming.question, reason=reason)


def _require_active(session: Session) -> None:
    if session.is_completed:
        raise InvalidRequest(f"Session '{session.session_id}' is already completed")


__all__ = ["DEFAULT_CONCLUDE_REASON", "NextStep", "PLAN_EXHAUSTED_REASON", "TurnController"]
