from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from textwrap import dedent
from typing import Dict, List, Optional, Protocol, Sequence

from pydantic import ValidationError

from config import LlmRoute
from interview.errors import InvalidRequest, OracleCallFailure, OracleParseFailure
from llm_gateway import HttpClient, LlmGatewayError, complete, strip_code_fences
from observability import log_event, span
from session_reports import ReportRenderer, render_report_pdf
from sessions import Evaluation, Report, Session, SessionRepository, Turn
from sessions.transcript import render_transcript


logger = logging.getLogger(__name__)


def neutral_evaluation() -> Evaluation:  # Used when the evaluator reply cannot be parsed
    return Evaluation(
        summary="No summary generated.",
        strengths=[],
        weaknesses=[],
        recommendation="Hold",
    )


class EvaluationOracle(Protocol):  # Returns raw evaluation text for a prompt
    def evaluate(self, prompt: str) -> str: ...


class GatewayEvaluationOracle:  # Evaluator backed by a configured chat-completion route
    def __init__(self, route: LlmRoute, *, client: Optional[HttpClient] = None, temperature: float = 0.1) -> None:
        self._route = route
        self._client = client
        self._temperature = temperature

    def evaluate(self, prompt: str) -> str:
        try:
            return complete(
                [{"role": "user", "content": prompt}],
                cfg=self._route,
                client=self._client,
                options={"temperature": self._temperature},
            )
        except LlmGatewayError as exc:
            raise OracleCallFailure(str(exc)) from exc


_EVALUATION_CONTRACT = dedent(
    """
    Return STRICT JSON:
    {
      "summary": "3-6 sentence overview reflecting behavior in the transcript",
      "strengths": ["..."],
      "weaknesses": ["..."],
      "recommendation": "Hire | Move to next round | Hold | No",
      "scores": { "communication":1-5, "professionalism":1-5, "role_fit":1-5, "seniority":1-5, "overall":1-5 },
      "flags": { "fixated_on_compensation":bool, "rude_or_confrontational":bool, "evasiveness_or_lack_of_detail":bool }
    }
    Judge ONLY from the transcript; penalize rudeness/evasiveness/compensation fixation when present.
    """
).strip()


def build_evaluation_prompt(session: Session, transcript: str) -> str:  # Compose evaluation prompt
    return "\n\n".join(
        [
            "You are an AI HR evaluator.",
            f"Job Description:\n{session.job_description or 'N/A'}",
            f"Candidate Resume:\n{session.resume_text or 'N/A'}",
            f"Interview Transcript:\n{transcript}",
            _EVALUATION_CONTRACT,
        ]
    )


def decode_evaluation(raw: str) -> Evaluation:
    try:
        data = json.loads(strip_code_fences(raw or ""))
    except json.JSONDecodeError as exc:
        raise OracleParseFailure(f"evaluation is not JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise OracleParseFailure("evaluation must be a JSON object")
    try:
        return Evaluation.model_validate(data)
    except ValidationError as exc:
        raise OracleParseFailure(f"evaluation failed validation: {exc}") from exc


def parse_evaluation(raw: str, *, session_id: Optional[str] = None) -> Evaluation:
    try:
        return decode_evaluation(raw)
    except OracleParseFailure as exc:
        logger.warning("Evaluation unparseable, using neutral default: %s", exc)
        if session_id:
            log_event("oracle_parse_fallback", session_id, level=logging.WARNING, node="evaluation", error=str(exc))
        return neutral_evaluation()


def _coerce_history(history: Optional[Sequence[Turn | Dict[str, str]]]) -> List[Turn]:
    turns: List[Turn] = []
    for entry in history or []:
        if isinstance(entry, Turn):
            turns.append(entry)
            continue
        speaker = entry.get("speaker") or entry.get("role")
        try:
            turns.append(Turn(speaker=speaker, content=entry.get("content", "")))
        except ValidationError as exc:
            raise InvalidRequest(f"Invalid history entry: {entry!r}") from exc
    return turns


class CompletionHandler:
    """Evaluates a finished interview and seals the session with its report."""

    def __init__(
        self,
        store: SessionRepository,
        evaluator: EvaluationOracle,
        renderer: ReportRenderer = render_report_pdf,
    ) -> None:
        self._store = store
        self._evaluator = evaluator
        self._renderer = renderer

    def complete(
        self,
        session_id: str,
        history: Optional[Sequence[Turn | Dict[str, str]]] = None,
    ) -> Report:
        """Produce the session report, or return it unchanged when already sealed.

        The stored transcript wins; ``history`` is only used when the session
        has no recorded turns.
        """

        with self._store.locked(session_id) as session:
            if session.report is not None:
                logger.info("Report already sealed session=%s", session_id)
                return session.report

            turns = list(session.transcript) or _coerce_history(history)
            if not turns:
                raise InvalidRequest("No interview turns found")

            transcript = render_transcript(turns)
            with span(session_id, "evaluation"):
                raw = self._evaluator.evaluate(build_evaluation_prompt(session, transcript))
            evaluation = parse_evaluation(raw, session_id=session_id)

            generated_at = datetime.now(timezone.utc)
            pdf = self._renderer(session, evaluation, transcript, generated_at)
            report = Report(
                generated_at=generated_at,
                evaluation=evaluation,
                transcript=transcript,
                pdf=pdf,
            )
            session.seal(report)
            log_event(
                "report_sealed",
                session_id,
                turns=len(turns),
                action=evaluation.recommendation or "n/a",
            )
            return report


__all__ = [
    "CompletionHandler",
    "EvaluationOracle",
    "GatewayEvaluationOracle",
    "build_evaluation_prompt",
    "decode_evaluation",
    "neutral_evaluation",
    "parse_evaluation",
]
