"""Turn-decision verdicts and the tolerant parser for oracle replies."""
from __future__ import annotations

import json
import logging
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from llm_gateway import strip_code_fences
from observability import log_event

from .errors import OracleParseFailure


logger = logging.getLogger(__name__)

Action = Literal["follow_up", "next_question", "conclude"]

FOLLOW_UP: Action = "follow_up"
NEXT_QUESTION: Action = "next_question"
CONCLUDE: Action = "conclude"

PARSER_FALLBACK_REASON = "parser fallback"


class Verdict(BaseModel):
    """Oracle classification of what happens next.

    ``action`` is kept as free text: an unrecognised action is a valid reply
    that the controller treats as ``conclude``.
    """

    model_config = ConfigDict(populate_by_name=True)

    action: Optional[str] = None
    follow_up_question: Optional[str] = Field(default=None, alias="followUpQuestion")
    reason: str = ""


def decode_verdict(raw: str) -> Verdict:
    """Strictly decode ``raw``; raises ``OracleParseFailure`` on bad content."""

    try:
        data = json.loads(strip_code_fences(raw or ""))
    except json.JSONDecodeError as exc:
        raise OracleParseFailure(f"verdict is not JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise OracleParseFailure(f"verdict must be a JSON object, got {type(data).__name__}")
    if data.get("reason") is None:
        data.pop("reason", None)
    try:
        return Verdict.model_validate(data)
    except ValidationError as exc:
        raise OracleParseFailure(f"verdict failed validation: {exc}") from exc


def parse_verdict(raw: str, *, session_id: Optional[str] = None) -> Verdict:
    """Decode ``raw``, substituting a ``conclude`` verdict when it is unusable."""

    try:
        return decode_verdict(raw)
    except OracleParseFailure as exc:
        logger.warning("Turn decision unparseable, concluding: %s", exc)
        if session_id:
            log_event("oracle_parse_fallback", session_id, level=logging.WARNING, node="turn_decision", error=str(exc))
        return Verdict(action=CONCLUDE, reason=PARSER_FALLBACK_REASON)


__all__ = [
    "Action",
    "CONCLUDE",
    "FOLLOW_UP",
    "NEXT_QUESTION",
    "PARSER_FALLBACK_REASON",
    "Verdict",
    "decode_verdict",
    "parse_verdict",
]
