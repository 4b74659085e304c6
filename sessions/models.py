"""Session, transcript and report models."""
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from interview.errors import SessionSealed

Speaker = Literal["agent", "candidate"]


def _drop_nulls(data: Any) -> Any:  # Explicit nulls from the evaluator fall back to field defaults
    if isinstance(data, dict):
        return {key: value for key, value in data.items() if value is not None}
    return data


class Turn(BaseModel):
    """One utterance recorded in the transcript.

    ``plan_index`` and ``follow_up`` are bookkeeping written by the turn
    controller for the agent turns it emits; turns recorded from caller input
    leave them unset.
    """

    speaker: Speaker
    content: str
    plan_index: Optional[int] = None
    follow_up: bool = False


class PlanQuestion(BaseModel):
    question: str
    expected_answer_insight: Optional[str] = None


class Scores(BaseModel):
    communication: Optional[float] = None
    professionalism: Optional[float] = None
    role_fit: Optional[float] = None
    seniority: Optional[float] = None
    overall: Optional[float] = None


class BehaviorFlags(BaseModel):
    fixated_on_compensation: bool = False
    rude_or_confrontational: bool = False
    evasiveness_or_lack_of_detail: bool = False

    @model_validator(mode="before")
    @classmethod
    def _nulls_to_defaults(cls, data: Any) -> Any:
        return _drop_nulls(data)


class Evaluation(BaseModel):
    summary: str = ""
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    recommendation: str = ""
    scores: Optional[Scores] = None
    flags: Optional[BehaviorFlags] = None

    @model_validator(mode="before")
    @classmethod
    def _nulls_to_defaults(cls, data: Any) -> Any:
        return _drop_nulls(data)


class Report(BaseModel):
    model_config = ConfigDict(frozen=True)

    generated_at: datetime
    evaluation: Evaluation
    transcript: str
    pdf: bytes = b""


class Session(BaseModel):
    """Interview session: fixed plan, growing transcript, report once sealed."""

    model_config = ConfigDict(validate_assignment=True)

    session_id: str = Field(frozen=True)
    plan: List[PlanQuestion] = Field(default_factory=list)
    expert_terms: List[str] = Field(default_factory=list)
    transcript: List[Turn] = Field(default_factory=list)
    plan_position: int = Field(default=0, ge=0)
    report: Optional[Report] = None

    hr_email: str = ""
    candidate_email: str = ""
    job_description: str = ""
    resume_text: str = ""
    candidate_name: Optional[str] = None
    role: Optional[str] = None
    company_name: Optional[str] = None
    scheduled_at: Optional[str] = None
    hr_token: Optional[str] = None

    @property
    def is_completed(self) -> bool:
        return self.report is not None

    def next_plan_question(self) -> Optional[PlanQuestion]:
        if self.plan_position < len(self.plan):
            return self.plan[self.plan_position]
        return None

    def seal(self, report: Report) -> None:
        """Attach the final report; a session is sealed exactly once."""

        if self.report is not None:
            raise SessionSealed(f"Session '{self.session_id}' already has a report")
        self.report = report


__all__ = [
    "BehaviorFlags",
    "Evaluation",
    "PlanQuestion",
    "Report",
    "Scores",
    "Session",
    "Speaker",
    "Turn",
]
