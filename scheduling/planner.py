"""Interview plan drafting from a job description and resume."""
from __future__ import annotations

from textwrap import dedent
from typing import Any, List, Optional, Protocol

from pydantic import BaseModel, Field, field_validator

from config import LlmRoute
from interview.errors import OracleCallFailure
from llm_gateway import HttpClient, LlmGatewayError, chat
from sessions import PlanQuestion


def _is_question(item: Any) -> bool:
    if isinstance(item, PlanQuestion):
        return True
    return isinstance(item, dict) and isinstance(item.get("question"), str)


class PlanDraft(BaseModel):  # Plan returned by the planner LLM
    interview_questions: List[PlanQuestion] = Field(default_factory=list)
    relevant_expert_terms: List[str] = Field(default_factory=list)
    candidate_name: Optional[str] = None
    role: Optional[str] = None
    company_name: Optional[str] = None

    @field_validator("interview_questions", mode="before")
    @classmethod
    def _keep_well_formed_questions(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return []
        return [item for item in value if _is_question(item)]

    @field_validator("relevant_expert_terms", mode="before")
    @classmethod
    def _keep_string_terms(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, str)]


class InterviewPlanner(Protocol):
    def draft(self, job_description: str, resume_text: str) -> PlanDraft: ...


def build_plan_prompt(job_description: str, resume_text: str) -> str:  # Compose planning prompt
    return dedent(
        """
        You are an intelligent HR assistant. Using the Job Description and Resume below,
        create a concise interview plan that includes:
        1) 5 customized interview questions tailored to the candidate and the JD
        2) For each question, a short "expected_answer_insight"
        3) 5 "relevant_expert_terms" to be explicitly tested

        Return strictly valid JSON in the shape:
        {
          "interview_questions": [
            { "question": "string", "expected_answer_insight": "string" }
          ],
          "relevant_expert_terms": ["term1","term2","term3","term4","term5"],
          "candidate_name": "optional",
          "role": "optional",
          "company_name": "optional"
        }
        """
    ).strip() + f"\n\nJob Description:\n{job_description}\n\nResume:\n{resume_text}"


class GatewayInterviewPlanner:  # Planner backed by a configured chat-completion route
    def __init__(self, route: LlmRoute, *, client: Optional[HttpClient] = None, temperature: float = 0.3) -> None:
        self._route = route
        self._client = client
        self._temperature = temperature

    def draft(self, job_description: str, resume_text: str) -> PlanDraft:
        messages = [
            {"role": "system", "content": "You are an expert AI interview planner."},
            {"role": "user", "content": build_plan_prompt(job_description, resume_text)},
        ]
        try:
            return chat(
                messages,
                PlanDraft,
                cfg=self._route,
                client=self._client,
                options={"temperature": self._temperature},
            )
        except LlmGatewayError as exc:
            raise OracleCallFailure(str(exc)) from exc


__all__ = ["GatewayInterviewPlanner", "InterviewPlanner", "PlanDraft", "build_plan_prompt"]
