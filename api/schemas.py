"""Pydantic schemas for the interview HTTP API."""
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from scheduling import PlanDraft
from sessions import Evaluation, PlanQuestion


class ScheduleReq(BaseModel):
    candidateEmail: str = ""
    hrEmail: str = ""
    interviewDate: str = ""
    interviewTime: str = ""
    jobDescription: str = ""
    resumeText: str = ""


class ScheduleResp(BaseModel):
    success: bool = True
    sessionId: str
    interviewLink: str
    hrPortalLink: str
    interviewPlan: PlanDraft


class PlanView(BaseModel):
    sessionId: str
    interviewQuestions: List[PlanQuestion] = Field(default_factory=list)
    relevantExpertTerms: List[str] = Field(default_factory=list)
    candidateName: Optional[str] = None
    role: Optional[str] = None
    companyName: Optional[str] = None
    scheduledAt: Optional[str] = None
    completed: bool = False


class StartReq(BaseModel):
    sessionId: Optional[str] = None


class TurnReq(BaseModel):
    sessionId: Optional[str] = None
    lastQuestion: Optional[str] = None
    lastAnswer: Optional[str] = None


class TurnResp(BaseModel):
    action: Literal["follow_up", "next_question", "conclude"]
    followUpQuestion: Optional[str] = None
    nextQuestion: Optional[str] = None
    reason: str = ""


class HistoryTurn(BaseModel):
    role: Literal["agent", "candidate"]
    content: str


class CompleteReq(BaseModel):
    sessionId: Optional[str] = None
    history: Optional[List[HistoryTurn]] = None


class CompleteResp(BaseModel):
    ok: bool = True
    reportReady: bool = True


class ReportStatus(BaseModel):
    ready: bool
    generatedAt: Optional[datetime] = None
    evaluation: Optional[Evaluation] = None


class TranscribeResp(BaseModel):
    text: str
