"""Interview scheduling: plan drafting, session creation and invitations."""
from __future__ import annotations

import logging
import secrets
import uuid
from textwrap import dedent
from typing import Callable, Optional

from pydantic import BaseModel

from interview.errors import InvalidRequest, UpstreamDeliveryFailure
from observability import log_event
from sessions import Session, SessionRepository

from .notifier import Notifier
from .planner import InterviewPlanner, PlanDraft


logger = logging.getLogger(__name__)


class ScheduleRequest(BaseModel):
    candidate_email: str = ""
    hr_email: str = ""
    interview_date: str = ""
    interview_time: str = ""
    job_description: str = ""
    resume_text: str = ""


class ScheduledInterview(BaseModel):
    session_id: str
    interview_link: str
    hr_portal_link: str
    plan: PlanDraft


def _candidate_invite(request: ScheduleRequest, link: str) -> str:
    return dedent(
        f"""
        Dear Candidate,

        Your interview has been scheduled for {request.interview_date} at {request.interview_time}.

        Please join using the link:
        {link}

        Best of luck!
        HR Team
        """
    ).strip()


def _hr_notice(request: ScheduleRequest, link: str) -> str:
    return dedent(
        f"""
        Hello,

        An interview has been scheduled with {request.candidate_email} for {request.interview_date} at {request.interview_time}.

        You can access the interview report (once the interview is completed) here:
        {link}

        Regards,
        AI Interview Agent
        """
    ).strip()


class Scheduler:
    """Creates interview sessions and notifies the candidate and HR."""

    def __init__(
        self,
        store: SessionRepository,
        planner: InterviewPlanner,
        notifier: Notifier,
        *,
        base_url: str,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
        token_factory: Callable[[], str] = lambda: secrets.token_hex(16),
    ) -> None:
        self._store = store
        self._planner = planner
        self._notifier = notifier
        self._base_url = base_url.rstrip("/")
        self._id_factory = id_factory
        self._token_factory = token_factory

    def schedule(self, request: ScheduleRequest, *, base_url: Optional[str] = None) -> ScheduledInterview:
        missing = [name for name, value in request.model_dump().items() if not value.strip()]
        if missing:
            raise InvalidRequest("Missing required fields: " + ", ".join(missing))

        plan = self._planner.draft(request.job_description, request.resume_text)

        session_id = self._id_factory()
        hr_token = self._token_factory()
        base = (base_url or self._base_url).rstrip("/")
        interview_link = f"{base}/interview/{session_id}"
        hr_portal_link = f"{base}/hr/{hr_token}"

        session = Session(
            session_id=session_id,
            plan=plan.interview_questions,
            expert_terms=plan.relevant_expert_terms,
            hr_email=request.hr_email,
            candidate_email=request.candidate_email,
            job_description=request.job_description,
            resume_text=request.resume_text,
            candidate_name=plan.candidate_name,
            role=plan.role,
            company_name=plan.company_name,
            scheduled_at=f"{request.interview_date} {request.interview_time}",
            hr_token=hr_token,
        )
        self._store.put(session)
        log_event("session_scheduled", session_id, plan_position=0, turns=0)

        self._deliver(session_id, request.candidate_email, "Interview Scheduled", _candidate_invite(request, interview_link))
        self._deliver(
            session_id,
            request.hr_email,
            "HR Portal Link for Interview Report",
            _hr_notice(request, hr_portal_link),
        )

        return ScheduledInterview(
            session_id=session_id,
            interview_link=interview_link,
            hr_portal_link=hr_portal_link,
            plan=plan,
        )

    def _deliver(self, session_id: str, to: str, subject: str, body: str) -> bool:
        try:
            self._notifier.send(to, subject, body)
        except UpstreamDeliveryFailure as exc:
            log_event("notification_failed", session_id, level=logging.WARNING, recipient=to, error=str(exc))
            return False
        return True


__all__ = ["ScheduleRequest", "ScheduledInterview", "Scheduler"]
