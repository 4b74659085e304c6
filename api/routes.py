"""FastAPI routes for scheduling, running and reporting interviews."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, Response, UploadFile

from api.deps import get_completion_handler, get_scheduler, get_store, get_transcriber, get_turn_controller
from api.schemas import (
    CompleteReq,
    CompleteResp,
    PlanView,
    ReportStatus,
    ScheduleReq,
    ScheduleResp,
    StartReq,
    TranscribeResp,
    TurnReq,
    TurnResp,
)
from config.settings import settings
from interview.errors import InvalidRequest, OracleCallFailure, TranscriptionFailure
from interview.turn_controller import NextStep, TurnController
from interview_evaluation import CompletionHandler
from scheduling import ScheduleRequest, Scheduler
from sessions import Session, SessionRepository
from transcription import Transcriber


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _turn_resp(step: NextStep) -> TurnResp:
    if step.action == "follow_up":
        return TurnResp(action=step.action, followUpQuestion=step.question, reason=step.reason)
    if step.action == "next_question":
        return TurnResp(action=step.action, nextQuestion=step.question, reason=step.reason)
    return TurnResp(action=step.action, reason=step.reason)


def _require_session_id(session_id: Optional[str]) -> str:
    if not session_id:
        raise HTTPException(status_code=400, detail="Invalid sessionId")
    return session_id


def _session_for_token(store: SessionRepository, token: str) -> Session:
    session = store.find_by_hr_token(token) if token else None
    if session is None:
        raise HTTPException(status_code=401, detail="Invalid token")
    return session


@router.post("/schedule", response_model=ScheduleResp)
def schedule(
    req: ScheduleReq,
    request: Request,
    scheduler: Scheduler = Depends(get_scheduler),
) -> ScheduleResp:
    origin = None if settings.APP_BASE_URL else request.headers.get("origin")
    try:
        scheduled = scheduler.schedule(
            ScheduleRequest(
                candidate_email=req.candidateEmail,
                hr_email=req.hrEmail,
                interview_date=req.interviewDate,
                interview_time=req.interviewTime,
                job_description=req.jobDescription,
                resume_text=req.resumeText,
            ),
            base_url=origin,
        )
    except InvalidRequest as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except OracleCallFailure as exc:
        logger.error("Interview planning failed: %s", exc)
        raise HTTPException(status_code=502, detail="Interview planning failed") from exc
    return ScheduleResp(
        sessionId=scheduled.session_id,
        interviewLink=scheduled.interview_link,
        hrPortalLink=scheduled.hr_portal_link,
        interviewPlan=scheduled.plan,
    )


@router.get("/interview/plan", response_model=PlanView)
def plan(session_id: str = Query(default="", alias="id"), store: SessionRepository = Depends(get_store)) -> PlanView:
    session = store.get(session_id) if session_id else None
    if session is None:
        raise HTTPException(status_code=404, detail="Interview plan not found.")
    return PlanView(
        sessionId=session.session_id,
        interviewQuestions=session.plan,
        relevantExpertTerms=session.expert_terms,
        candidateName=session.candidate_name,
        role=session.role,
        companyName=session.company_name,
        scheduledAt=session.scheduled_at,
        completed=session.is_completed,
    )


@router.post("/interview/start", response_model=TurnResp, response_model_exclude_none=True)
def start(req: StartReq, controller: TurnController = Depends(get_turn_controller)) -> TurnResp:
    session_id = _require_session_id(req.sessionId)
    try:
        step = controller.open_interview(session_id)
    except InvalidRequest as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _turn_resp(step)


@router.post("/interview/turn", response_model=TurnResp, response_model_exclude_none=True)
def turn(req: TurnReq, controller: TurnController = Depends(get_turn_controller)) -> TurnResp:
    session_id = _require_session_id(req.sessionId)
    try:
        step = controller.advance_turn(session_id, req.lastQuestion or "", req.lastAnswer or "")
    except InvalidRequest as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except OracleCallFailure as exc:
        logger.error("Interview turn failed session=%s: %s", session_id, exc)
        raise HTTPException(status_code=500, detail="Failed to process interview turn") from exc
    return _turn_resp(step)


@router.post("/interview/complete", response_model=CompleteResp)
def complete(req: CompleteReq, handler: CompletionHandler = Depends(get_completion_handler)) -> CompleteResp:
    session_id = _require_session_id(req.sessionId)
    history = [{"role": item.role, "content": item.content} for item in req.history or []]
    try:
        handler.complete(session_id, history=history)
    except InvalidRequest as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except OracleCallFailure as exc:
        logger.error("Interview completion failed session=%s: %s", session_id, exc)
        raise HTTPException(status_code=500, detail="Failed to evaluate interview") from exc
    return CompleteResp()


@router.get("/hr/report", response_model=ReportStatus, response_model_exclude_none=True)
def report_status(
    response: Response,
    token: str = Query(default=""),
    store: SessionRepository = Depends(get_store),
) -> ReportStatus:
    session = _session_for_token(store, token)
    if session.report is None:
        response.status_code = 202
        return ReportStatus(ready=False)
    return ReportStatus(
        ready=True,
        generatedAt=session.report.generated_at,
        evaluation=session.report.evaluation,
    )


@router.get("/hr/report/pdf")
def report_pdf(token: str = Query(default=""), store: SessionRepository = Depends(get_store)) -> Response:
    session = _session_for_token(store, token)
    if session.report is None or not session.report.pdf:
        raise HTTPException(status_code=404, detail="Report not ready")
    return Response(
        content=session.report.pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="Interview_Report_{session.session_id}.pdf"'},
    )


@router.post("/transcribe", response_model=TranscribeResp)
def transcribe(file: UploadFile = File(...), transcriber: Transcriber = Depends(get_transcriber)) -> TranscribeResp:
    audio = file.file.read()
    if not audio:
        raise HTTPException(status_code=400, detail="Empty file uploaded")
    try:
        text = transcriber.transcribe(audio, file.filename or "", file.content_type or "")
    except InvalidRequest as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except TranscriptionFailure as exc:
        logger.error("Transcription failed filename=%s: %s", file.filename, exc)
        raise HTTPException(status_code=500, detail="Failed to transcribe audio") from exc
    return TranscribeResp(text=text)
