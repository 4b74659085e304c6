import json

import pytest

from config.settings import Settings
from doubles import FakeHttpClient, RecordingNotifier, StaticPlanner, chat_reply, sample_plan, stub_route
from interview.errors import InvalidRequest, OracleCallFailure, UpstreamDeliveryFailure
from scheduling import GatewayInterviewPlanner, LogNotifier, PlanDraft, ScheduleRequest, Scheduler, SmtpNotifier
from scheduling.notifier import notifier_from_settings
from sessions import PlanQuestion


def _request(**overrides):
    payload = {
        "candidate_email": "sam@example.com",
        "hr_email": "hr@example.com",
        "interview_date": "2024-06-01",
        "interview_time": "10:00",
        "job_description": "Platform engineer, Kafka, SLOs",
        "resume_text": "Sam Rivera, 6 years SRE",
    }
    payload.update(overrides)
    return ScheduleRequest(**payload)


def _scheduler(store, planner=None, notifier=None):
    return Scheduler(
        store,
        planner or StaticPlanner(),
        notifier or RecordingNotifier(),
        base_url="https://app.example.com/",
        id_factory=lambda: "sess-42",
        token_factory=lambda: "hr-token",
    )


def test_schedule_creates_session_and_sends_invites(store):
    notifier = RecordingNotifier()
    scheduled = _scheduler(store, notifier=notifier).schedule(_request())

    assert scheduled.session_id == "sess-42"
    assert scheduled.interview_link == "https://app.example.com/interview/sess-42"
    assert scheduled.hr_portal_link == "https://app.example.com/hr/hr-token"

    session = store.get("sess-42")
    assert [q.question for q in session.plan] == [
        "Walk me through your last migration.",
        "How do you size a Kafka cluster?",
    ]
    assert session.expert_terms == ["Kafka", "SLO"]
    assert session.transcript == []
    assert session.plan_position == 0
    assert session.scheduled_at == "2024-06-01 10:00"
    assert store.find_by_hr_token("hr-token") is session

    recipients = [to for to, _, _ in notifier.sent]
    assert recipients == ["sam@example.com", "hr@example.com"]
    assert scheduled.interview_link in notifier.sent[0][2]
    assert scheduled.hr_portal_link in notifier.sent[1][2]


def test_delivery_failure_does_not_fail_scheduling(store):
    notifier = RecordingNotifier(fail_for={"sam@example.com"})

    scheduled = _scheduler(store, notifier=notifier).schedule(_request())

    assert store.get(scheduled.session_id) is not None
    assert [to for to, _, _ in notifier.sent] == ["hr@example.com"]


def test_request_base_url_overrides_default(store):
    scheduled = _scheduler(store).schedule(_request(), base_url="http://localhost:3000/")

    assert scheduled.interview_link == "http://localhost:3000/interview/sess-42"


@pytest.mark.parametrize("field", ["candidate_email", "hr_email", "interview_date", "interview_time", "job_description", "resume_text"])
def test_missing_fields_are_rejected(store, field):
    planner = StaticPlanner()

    with pytest.raises(InvalidRequest):
        _scheduler(store, planner=planner).schedule(_request(**{field: " "}))

    assert planner.calls == []
    assert len(store) == 0


def test_planner_failure_creates_nothing(store):
    planner = StaticPlanner(error=OracleCallFailure("down"))

    with pytest.raises(OracleCallFailure):
        _scheduler(store, planner=planner).schedule(_request())

    assert len(store) == 0


def test_plan_draft_drops_malformed_entries():
    draft = PlanDraft.model_validate(
        {
            "interview_questions": [{"question": "Keep me"}, {"insight": "no question"}, "bare string", {"question": 7}],
            "relevant_expert_terms": ["gRPC", 3, None, "OAuth"],
        }
    )

    assert [q.question for q in draft.interview_questions] == ["Keep me"]
    assert draft.relevant_expert_terms == ["gRPC", "OAuth"]


def test_plan_draft_keeps_question_models():
    draft = PlanDraft(
        interview_questions=[PlanQuestion(question="Q1"), {"question": "Q2", "expected_answer_insight": "depth"}],
    )

    assert [q.question for q in draft.interview_questions] == ["Q1", "Q2"]
    assert len(sample_plan().interview_questions) == 2


def test_gateway_planner_validates_reply():
    client = FakeHttpClient(chat_reply(json.dumps(sample_plan().model_dump())))
    planner = GatewayInterviewPlanner(stub_route(), client=client)

    draft = planner.draft("JD text", "Resume text")

    assert draft.role == "Platform Engineer"
    prompt = client.requests[0]["json"]["messages"][-1]["content"]
    assert "Job Description:\nJD text" in prompt
    assert "Resume:\nResume text" in prompt


def test_gateway_planner_wraps_failures():
    planner = GatewayInterviewPlanner(stub_route(), client=FakeHttpClient(chat_reply("{}", status_code=503)))

    with pytest.raises(OracleCallFailure):
        planner.draft("JD", "CV")


def test_notifier_selection():
    assert isinstance(notifier_from_settings(Settings(SMTP_HOST=None)), LogNotifier)
    assert isinstance(notifier_from_settings(Settings(SMTP_HOST="smtp.example.com")), SmtpNotifier)


def test_smtp_failure_becomes_delivery_failure(monkeypatch):
    def _refuse(*args, **kwargs):
        raise ConnectionRefusedError("no server")

    monkeypatch.setattr("scheduling.notifier.smtplib.SMTP", _refuse)
    notifier = SmtpNotifier("smtp.invalid", 25, "bot@example.com")

    with pytest.raises(UpstreamDeliveryFailure):
        notifier.send("sam@example.com", "Subject", "Body")
