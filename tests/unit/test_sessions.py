import pytest
from pydantic import ValidationError

from doubles import make_session
from interview.errors import InvalidRequest, SessionSealed
from sessions import Evaluation, Report, Turn
from sessions import transcript


def _report(summary="done"):
    return Report(generated_at="2024-05-01T10:00:00+00:00", evaluation=Evaluation(summary=summary), transcript="AI: hi")


def test_put_and_get(store):
    session = make_session(hr_token="tok")
    store.put(session)

    assert store.get("sess-1") is session
    assert store.get("other") is None
    assert store.find_by_hr_token("tok") is session
    assert store.find_by_hr_token("nope") is None
    assert len(store) == 1


def test_put_rejects_duplicate_id(store):
    store.put(make_session())

    with pytest.raises(ValueError):
        store.put(make_session())


def test_locked_unknown_session_is_invalid(store):
    with pytest.raises(InvalidRequest):
        with store.locked("missing"):
            pass


def test_locked_yields_stored_instance(store):
    session = make_session()
    store.put(session)

    with store.locked(session.session_id) as locked:
        transcript.append(locked, "agent", "Hello")

    assert store.get(session.session_id).transcript[-1].content == "Hello"


def test_session_id_is_frozen():
    session = make_session()

    with pytest.raises(ValidationError):
        session.session_id = "other"


def test_seal_only_once():
    session = make_session()
    session.seal(_report())

    assert session.is_completed
    with pytest.raises(SessionSealed):
        session.seal(_report("again"))
    assert session.report.evaluation.summary == "done"


def test_report_is_immutable():
    report = _report()

    with pytest.raises(ValidationError):
        report.transcript = "edited"


def test_transcript_helpers():
    turns = [
        Turn(speaker="agent", content="Why?"),
        Turn(speaker="candidate", content="Because."),
        Turn(speaker="agent", content="Go on."),
    ]

    assert transcript.counts(turns) == (2, 1)
    assert transcript.is_balanced(turns)
    assert not transcript.is_balanced(turns[1:2])
    assert transcript.as_oracle_messages(turns[:2]) == [
        {"role": "assistant", "content": "Why?"},
        {"role": "user", "content": "Because."},
    ]
    assert transcript.render_transcript(turns[:2]) == "AI: Why?\nCandidate: Because."


def test_next_plan_question_tracks_position():
    session = make_session()

    assert session.next_plan_question().question == "Tell me about X"
    session.plan_position = 2
    assert session.next_plan_question() is None
