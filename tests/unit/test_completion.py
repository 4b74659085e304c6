import json

import pytest

from doubles import ScriptedOracle, make_session
from interview.errors import InvalidRequest, OracleCallFailure
from interview_evaluation import CompletionHandler, build_evaluation_prompt, parse_evaluation
from sessions import Turn


EVALUATION = {
    "summary": "Clear and specific answers.",
    "strengths": ["Concrete metrics"],
    "weaknesses": ["Light on testing"],
    "recommendation": "Move to next round",
    "scores": {"communication": 4, "professionalism": 5, "role_fit": 4, "seniority": 3, "overall": 4},
    "flags": {
        "fixated_on_compensation": False,
        "rude_or_confrontational": False,
        "evasiveness_or_lack_of_detail": False,
    },
}


class RecordingRenderer:
    def __init__(self) -> None:
        self.calls = []

    def __call__(self, session, evaluation, transcript, generated_at):
        self.calls.append((session.session_id, evaluation, transcript, generated_at))
        return b"%PDF-stub"


def _interviewed(store, **kwargs):
    session = make_session(
        transcript=[
            Turn(speaker="agent", content="Tell me about X"),
            Turn(speaker="candidate", content="I shipped X."),
        ],
        job_description="Senior backend engineer",
        resume_text="Ten years of Python",
        **kwargs,
    )
    store.put(session)
    return session


def test_complete_seals_report(store):
    session = _interviewed(store)
    renderer = RecordingRenderer()
    oracle = ScriptedOracle(json.dumps(EVALUATION))
    handler = CompletionHandler(store, oracle, renderer)

    report = handler.complete(session.session_id)

    assert session.report is report
    assert report.evaluation.recommendation == "Move to next round"
    assert report.evaluation.scores.overall == 4
    assert report.transcript == "AI: Tell me about X\nCandidate: I shipped X."
    assert report.pdf == b"%PDF-stub"
    assert "Senior backend engineer" in oracle.calls[0]["prompt"]
    assert report.transcript in oracle.calls[0]["prompt"]


def test_second_completion_returns_existing_report(store):
    session = _interviewed(store)
    oracle = ScriptedOracle(json.dumps(EVALUATION))
    renderer = RecordingRenderer()
    handler = CompletionHandler(store, oracle, renderer)

    first = handler.complete(session.session_id)
    second = handler.complete(session.session_id)

    assert first is second
    assert len(oracle.calls) == 1
    assert len(renderer.calls) == 1


def test_unparseable_evaluation_uses_neutral_default(store):
    session = _interviewed(store)
    handler = CompletionHandler(store, ScriptedOracle("I'd hire them!"), RecordingRenderer())

    report = handler.complete(session.session_id)

    assert report.evaluation.summary == "No summary generated."
    assert report.evaluation.recommendation == "Hold"
    assert report.evaluation.strengths == []
    assert report.evaluation.weaknesses == []


def test_fallback_history_used_when_transcript_empty(store):
    session = make_session()
    store.put(session)
    renderer = RecordingRenderer()
    handler = CompletionHandler(store, ScriptedOracle(json.dumps(EVALUATION)), renderer)

    report = handler.complete(
        session.session_id,
        history=[
            {"role": "agent", "content": "Tell me about X"},
            {"role": "candidate", "content": "From my notes."},
        ],
    )

    assert report.transcript == "AI: Tell me about X\nCandidate: From my notes."
    assert session.transcript == []


def test_stored_transcript_wins_over_history(store):
    session = _interviewed(store)
    handler = CompletionHandler(store, ScriptedOracle(json.dumps(EVALUATION)), RecordingRenderer())

    report = handler.complete(session.session_id, history=[{"role": "agent", "content": "ignored"}])

    assert "ignored" not in report.transcript


def test_no_turns_is_invalid(store):
    store.put(make_session())
    handler = CompletionHandler(store, ScriptedOracle("{}"), RecordingRenderer())

    with pytest.raises(InvalidRequest):
        handler.complete("sess-1", history=[])


def test_bad_history_entry_is_invalid(store):
    store.put(make_session())
    handler = CompletionHandler(store, ScriptedOracle("{}"), RecordingRenderer())

    with pytest.raises(InvalidRequest):
        handler.complete("sess-1", history=[{"role": "narrator", "content": "x"}])


def test_unknown_session_is_invalid(store):
    handler = CompletionHandler(store, ScriptedOracle("{}"), RecordingRenderer())

    with pytest.raises(InvalidRequest):
        handler.complete("missing")


def test_oracle_failure_leaves_session_unsealed(store):
    session = _interviewed(store)
    handler = CompletionHandler(store, ScriptedOracle(OracleCallFailure("quota")), RecordingRenderer())

    with pytest.raises(OracleCallFailure):
        handler.complete(session.session_id)

    assert session.report is None


def test_parse_evaluation_accepts_partial_payload():
    evaluation = parse_evaluation('{"summary": "Short.", "recommendation": "No"}')

    assert evaluation.summary == "Short."
    assert evaluation.scores is None
    assert evaluation.flags is None


def test_prompt_falls_back_to_na_for_missing_documents():
    prompt = build_evaluation_prompt(make_session(), "AI: hi")

    assert "Job Description:\nN/A" in prompt
    assert "Candidate Resume:\nN/A" in prompt
    assert "Judge ONLY from the transcript" in prompt


def test_parse_evaluation_treats_null_fields_as_defaults():
    evaluation = parse_evaluation(
        json.dumps(
            {
                "summary": "Strong candidate.",
                "strengths": None,
                "weaknesses": ["Terse"],
                "recommendation": None,
                "flags": {"rude_or_confrontational": None, "fixated_on_compensation": True},
            }
        )
    )

    assert evaluation.summary == "Strong candidate."
    assert evaluation.strengths == []
    assert evaluation.weaknesses == ["Terse"]
    assert evaluation.recommendation == ""
    assert evaluation.flags.fixated_on_compensation is True
    assert evaluation.flags.rude_or_confrontational is False
