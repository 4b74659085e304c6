import pytest

from interview.errors import OracleParseFailure
from interview.prompts import build_turn_instructions
from interview.verdict import PARSER_FALLBACK_REASON, decode_verdict, parse_verdict


def test_decode_reads_camel_case_follow_up():
    verdict = decode_verdict('{"action": "follow_up", "followUpQuestion": "Which metric moved?", "reason": "vague"}')

    assert verdict.action == "follow_up"
    assert verdict.follow_up_question == "Which metric moved?"
    assert verdict.reason == "vague"


def test_null_reason_becomes_empty_string():
    verdict = decode_verdict('{"action": "conclude", "reason": null}')

    assert verdict.reason == ""


def test_missing_action_is_not_a_parse_failure():
    verdict = parse_verdict('{"reason": "no action given"}')

    assert verdict.action is None
    assert verdict.reason == "no action given"


@pytest.mark.parametrize("raw", ["{", "null", '"conclude"', "42", '{"reason": ["a"]}'])
def test_decode_rejects_bad_shapes(raw):
    with pytest.raises(OracleParseFailure):
        decode_verdict(raw)


def test_parse_falls_back_to_conclude():
    verdict = parse_verdict("Sure! I think we should move on.")

    assert verdict.action == "conclude"
    assert verdict.reason == PARSER_FALLBACK_REASON


def test_instructions_embed_terms_and_directives():
    text = build_turn_instructions(["Kafka", "exactly-once"])

    assert '["Kafka", "exactly-once"]' in text
    assert "Challenge vague answers" in text
    assert "specific examples, metrics, and reasoning" in text
    assert "Conclude only after core areas are covered" in text
    assert '"follow_up" | "next_question" | "conclude"' in text


def test_fallback_emits_session_event(monkeypatch):
    events = []
    monkeypatch.setattr("interview.verdict.log_event", lambda kind, session_id, **fields: events.append((kind, session_id)))

    parse_verdict("garbage", session_id="sess-9")
    parse_verdict("garbage")

    assert events == [("oracle_parse_fallback", "sess-9")]
