import pytest

from doubles import FakeHttpClient, FakeResponse, stub_route
from interview.errors import InvalidRequest, TranscriptionFailure
from transcription import WhisperTranscriber, clean_transcript


def _route():
    return stub_route(endpoint="/v1/audio/transcriptions", model="whisper-1")


def test_clean_transcript_collapses_whitespace():
    assert clean_transcript("  I used\n\nKafka ,  mostly .  ") == "I used Kafka, mostly."


def test_transcriber_sends_language_and_cleans_text():
    client = FakeHttpClient(FakeResponse({"text": "We sharded   the topics ."}))
    transcriber = WhisperTranscriber(_route(), client=client, language="en")

    text = transcriber.transcribe(b"audio", "answer.webm", "audio/webm")

    assert text == "We sharded the topics."
    assert client.requests[0]["data"]["language"] == "en"


def test_transcriber_defaults_missing_upload_metadata():
    client = FakeHttpClient(FakeResponse({"text": "ok"}))

    WhisperTranscriber(_route(), client=client).transcribe(b"audio", "", "")

    assert client.requests[0]["files"]["file"] == ("recording.webm", b"audio", "audio/webm")
    assert "language" not in client.requests[0]["data"]


def test_transcriber_rejects_empty_audio():
    client = FakeHttpClient()

    with pytest.raises(InvalidRequest):
        WhisperTranscriber(_route(), client=client).transcribe(b"", "a.webm", "audio/webm")
    assert client.requests == []


def test_transcriber_wraps_gateway_errors():
    client = FakeHttpClient(FakeResponse({"error": "rate limited"}, 429))

    with pytest.raises(TranscriptionFailure):
        WhisperTranscriber(_route(), client=client).transcribe(b"audio", "a.webm", "audio/webm")
