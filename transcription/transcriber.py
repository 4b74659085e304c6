"""Transcription of uploaded candidate audio through a Whisper-compatible route."""
from __future__ import annotations

import logging
import re
from typing import Optional, Protocol

from config import LlmRoute
from interview.errors import InvalidRequest, TranscriptionFailure
from llm_gateway import HttpClient, LlmGatewayError, transcribe


logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "recording.webm"
DEFAULT_CONTENT_TYPE = "audio/webm"
MAX_AUDIO_BYTES = 25 * 1024 * 1024  # Whisper upload limit

_SPACE_BEFORE_PUNCT = re.compile(r"\s+([,.?!])")


class Transcriber(Protocol):
    def transcribe(self, audio: bytes, filename: str, content_type: str) -> str: ...


def clean_transcript(text: str) -> str:  # Collapse whitespace and tidy punctuation spacing
    collapsed = " ".join(text.split())
    return _SPACE_BEFORE_PUNCT.sub(r"\1", collapsed)


class WhisperTranscriber:
    """Transcriber backed by a Whisper-compatible route."""

    def __init__(
        self,
        route: LlmRoute,
        *,
        client: Optional[HttpClient] = None,
        language: Optional[str] = None,
    ) -> None:
        self._route = route
        self._client = client
        self._language = language

    def transcribe(self, audio: bytes, filename: str = DEFAULT_FILENAME, content_type: str = DEFAULT_CONTENT_TYPE) -> str:
        if not audio:
            raise InvalidRequest("Empty audio upload")
        if len(audio) > MAX_AUDIO_BYTES:
            raise InvalidRequest("Audio upload too large")
        options = {"language": self._language} if self._language else None
        try:
            raw = transcribe(
                audio,
                filename=filename or DEFAULT_FILENAME,
                content_type=content_type or DEFAULT_CONTENT_TYPE,
                cfg=self._route,
                client=self._client,
                options=options,
            )
        except LlmGatewayError as exc:
            raise TranscriptionFailure(str(exc)) from exc
        text = clean_transcript(raw)
        logger.info("Transcribed audio bytes=%d chars=%d", len(audio), len(text))
        return text


__all__ = ["DEFAULT_CONTENT_TYPE", "DEFAULT_FILENAME", "Transcriber", "WhisperTranscriber", "clean_transcript"]
