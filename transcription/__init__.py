"""Speech-to-text for spoken interview answers."""
from .transcriber import Transcriber, WhisperTranscriber, clean_transcript

__all__ = ["Transcriber", "WhisperTranscriber", "clean_transcript"]
