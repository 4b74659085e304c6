"""Error taxonomy shared by the interview services."""
from __future__ import annotations


class InterviewError(Exception):  # Base class for interview service errors
    pass


class InvalidRequest(InterviewError):  # Caller error: unknown session, missing fields, wrong state
    pass


class SessionSealed(InvalidRequest):  # Report already attached to the session
    pass


class OracleParseFailure(InterviewError):  # Oracle reply was not the expected JSON shape
    pass


class OracleCallFailure(InterviewError):  # Transport, timeout or quota error from an oracle
    pass


class UpstreamDeliveryFailure(InterviewError):  # Email or other outbound delivery failed
    pass


class TranscriptionFailure(InterviewError):  # Speech-to-text call failed
    pass


__all__ = [
    "InterviewError",
    "InvalidRequest",
    "SessionSealed",
    "OracleParseFailure",
    "OracleCallFailure",
    "UpstreamDeliveryFailure",
    "TranscriptionFailure",
]
