"""Interview turn handling.

Controller and oracle classes live in their submodules
(``interview.turn_controller``, ``interview.oracle``); the package root only
exposes the error taxonomy so low-level modules can import it cheaply.
"""
from .errors import (
    InterviewError,
    InvalidRequest,
    OracleCallFailure,
    OracleParseFailure,
    SessionSealed,
    TranscriptionFailure,
    UpstreamDeliveryFailure,
)

__all__ = [
    "InterviewError",
    "InvalidRequest",
    "OracleCallFailure",
    "OracleParseFailure",
    "SessionSealed",
    "TranscriptionFailure",
    "UpstreamDeliveryFailure",
]
