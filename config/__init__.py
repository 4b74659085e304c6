"""Configuration package for the interview agent services."""
from .llm import (
    EVALUATION_KEY,
    PLAN_KEY,
    TRANSCRIBE_KEY,
    TURN_DECISION_KEY,
    AppConfig,
    LlmRoute,
    load_config,
    load_route,
    resolve_route,
)
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "LlmRoute",
    "load_config",
    "load_route",
    "resolve_route",
    "TURN_DECISION_KEY",
    "EVALUATION_KEY",
    "PLAN_KEY",
    "TRANSCRIBE_KEY",
    "Settings",
    "settings",
]
