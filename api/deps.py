"""FastAPI dependency providers wiring the interview services together."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from config import EVALUATION_KEY, PLAN_KEY, TRANSCRIBE_KEY, TURN_DECISION_KEY, AppConfig, load_config, resolve_route
from config.settings import settings
from interview.oracle import DecisionOracle, GatewayDecisionOracle
from interview.turn_controller import TurnController
from interview_evaluation import CompletionHandler, EvaluationOracle, GatewayEvaluationOracle
from scheduling import GatewayInterviewPlanner, InterviewPlanner, Notifier, Scheduler, notifier_from_settings
from sessions import InMemorySessionStore, SessionRepository
from transcription import Transcriber, WhisperTranscriber

ROOT = Path(__file__).resolve().parents[1]
DEFAULT_BASE_URL = "http://localhost:3000"


@lru_cache
def get_store() -> SessionRepository:
    return InMemorySessionStore()


@lru_cache
def app_config() -> AppConfig:
    path = Path(settings.APP_CONFIG_PATH)
    if not path.is_absolute():
        path = ROOT / path
    return load_config(path)


def get_decision_oracle() -> DecisionOracle:
    return GatewayDecisionOracle(resolve_route(app_config(), TURN_DECISION_KEY))


def get_evaluation_oracle() -> EvaluationOracle:
    return GatewayEvaluationOracle(resolve_route(app_config(), EVALUATION_KEY))


def get_planner() -> InterviewPlanner:
    return GatewayInterviewPlanner(resolve_route(app_config(), PLAN_KEY))


def get_notifier() -> Notifier:
    return notifier_from_settings(settings)


def get_transcriber() -> Transcriber:
    return WhisperTranscriber(resolve_route(app_config(), TRANSCRIBE_KEY))


def get_turn_controller(
    store: SessionRepository = Depends(get_store),
    oracle: DecisionOracle = Depends(get_decision_oracle),
) -> TurnController:
    return TurnController(store, oracle)


def get_completion_handler(
    store: SessionRepository = Depends(get_store),
    evaluator: EvaluationOracle = Depends(get_evaluation_oracle),
) -> CompletionHandler:
    return CompletionHandler(store, evaluator)


def get_scheduler(
    store: SessionRepository = Depends(get_store),
    planner: InterviewPlanner = Depends(get_planner),
    notifier: Notifier = Depends(get_notifier),
) -> Scheduler:
    return Scheduler(store, planner, notifier, base_url=settings.APP_BASE_URL or DEFAULT_BASE_URL)
