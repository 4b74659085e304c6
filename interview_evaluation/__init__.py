from .evaluation import (
    CompletionHandler,
    EvaluationOracle,
    GatewayEvaluationOracle,
    build_evaluation_prompt,
    decode_evaluation,
    neutral_evaluation,
    parse_evaluation,
)

__all__ = [
    "CompletionHandler",
    "EvaluationOracle",
    "GatewayEvaluationOracle",
    "build_evaluation_prompt",
    "decode_evaluation",
    "neutral_evaluation",
    "parse_evaluation",
]
