"""Decision oracle boundary and its LLM-gateway implementation."""
from __future__ import annotations

from typing import Dict, List, Optional, Protocol, Sequence

from config import LlmRoute
from llm_gateway import HttpClient, LlmGatewayError, complete

from .errors import OracleCallFailure


class DecisionOracle(Protocol):  # Returns the raw verdict text for a transcript
    def decide(self, messages: Sequence[Dict[str, str]], instructions: str) -> str: ...


class GatewayDecisionOracle:
    """Turn-decision oracle backed by a configured chat-completion route."""

    def __init__(
        self,
        route: LlmRoute,
        *,
        client: Optional[HttpClient] = None,
        temperature: float = 0.4,
    ) -> None:
        self._route = route
        self._client = client
        self._temperature = temperature

    def decide(self, messages: Sequence[Dict[str, str]], instructions: str) -> str:
        payload: List[Dict[str, str]] = [{"role": "system", "content": instructions}]
        payload.extend(messages)
        try:
            return complete(
                payload,
                cfg=self._route,
                client=self._client,
                options={"temperature": self._temperature},
            )
        except LlmGatewayError as exc:
            raise OracleCallFailure(str(exc)) from exc


__all__ = ["DecisionOracle", "GatewayDecisionOracle"]
