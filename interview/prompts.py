"""Prompt templates for interview turn decisions."""
from __future__ import annotations

import json
from textwrap import dedent
from typing import Sequence


def build_turn_instructions(expert_terms: Sequence[str]) -> str:
    """System instruction for the turn-decision oracle."""

    terms = json.dumps(list(expert_terms), ensure_ascii=False)
    return dedent(
        f"""
        You are an intelligent AI Interview Agent conducting a deep, structured interview.

        Goals:
        1) Challenge vague answers with strong follow-ups.
        2) Demand specific examples, metrics, and reasoning.
        3) Test expert terms from the JD: {terms}
        4) Conclude only after core areas are covered.

        Return STRICT JSON:
        {{
          "action": "follow_up" | "next_question" | "conclude",
          "followUpQuestion"?: "string",
          "reason": "string"
        }}
        """
    ).strip()


__all__ = ["build_turn_instructions"]
