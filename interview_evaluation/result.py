"""Evaluation output types."""
from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

SCORE_MIN = 0
SCORE_MAX = 100

BREAKDOWN_CATEGORIES = ("length", "keywords", "language", "sentiment", "completeness")


class EvaluationResult(BaseModel):
    """Structured outcome of scoring one recording."""

    transcript: str = Field(min_length=1)
    score: int = Field(ge=SCORE_MIN, le=SCORE_MAX)
    score_explanation: str
    breakdown: Dict[str, int] = Field(min_length=1)
    suggestions: List[str] = Field(default_factory=list)


class ProviderEvaluation(BaseModel):  # Raw shape the provider is asked to return
    # Numbers must arrive as JSON numbers; "85" is a malformed reply.
    model_config = ConfigDict(strict=True)

    transcript: str = Field(min_length=1)
    score: float
    score_explanation: str
    breakdown: Dict[str, float] = Field(min_length=1)
    suggestions: List[str]


def clamp_score(value: float) -> int:
    """Round to the nearest integer and clamp into [0, 100]."""

    return int(max(SCORE_MIN, min(SCORE_MAX, round(value))))
