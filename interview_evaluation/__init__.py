"""Evaluation Engine package."""
from .engine import EvaluationEngine, as_evaluator, parse_evaluation
from .errors import (
    EvaluationError,
    EvaluationParseError,
    PayloadTooLargeError,
    ProviderUnavailableError,
)
from .result import BREAKDOWN_CATEGORIES, EvaluationResult, ProviderEvaluation, clamp_score

__all__ = [
    "EvaluationEngine",
    "as_evaluator",
    "parse_evaluation",
    "EvaluationError",
    "EvaluationParseError",
    "PayloadTooLargeError",
    "ProviderUnavailableError",
    "BREAKDOWN_CATEGORIES",
    "EvaluationResult",
    "ProviderEvaluation",
    "clamp_score",
]
