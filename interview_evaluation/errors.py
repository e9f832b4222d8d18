"""Failures raised by the Evaluation Engine."""
from __future__ import annotations


class EvaluationError(RuntimeError):
    """Base engine error; ``transient`` marks failures worth retrying."""

    transient = False


class ProviderUnavailableError(EvaluationError):  # network or provider-side failure
    transient = True


class PayloadTooLargeError(EvaluationError):  # recording exceeds provider limits
    pass


class EvaluationParseError(EvaluationError):  # provider reply not in the expected shape
    pass


__all__ = [
    "EvaluationError",
    "ProviderUnavailableError",
    "PayloadTooLargeError",
    "EvaluationParseError",
]
