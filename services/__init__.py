"""Service wiring for the interview evaluation pipeline."""
from .wiring import InterviewServices, build_services, resolve_evaluator

__all__ = ["InterviewServices", "build_services", "resolve_evaluator"]
