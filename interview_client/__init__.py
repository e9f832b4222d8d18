"""Python client for the interview evaluation API."""
from .api_client import ApiError, InterviewApiClient
from .polling import EvaluationFailed, StatusPoller

__all__ = ["ApiError", "InterviewApiClient", "EvaluationFailed", "StatusPoller"]
