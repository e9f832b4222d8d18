"""Error taxonomy for synchronous interview session operations."""
from __future__ import annotations


class InterviewError(Exception):
    """Base error carrying the HTTP status and machine-readable code."""

    status_code = 500
    code = "internal/error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(InterviewError):
    status_code = 400
    code = "validation/missing-field"


class NotFoundError(InterviewError):
    status_code = 404
    code = "interview/not-found"


class InvalidStateError(InterviewError):
    status_code = 400
    code = "interview/invalid-state"


class InternalError(InterviewError):
    status_code = 500
    code = "internal/error"


__all__ = [
    "InterviewError",
    "ValidationError",
    "NotFoundError",
    "InvalidStateError",
    "InternalError",
]
