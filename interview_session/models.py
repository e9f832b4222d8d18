"""Session record and evaluation result types."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator


class InterviewStatus(str, Enum):
    STARTED = "started"
    PROCESSING = "processing"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (InterviewStatus.DONE, InterviewStatus.FAILED)


class Question(BaseModel):
    id: int
    text: str
    type: str
    duration: int = Field(ge=0)  # seconds


class InterviewSession(BaseModel):
    """One interview and its lifecycle record."""

    id: str
    subject_id: str
    status: InterviewStatus = InterviewStatus.STARTED
    questions: List[Question] = Field(default_factory=list)
    started_at: datetime
    completed_at: Optional[datetime] = None
    recording_ref: Optional[str] = None
    media_type: Optional[str] = None
    transcript: Optional[str] = None
    score: Optional[int] = Field(default=None, ge=0, le=100)
    breakdown: Optional[Dict[str, int]] = None
    score_explanation: Optional[str] = None
    suggestions: Optional[List[str]] = None
    error_message: Optional[str] = None

    @model_validator(mode="after")
    def _check_terminal_payloads(self) -> "InterviewSession":
        done = self.status is InterviewStatus.DONE
        failed = self.status is InterviewStatus.FAILED
        if done and (self.score is None or self.breakdown is None):
            raise ValueError("done sessions require score and breakdown")
        if not done and (self.score is not None or self.breakdown is not None):
            raise ValueError("score and breakdown are only set on done sessions")
        if failed and self.error_message is None:
            raise ValueError("failed sessions require an error_message")
        if not failed and self.error_message is not None:
            raise ValueError("error_message is only set on failed sessions")
        if self.status is not InterviewStatus.STARTED and self.completed_at is None:
            raise ValueError("completed_at is set when a session leaves started")
        return self


class StartedInterview(BaseModel):
    session_id: str
    questions: List[Question]


__all__ = [
    "InterviewStatus",
    "Question",
    "InterviewSession",
    "StartedInterview",
]
