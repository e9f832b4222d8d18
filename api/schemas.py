"""Pydantic schemas for the interview evaluation API."""
from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field

from interview_session.models import Question

StatusLiteral = Literal["started", "processing", "done", "failed"]


class StartReq(BaseModel):
    subject_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("subject_id", "tenant_id"),
    )


class StartResp(BaseModel):
    interview_id: str
    questions: List[Question]


class CompleteResp(BaseModel):
    status: Literal["processing"] = "processing"


class StatusResp(BaseModel):
    status: StatusLiteral
    score: Optional[int] = None
    breakdown: Optional[Dict[str, int]] = None
    error_message: Optional[str] = None


class RecordingResp(BaseModel):
    interview_id: str
    media_type: str
    size_bytes: int


class SessionResp(StatusResp):
    interview_id: str
    subject_id: str
    questions: List[Question] = Field(default_factory=list)
    started_at: str
    completed_at: Optional[str] = None
    has_recording: bool = False
    media_type: Optional[str] = None
    transcript: Optional[str] = None
    score_explanation: Optional[str] = None
    suggestions: Optional[List[str]] = None


class EvaluationResp(BaseModel):
    interview_id: Optional[str] = None
    transcript: str
    score: int
    score_explanation: str
    breakdown: Dict[str, int]
    suggestions: List[str] = Field(default_factory=list)


class ErrorResp(BaseModel):
    detail: str
