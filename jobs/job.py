"""Unit of background work handed from the state machine to the dispatcher."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class EvaluationJob:
    session_id: str
    recording_ref: Optional[str]
    media_type: Optional[str]
    subject_id: Optional[str] = None
