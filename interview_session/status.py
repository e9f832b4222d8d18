"""Read-only status projection returned to polling clients."""
from __future__ import annotations

from typing import Any, Dict

from .models import InterviewSession, InterviewStatus


def status_projection(session: InterviewSession) -> Dict[str, Any]:
    """Project a session into the shape keyed strictly by its status.

    ``score``/``breakdown`` appear only for ``done`` and ``error_message``
    only for ``failed``; in-flight states expose the status alone.
    """

    view: Dict[str, Any] = {"status": session.status.value}
    if session.status is InterviewStatus.DONE:
        view["score"] = session.score
        view["breakdown"] = dict(session.breakdown or {})
    elif session.status is InterviewStatus.FAILED:
        view["error_message"] = session.error_message
    return view


def session_view(session: InterviewSession) -> Dict[str, Any]:
    """Full record view honouring the same per-status field gating."""

    view: Dict[str, Any] = {
        "interview_id": session.id,
        "subject_id": session.subject_id,
        "questions": [question.model_dump() for question in session.questions],
        "started_at": session.started_at.isoformat(),
        "completed_at": session.completed_at.isoformat() if session.completed_at else None,
        "has_recording": session.recording_ref is not None,
        "media_type": session.media_type,
    }
    view.update(status_projection(session))
    if session.status is InterviewStatus.DONE:
        view["transcript"] = session.transcript
        view["score_explanation"] = session.score_explanation
        view["suggestions"] = list(session.suggestions or [])
    return view
