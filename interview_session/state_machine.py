"""Lifecycle owner for interview session records.

The state machine is the only writer of ``status`` and the terminal
payloads. Every transition reads the record, validates the guard, and
writes back conditionally on the status it read, so two callers racing
the same transition produce exactly one winner.
"""
from __future__ import annotations

import logging
import re
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Sequence, Union

from interview_evaluation import EvaluationResult
from jobs.job import EvaluationJob
from observability import log_event
from storage.recordings import RecordingStore

from .errors import InvalidStateError, NotFoundError, ValidationError
from .models import InterviewSession, InterviewStatus, Question, StartedInterview
from .questions import default_questions
from .status import status_projection

if TYPE_CHECKING:
    from storage.interviews import SessionStore

logger = logging.getLogger(__name__)

Dispatch = Callable[[EvaluationJob], Any]
Outcome = Union[EvaluationResult, BaseException, str]

DEFAULT_MEDIA_TYPE = "video/webm"

_UNSAFE_ID_CHARS = re.compile(r"[^A-Za-z0-9_-]")

RECORDING_FIELDS = ("recording_ref", "media_type")
COMPLETION_FIELDS = ("status", "completed_at")
OUTCOME_FIELDS = (
    "status",
    "transcript",
    "score",
    "breakdown",
    "score_explanation",
    "suggestions",
    "error_message",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_session_id(subject_id: str, now: datetime) -> str:
    """Build ``interview_<subject>_<epoch ms>_<suffix>``.

    Characters outside ``[A-Za-z0-9_-]`` in the subject become ``_`` so the
    id is usable as a URL path segment and a directory name.
    """

    millis = int(now.timestamp() * 1000)
    slug = _UNSAFE_ID_CHARS.sub("_", subject_id)
    return f"interview_{slug}_{millis}_{uuid.uuid4().hex[:6]}"


def describe_failure(error: Union[BaseException, str]) -> str:
    if isinstance(error, str):
        return error.strip() or "Interview evaluation failed"
    message = str(error).strip()
    return message or f"Interview evaluation failed ({type(error).__name__})"


class InterviewStateMachine:
    def __init__(
        self,
        store: SessionStore,
        *,
        recordings: Optional[RecordingStore] = None,
        questions: Optional[Sequence[Question]] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._recordings = recordings or RecordingStore()
        self._questions = list(questions) if questions is not None else default_questions()
        self._clock = clock
        self._dispatch: Optional[Dispatch] = None

    def bind_dispatcher(self, dispatch: Dispatch) -> None:
        """Register the callable that schedules evaluation jobs."""

        self._dispatch = dispatch

    # Synchronous operations -------------------------------------------------

    def start(self, subject_id: Optional[str]) -> StartedInterview:
        subject = (subject_id or "").strip()
        if not subject:
            raise ValidationError("subject_id is required")

        now = self._clock()
        session = InterviewSession(
            id=new_session_id(subject, now),
            subject_id=subject,
            status=InterviewStatus.STARTED,
            questions=[question.model_copy() for question in self._questions],
            started_at=now,
        )
        self._store.create(session)
        log_event("interview.started", session.id, subject_id=subject, questions=len(session.questions))
        return StartedInterview(session_id=session.id, questions=session.questions)

    def attach_recording(
        self,
        session_id: str,
        data: bytes,
        media_type: Optional[str] = None,
    ) -> InterviewSession:
        session = self._load(session_id)
        if session.status is not InterviewStatus.STARTED:
            raise InvalidStateError("Interview is not in progress")
        if not data:
            raise ValidationError("Recording file is required")

        media_type = (media_type or "").strip() or DEFAULT_MEDIA_TYPE
        ref = self._recordings.save(session.id, data, media_type)
        updated = self._with(session, recording_ref=ref, media_type=media_type)
        if not self._store.update(
            updated,
            expected_status=InterviewStatus.STARTED,
            fields=RECORDING_FIELDS,
        ):
            raise InvalidStateError("Interview is not in progress")
        log_event("interview.recording_attached", session.id, size_bytes=len(data), media_type=media_type)
        return updated

    def complete(self, session_id: str) -> InterviewSession:
        session = self._load(session_id)
        if session.status is not InterviewStatus.STARTED:
            raise InvalidStateError("Interview is not in progress")
        if not session.questions:
            raise ValidationError("No questions have been answered")

        updated = self._with(
            session,
            status=InterviewStatus.PROCESSING,
            completed_at=self._clock(),
        )
        if not self._store.update(
            updated,
            expected_status=InterviewStatus.STARTED,
            fields=COMPLETION_FIELDS,
        ):
            # Another caller completed the session between our read and write.
            raise InvalidStateError("Interview is not in progress")
        # Re-read so the job sees a recording attached after our first read.
        current = self._store.get(session.id) or updated
        log_event("interview.processing", session.id, status=current.status.value)
        self._schedule(current)
        return current

    def get_status(self, session_id: str) -> Dict[str, Any]:
        return status_projection(self._load(session_id))

    def get_session(self, session_id: str) -> InterviewSession:
        return self._load(session_id)

    # Transitions driven by the dispatcher ----------------------------------

    def record_outcome(self, session_id: str, outcome: Outcome) -> bool:
        """Apply an evaluation outcome to a ``processing`` session.

        Returns False, logging a warning, when the session is missing or no
        longer ``processing``; stale and duplicate callbacks are no-ops.
        """

        session = self._store.get(session_id)
        if session is None or session.status is not InterviewStatus.PROCESSING:
            self._ignore(session_id, session)
            return False

        if isinstance(outcome, EvaluationResult):
            updated = self._with(
                session,
                status=InterviewStatus.DONE,
                transcript=outcome.transcript,
                score=outcome.score,
                breakdown=dict(outcome.breakdown),
                score_explanation=outcome.score_explanation,
                suggestions=list(outcome.suggestions),
            )
        else:
            updated = self._with(
                session,
                status=InterviewStatus.FAILED,
                error_message=describe_failure(outcome),
            )

        if not self._store.update(
            updated,
            expected_status=InterviewStatus.PROCESSING,
            fields=OUTCOME_FIELDS,
        ):
            self._ignore(session_id, self._store.get(session_id))
            return False

        if updated.status is InterviewStatus.DONE:
            log_event("interview.done", session_id, status="done", score=updated.score)
        else:
            log_event(
                "interview.failed",
                session_id,
                level=logging.WARNING,
                status="failed",
                error=updated.error_message,
            )
        return True

    def redispatch_processing(self) -> int:
        """Schedule evaluation again for every session left in ``processing``."""

        pending = self._store.list(status=InterviewStatus.PROCESSING)
        for session in pending:
            logger.info("Re-dispatching in-flight interview %s", session.id)
            self._schedule(session)
        return len(pending)

    # Internals ---------------------------------------------------------------

    def _load(self, session_id: str) -> InterviewSession:
        session = self._store.get(session_id) if session_id else None
        if session is None:
            raise NotFoundError("Interview not found")
        return session

    def _with(self, session: InterviewSession, **changes: Any) -> InterviewSession:
        data = session.model_dump()
        data.update(changes)
        return InterviewSession.model_validate(data)

    def _schedule(self, session: InterviewSession) -> None:
        job = EvaluationJob(
            session_id=session.id,
            recording_ref=session.recording_ref,
            media_type=session.media_type,
            subject_id=session.subject_id,
        )
        if self._dispatch is None:
            logger.error("No job dispatcher bound; failing interview %s", session.id)
            self.record_outcome(session.id, "Evaluation could not be scheduled")
            return
        try:
            self._dispatch(job)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unable to schedule evaluation for interview %s", session.id)
            self.record_outcome(session.id, f"Evaluation could not be scheduled: {exc}")

    def _ignore(self, session_id: str, session: Optional[InterviewSession]) -> None:
        current = session.status.value if session is not None else "missing"
        logger.warning(
            "Ignoring evaluation outcome for interview %s in state %s",
            session_id,
            current,
        )
        log_event(
            "interview.outcome_ignored",
            session_id,
            level=logging.WARNING,
            status=current,
        )


__all__ = ["InterviewStateMachine", "describe_failure", "new_session_id"]
