"""Interview session lifecycle: records, errors and the state machine."""
from .errors import InternalError, InterviewError, InvalidStateError, NotFoundError, ValidationError
from .models import InterviewSession, InterviewStatus, Question, StartedInterview
from .questions import INTERVIEW_QUESTIONS, default_questions
from .state_machine import InterviewStateMachine, describe_failure, new_session_id
from .status import session_view, status_projection

__all__ = [
    "InternalError",
    "InterviewError",
    "InvalidStateError",
    "NotFoundError",
    "ValidationError",
    "InterviewSession",
    "InterviewStatus",
    "Question",
    "StartedInterview",
    "INTERVIEW_QUESTIONS",
    "default_questions",
    "InterviewStateMachine",
    "describe_failure",
    "new_session_id",
    "session_view",
    "status_projection",
]
