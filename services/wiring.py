"""Explicit wiring of the state machine, dispatcher and evaluator."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from config import EVALUATOR_KEY, get_model, is_bound, settings
from interview_evaluation import EvaluationEngine, EvaluationResult, as_evaluator
from interview_session import InterviewStateMachine
from jobs import JobDispatcher
from storage.interviews import SessionStore
from storage.recordings import RecordingStore

logger = logging.getLogger(__name__)

Evaluator = Callable[..., EvaluationResult]


@dataclass
class InterviewServices:
    machine: InterviewStateMachine
    dispatcher: JobDispatcher
    evaluator: Evaluator
    store: SessionStore
    recordings: RecordingStore

    def close(self, wait: bool = True) -> None:
        self.dispatcher.shutdown(wait=wait)


def resolve_evaluator() -> Evaluator:
    """Return the registry-bound evaluator or the provider-backed engine."""

    if is_bound(EVALUATOR_KEY):
        return as_evaluator(get_model(EVALUATOR_KEY))
    return EvaluationEngine.from_config()


def build_services(
    *,
    evaluator: Optional[Evaluator] = None,
    store: Optional[SessionStore] = None,
    recordings: Optional[RecordingStore] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> InterviewServices:
    """Construct the components and connect them in both directions."""

    store = store or SessionStore()
    recordings = recordings or RecordingStore()
    evaluator = evaluator or resolve_evaluator()

    machine = InterviewStateMachine(store, recordings=recordings)
    dispatcher_kwargs = {} if sleep is None else {"sleep": sleep}
    dispatcher = JobDispatcher(
        evaluator,
        machine.record_outcome,
        recordings=recordings,
        max_workers=settings.DISPATCH_WORKERS,
        max_retries=settings.EVAL_MAX_RETRIES,
        backoff_base_s=settings.EVAL_BACKOFF_BASE_S,
        **dispatcher_kwargs,
    )
    machine.bind_dispatcher(dispatcher.submit)
    logger.info(
        "Interview services ready workers=%d retries=%d",
        settings.DISPATCH_WORKERS,
        settings.EVAL_MAX_RETRIES,
    )
    return InterviewServices(
        machine=machine,
        dispatcher=dispatcher,
        evaluator=evaluator,
        store=store,
        recordings=recordings,
    )
