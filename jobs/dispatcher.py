"""Background dispatcher that runs evaluations outside the request cycle."""
from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional, Set

from interview_evaluation import EvaluationError, EvaluationResult
from observability import log_event, span
from storage.recordings import RecordingStore

from .job import EvaluationJob

logger = logging.getLogger(__name__)

Evaluator = Callable[..., EvaluationResult]
Reporter = Callable[[str, Any], Any]

NO_RECORDING_MESSAGE = "No recording was uploaded for this interview"


class JobDispatcher:
    """Fire-and-forget evaluation runner backed by a thread pool.

    Each submitted job calls the evaluator once (plus optional retries on
    transient provider failures) and reports the result or the error to
    ``report``. Nothing raised by a job escapes the worker thread.
    """

    def __init__(
        self,
        evaluator: Evaluator,
        report: Reporter,
        *,
        recordings: Optional[RecordingStore] = None,
        max_workers: int = 4,
        max_retries: int = 0,
        backoff_base_s: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._evaluator = evaluator
        self._report = report
        self._recordings = recordings or RecordingStore()
        self._max_retries = max(0, int(max_retries))
        self._backoff_base_s = max(0.0, float(backoff_base_s))
        self._sleep = sleep
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="evaluation")
        self._pending: Set[Future] = set()
        self._lock = threading.Lock()

    def submit(self, job: EvaluationJob) -> Future:
        """Schedule ``job`` and return immediately."""

        future = self._executor.submit(self._run, job)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        log_event("dispatch.submitted", job.session_id)
        return future

    __call__ = submit

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until every submitted job has finished; False on timeout."""

        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            with self._lock:
                pending = list(self._pending)
            if not pending:
                return True
            for future in pending:
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    return False
                try:
                    future.result(timeout=remaining)
                except Exception:  # noqa: BLE001
                    # _run never raises; a timeout is handled on the next pass.
                    pass

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def _run(self, job: EvaluationJob) -> None:
        try:
            outcome: Any = self._evaluate(job)
        except EvaluationError as exc:
            logger.warning("Evaluation failed for interview %s: %s", job.session_id, exc)
            outcome = exc
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error while evaluating interview %s", job.session_id)
            outcome = exc

        try:
            self._report(job.session_id, outcome)
        except Exception:  # noqa: BLE001
            logger.exception("Unable to record evaluation outcome for interview %s", job.session_id)
        log_event(
            "dispatch.finished",
            job.session_id,
            outcome="result" if isinstance(outcome, EvaluationResult) else "error",
        )

    def _evaluate(self, job: EvaluationJob) -> Any:
        if not job.recording_ref:
            return NO_RECORDING_MESSAGE
        try:
            recording = self._recordings.load(job.recording_ref)
        except FileNotFoundError:
            logger.error("Recording %s missing for interview %s", job.recording_ref, job.session_id)
            return NO_RECORDING_MESSAGE

        attempt = 0
        while True:
            try:
                with span("evaluation.span", job.session_id, attempt=attempt + 1):
                    return self._evaluator(
                        recording,
                        job.media_type or "video/webm",
                        interview_id=job.session_id,
                        subject_id=job.subject_id,
                    )
            except EvaluationError as exc:
                if not exc.transient or attempt >= self._max_retries:
                    raise
                delay = self._backoff_base_s * (2 ** attempt)
                attempt += 1
                log_event(
                    "dispatch.retry",
                    job.session_id,
                    attempt=attempt,
                    error=str(exc),
                    delay_s=delay,
                )
                self._sleep(delay)


__all__ = ["JobDispatcher", "NO_RECORDING_MESSAGE"]
