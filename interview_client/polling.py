"""Client-side polling of interview evaluation status."""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Optional

from config import settings

from .api_client import InterviewApiClient

logger = logging.getLogger(__name__)

IN_FLIGHT = frozenset({"started", "processing"})

StatusPayload = Dict[str, Any]


class EvaluationFailed(RuntimeError):
    """Raised into ``on_error`` when the interview reaches ``failed``."""

    def __init__(self, payload: StatusPayload) -> None:
        super().__init__(payload.get("error_message") or "Interview processing failed")
        self.payload = payload


class StatusPoller:
    """Poll ``GET /interviews/{id}/status`` until a terminal status.

    The first fetch happens as soon as :meth:`start` is called, then one
    fetch per ``interval_s`` while the last observed status is ``started``
    or ``processing``. :meth:`cancel` stops the loop but has no effect on
    the server-side evaluation.
    """

    def __init__(
        self,
        api: InterviewApiClient,
        interview_id: str,
        *,
        interval_s: Optional[float] = None,
        on_complete: Optional[Callable[[StatusPayload], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> None:
        self._api = api
        self._interview_id = interview_id
        self._interval_s = interval_s if interval_s is not None else settings.POLL_INTERVAL_S
        self._on_complete = on_complete
        self._on_error = on_error
        self._cancelled = threading.Event()
        self._finished = threading.Event()
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self.status: Optional[StatusPayload] = None
        self.error: Optional[Exception] = None

    @property
    def is_processing(self) -> bool:
        return self.status is not None and self.status.get("status") in IN_FLIGHT

    @property
    def is_done(self) -> bool:
        return self.status is not None and self.status.get("status") == "done"

    @property
    def is_failed(self) -> bool:
        return self.status is not None and self.status.get("status") == "failed"

    def start(self) -> "StatusPoller":
        if self._thread is not None:
            return self
        self._thread = threading.Thread(
            target=self._loop,
            name=f"status-poller-{self._interview_id}",
            daemon=True,
        )
        self._thread.start()
        return self

    def cancel(self) -> None:
        self._cancelled.set()

    def wait(self, timeout: Optional[float] = None) -> Optional[StatusPayload]:
        """Block until polling stops; returns the last observed status."""

        self._finished.wait(timeout)
        return self.status

    def refetch(self) -> Optional[StatusPayload]:
        """Fetch once now, outside the timer."""

        return self._fetch()

    def _loop(self) -> None:
        try:
            while not self._cancelled.is_set():
                self._fetch()
                if not self.is_processing:
                    break
                if self._cancelled.wait(self._interval_s):
                    break
        finally:
            self._finished.set()

    def _fetch(self) -> Optional[StatusPayload]:
        with self._lock:
            try:
                payload = self._api.get_status(self._interview_id)
            except Exception as exc:  # noqa: BLE001
                logger.warning("Status fetch failed for interview %s: %s", self._interview_id, exc)
                self.error = exc
                self._notify_error(exc)
                return self.status
            self.status = payload
            self.error = None

        state = payload.get("status")
        if state == "done" and self._on_complete is not None:
            self._on_complete(payload)
        elif state == "failed":
            self._notify_error(EvaluationFailed(payload))
        return payload

    def _notify_error(self, exc: Exception) -> None:
        if self._on_error is not None:
            self._on_error(exc)
