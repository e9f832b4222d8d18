"""Simple span helper for recording evaluation timings."""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator

from .logger import log_event


@contextmanager
def span(kind: str, session_id: str, **fields: Any) -> Iterator[None]:
    start = time.time()
    try:
        yield
    finally:
        elapsed_ms = int((time.time() - start) * 1000)
        log_event(kind, session_id, ms=elapsed_ms, **fields)


__all__ = ["span"]
