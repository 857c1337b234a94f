"""Simple span helper for recording step timings."""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator

from .logger import log_event


@contextmanager
def span(name: str, session_id: str | None, **fields: Any) -> Iterator[None]:
    start = time.monotonic()
    outcome = "ok"
    try:
        yield
    except Exception:
        outcome = "error"
        raise
    finally:
        elapsed_ms = int((time.monotonic() - start) * 1000)
        log_event("span", session_id, name=name, ms=elapsed_ms, outcome=outcome, **fields)


__all__ = ["span"]
