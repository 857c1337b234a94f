"""Fire-and-forget analytics event channel."""
from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Dict, Optional

from config.settings import settings
from storage.events import insert_event

logger = logging.getLogger(__name__)

SESSION_START = "session_start"
QUESTION_ANSWERED = "q_answered"
COACHING_VIEWED = "coaching_viewed"


class EventChannel:
    """Bounded queue drained by a daemon thread into the events table.

    Publishing never raises: a full queue drops the event with a warning and
    write failures are logged by the worker.
    """

    def __init__(self, maxsize: int) -> None:
        self._queue: "queue.Queue[Dict[str, Any]]" = queue.Queue(maxsize=maxsize)
        self._worker: Optional[threading.Thread] = None
        self._guard = threading.Lock()

    def publish(
        self,
        event_type: str,
        *,
        session_id: Optional[str] = None,
        user_id: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        event = {
            "event_type": event_type,
            "session_id": session_id,
            "user_id": user_id,
            "payload": payload or {},
        }
        if not settings.EVENTS_ASYNC:
            self._write(event)
            return
        self._ensure_worker()
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            logger.warning("Event queue full, dropping %s for session %s", event_type, session_id)

    def flush(self, timeout: float = 5.0) -> bool:
        """Block until queued events are written; False on timeout."""

        done = threading.Event()

        def _wait() -> None:
            self._queue.join()
            done.set()

        threading.Thread(target=_wait, daemon=True).start()
        return done.wait(timeout)

    def _ensure_worker(self) -> None:
        with self._guard:
            if self._worker is not None and self._worker.is_alive():
                return
            self._worker = threading.Thread(target=self._drain, name="event-channel", daemon=True)
            self._worker.start()

    def _drain(self) -> None:
        while True:
            event = self._queue.get()
            try:
                self._write(event)
            finally:
                self._queue.task_done()

    def _write(self, event: Dict[str, Any]) -> None:
        try:
            insert_event(**event)
        except Exception:  # noqa: BLE001
            logger.exception("Failed to record %s event", event.get("event_type"))


channel = EventChannel(maxsize=settings.EVENT_QUEUE_SIZE)


def emit(event_type: str, **kwargs: Any) -> None:
    channel.publish(event_type, **kwargs)


__all__ = ["EventChannel", "channel", "emit", "SESSION_START", "QUESTION_ANSWERED", "COACHING_VIEWED"]
