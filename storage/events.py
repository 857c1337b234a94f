"""Persistence helpers for analytics events."""
from __future__ import annotations

import datetime as dt
import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .sqlite import get_conn


class EventPayload(BaseModel):
    event_type: str
    session_id: Optional[str] = None
    user_id: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)


def insert_event(**data: Any) -> int:
    """Insert an analytics event row and return its primary key."""

    event = EventPayload(**data)
    timestamp = dt.datetime.now(dt.timezone.utc).isoformat()
    with get_conn() as conn:
        cur = conn.cursor()
        cur.execute(
            """INSERT INTO events (timestamp, event_type, session_id, user_id, payload)
               VALUES (?, ?, ?, ?, ?)""",
            (
                timestamp,
                event.event_type,
                event.session_id,
                event.user_id,
                json.dumps(event.payload, ensure_ascii=False),
            ),
        )
        return int(cur.lastrowid)


def list_events(session_id: str) -> List[Dict[str, Any]]:
    """Events recorded for a session, oldest first."""

    with get_conn() as conn:
        rows = conn.execute(
            "SELECT * FROM events WHERE session_id = ? ORDER BY id ASC", (session_id,)
        ).fetchall()
    return [{**dict(row), "payload": json.loads(row["payload"] or "{}")} for row in rows]


__all__ = ["EventPayload", "insert_event", "list_events"]
