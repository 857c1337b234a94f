"""Persistence helpers for system config flags and the audit log."""
from __future__ import annotations

import datetime as dt
import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .sqlite import get_conn

AUDIO_MODE_FLAG = "audio_mode_enabled"
COST_THRESHOLD_KEY = "monthly_cost_threshold_usd"


class AuditPayload(BaseModel):
    action_type: str
    resource_type: str
    resource_id: Optional[str] = None
    actor_id: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)


def get_config_value(key: str) -> Optional[str]:
    with get_conn() as conn:
        row = conn.execute("SELECT value FROM system_config WHERE key = ?", (key,)).fetchone()
    return row["value"] if row else None


def set_config_value(key: str, value: str) -> None:
    """Upsert a system config row."""

    timestamp = dt.datetime.now(dt.timezone.utc).isoformat()
    with get_conn() as conn:
        conn.execute(
            """INSERT INTO system_config (key, value, updated_at) VALUES (?, ?, ?)
               ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at""",
            (key, value, timestamp),
        )


def insert_audit_log(**data: Any) -> int:
    """Insert an audit row and return its primary key."""

    payload = AuditPayload(**data)
    timestamp = dt.datetime.now(dt.timezone.utc).isoformat()
    with get_conn() as conn:
        cur = conn.cursor()
        cur.execute(
            """INSERT INTO audit_logs
               (timestamp, actor_id, action_type, resource_type, resource_id, details)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                timestamp,
                payload.actor_id,
                payload.action_type,
                payload.resource_type,
                payload.resource_id,
                json.dumps(payload.details),
            ),
        )
        return int(cur.lastrowid)


def list_audit_logs(action_type: Optional[str] = None) -> List[Dict[str, Any]]:
    """Audit rows, oldest first, optionally filtered by action."""

    query = "SELECT * FROM audit_logs"
    params: tuple = ()
    if action_type is not None:
        query += " WHERE action_type = ?"
        params = (action_type,)
    with get_conn() as conn:
        rows = conn.execute(query + " ORDER BY id ASC", params).fetchall()
    return [{**dict(row), "details": json.loads(row["details"] or "{}")} for row in rows]


__all__ = [
    "AUDIO_MODE_FLAG",
    "COST_THRESHOLD_KEY",
    "AuditPayload",
    "get_config_value",
    "set_config_value",
    "insert_audit_log",
    "list_audit_logs",
]
