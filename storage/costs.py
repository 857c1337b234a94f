"""Persistence helpers for usage cost records."""
from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel, Field

from .sqlite import get_conn


class CostRecordPayload(BaseModel):
    model: str
    tokens_used: Optional[int] = None
    audio_seconds: Optional[float] = None
    estimated_cost_usd: float = Field(ge=0.0)
    period_start: str
    period_end: str


def insert_cost_record(**data: Any) -> int:
    """Append a cost record; rows are never updated."""

    payload = CostRecordPayload(**data)
    timestamp = dt.datetime.now(dt.timezone.utc).isoformat()
    with get_conn() as conn:
        cur = conn.cursor()
        cur.execute(
            """INSERT INTO cost_records
               (model, tokens_used, audio_seconds, estimated_cost_usd, period_start, period_end, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (
                payload.model,
                payload.tokens_used,
                payload.audio_seconds,
                payload.estimated_cost_usd,
                payload.period_start,
                payload.period_end,
                timestamp,
            ),
        )
        return int(cur.lastrowid)


def sum_costs_since(period_start: dt.datetime) -> float:
    """Total estimated cost of records whose period starts at or after ``period_start``."""

    with get_conn() as conn:
        row = conn.execute(
            "SELECT COALESCE(SUM(estimated_cost_usd), 0) FROM cost_records WHERE period_start >= ?",
            (period_start.isoformat(),),
        ).fetchone()
    return float(row[0])


__all__ = ["CostRecordPayload", "insert_cost_record", "sum_costs_since"]
