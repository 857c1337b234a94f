"""Cost governor: spend-driven capability gate for the audio input mode."""
from __future__ import annotations

import calendar
import datetime as dt
import logging
from typing import Optional, Tuple

from pydantic import BaseModel

from config import LlmRoute
from config.settings import settings
from llm_gateway import Usage
from storage.costs import insert_cost_record, sum_costs_since
from storage.flags import (
    AUDIO_MODE_FLAG,
    COST_THRESHOLD_KEY,
    get_config_value,
    insert_audit_log,
    set_config_value,
)

logger = logging.getLogger(__name__)


class GateResult(BaseModel):
    total: float
    threshold: float
    enabled: bool


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def billing_period(now: Optional[dt.datetime] = None) -> Tuple[dt.datetime, dt.datetime]:
    """First and last instant of the calendar month containing ``now``."""

    now = now or _utcnow()
    start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    last_day = calendar.monthrange(now.year, now.month)[1]
    end = now.replace(day=last_day, hour=23, minute=59, second=59, microsecond=0)
    return start, end


def monthly_threshold() -> float:
    raw = get_config_value(COST_THRESHOLD_KEY)
    if raw is None:
        return settings.MONTHLY_COST_THRESHOLD_USD
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid %s value %r, using default", COST_THRESHOLD_KEY, raw)
        return settings.MONTHLY_COST_THRESHOLD_USD


def enforce_capability_gate(now: Optional[dt.datetime] = None) -> GateResult:
    """Recompute the audio-mode flag from this month's spend and audit it."""

    period_start, _ = billing_period(now)
    threshold = monthly_threshold()
    total = round(sum_costs_since(period_start), 6)
    enabled = total < threshold
    set_config_value(AUDIO_MODE_FLAG, "true" if enabled else "false")
    insert_audit_log(
        action_type="cost_cap_enforced",
        resource_type="system",
        details={"total": total, "threshold": threshold, "audioEnabled": enabled},
    )
    if not enabled:
        logger.warning("Cost threshold reached (%.2f/%.2f). Audio mode disabled.", total, threshold)
    return GateResult(total=total, threshold=threshold, enabled=enabled)


def reset_capability() -> None:
    """Re-enable audio mode for a new billing period regardless of spend."""

    set_config_value(AUDIO_MODE_FLAG, "true")
    insert_audit_log(action_type="audio_mode_reset", resource_type="system")
    logger.info("Audio mode reset for new billing period")


def is_capability_enabled() -> bool:
    """Read the audio-mode flag; a missing row reads as enabled."""

    value = get_config_value(AUDIO_MODE_FLAG)
    return value is None or value == "true"


def estimate_cost(route: LlmRoute, usage: Usage) -> float:
    input_cost = usage.prompt_tokens * route.input_cost_per_1k / 1000
    output_cost = usage.completion_tokens * route.output_cost_per_1k / 1000
    return input_cost + output_cost


def track_cost(
    model: str,
    estimated_cost_usd: float,
    *,
    tokens_used: Optional[int] = None,
    audio_seconds: Optional[float] = None,
    now: Optional[dt.datetime] = None,
) -> None:
    """Append a cost record for the current period, then re-evaluate the gate.

    Failures are logged and never reach the paid call that triggered them.
    """

    period_start, period_end = billing_period(now)
    try:
        insert_cost_record(
            model=model,
            tokens_used=tokens_used,
            audio_seconds=audio_seconds,
            estimated_cost_usd=estimated_cost_usd,
            period_start=period_start.isoformat(),
            period_end=period_end.isoformat(),
        )
        enforce_capability_gate(now)
    except Exception:  # noqa: BLE001
        logger.exception("Cost tracking failed for model=%s", model)


def record_usage(route: LlmRoute, usage: Usage) -> None:
    """LLM gateway usage hook."""

    track_cost(route.model, estimate_cost(route, usage), tokens_used=usage.total_tokens)


__all__ = [
    "GateResult",
    "billing_period",
    "monthly_threshold",
    "enforce_capability_gate",
    "reset_capability",
    "is_capability_enabled",
    "estimate_cost",
    "track_cost",
    "record_usage",
]
