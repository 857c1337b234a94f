"""Observability utilities for the practice coaching stack."""
from .events import channel, emit
from .logger import log_event
from .tracing import span

__all__ = ["channel", "emit", "log_event", "span"]
