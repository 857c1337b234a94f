"""Draft cache: overwrite-in-place progress snapshot for client resumption."""
from __future__ import annotations

import datetime as dt
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

from storage.sessions import read_draft, write_draft

from .access import load_authorized_session


class DraftAnswer(BaseModel):
    text: Optional[str] = Field(default=None, max_length=6000)
    durationSeconds: Optional[int] = Field(default=None, ge=0, le=240)
    retakeUsed: Optional[bool] = None
    extensionUsed: Optional[bool] = None
    isFinal: Optional[bool] = None


class DraftState(BaseModel):
    """Free-form progress state; only the client reads it back."""

    currentQuestionId: Optional[str] = None
    currentIndex: Optional[int] = Field(default=None, ge=0)
    mode: Optional[Literal["audio", "text"]] = None
    answers: Optional[Dict[str, DraftAnswer]] = None


def save_draft(session_id: str, caller: Optional[str], state: DraftState) -> Dict[str, Any]:
    """Replace the whole snapshot with ``state`` plus a server timestamp."""

    session = load_authorized_session(session_id, caller)
    snapshot = state.model_dump(exclude_none=True)
    snapshot["updatedAt"] = dt.datetime.now(dt.timezone.utc).isoformat()
    write_draft(session.id, snapshot)
    return snapshot


def load_draft(session_id: str, caller: Optional[str]) -> Optional[Dict[str, Any]]:
    session = load_authorized_session(session_id, caller)
    return read_draft(session.id)


def clear_draft(session_id: str, caller: Optional[str]) -> None:
    session = load_authorized_session(session_id, caller)
    write_draft(session.id, None)


__all__ = ["DraftAnswer", "DraftState", "save_draft", "load_draft", "clear_draft"]
