"""Session access policy: caller-owned sessions versus unowned guest sessions."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from storage.sessions import SessionRecord, get_session

from .errors import NotFound, Unauthorized


@dataclass(frozen=True)
class OwnedBy:
    """Session belongs to an identified user; only that user may act on it."""

    identity: str

    def permits(self, caller: Optional[str]) -> bool:
        return caller is not None and caller == self.identity


@dataclass(frozen=True)
class Unowned:
    """Guest session; possession of the id is the capability."""

    def permits(self, caller: Optional[str]) -> bool:
        return True


SessionAccess = Union[OwnedBy, Unowned]


def access_for(session: SessionRecord) -> SessionAccess:
    if session.user_id:
        return OwnedBy(session.user_id)
    return Unowned()


def authorize(session: SessionRecord, caller: Optional[str]) -> None:
    """Raise :class:`Unauthorized` unless ``caller`` may act on ``session``."""

    if not access_for(session).permits(caller):
        raise Unauthorized("Unauthorized")


def load_authorized_session(session_id: str, caller: Optional[str]) -> SessionRecord:
    """Load a session and check the caller against its access policy."""

    session = get_session(session_id)
    if session is None:
        raise NotFound("Session not found")
    authorize(session, caller)
    return session


__all__ = ["OwnedBy", "Unowned", "SessionAccess", "access_for", "authorize", "load_authorized_session"]
