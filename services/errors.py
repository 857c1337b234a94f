"""Error taxonomy for practice session operations."""
from __future__ import annotations


class PracticeError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(PracticeError):
    """Malformed or out-of-range input."""

    status_code = 400


class Unauthorized(PracticeError):
    """Caller may not act on the resource."""

    status_code = 403


class NotFound(PracticeError):
    status_code = 404


class Conflict(PracticeError):
    status_code = 409


class RateLimited(PracticeError):
    status_code = 429


class UpstreamFailure(PracticeError):
    """The AI coaching service could not produce a usable result; safe to retry."""

    status_code = 502


__all__ = [
    "PracticeError",
    "ValidationError",
    "Unauthorized",
    "NotFound",
    "Conflict",
    "RateLimited",
    "UpstreamFailure",
]
