"""Service-layer error taxonomy.

Every expected, user-facing failure of the voting core is a ``ServiceError``
subclass so callers can tell them apart without parsing messages. They derive
from ``ValueError`` so older call sites that catch ``ValueError`` keep working.

Storage failures surface as ``ExternalFailureError`` and are never retried
inside the core.
"""
from typing import Optional


class ServiceError(ValueError):
    """Base class for expected service failures."""

    code = "error"
    status_code = 400

    def __init__(self, message: str, reason: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.reason = reason

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "reason": self.reason}


class NotFoundError(ServiceError):
    """Referenced meeting, motion, choice or pool does not exist."""

    code = "not_found"
    status_code = 404


class ForbiddenError(ServiceError):
    """User is not eligible to vote. ``reason`` is an eligibility code."""

    code = "forbidden"
    status_code = 403


class ConflictError(ServiceError):
    """Duplicate vote, lost status race, or edit of a locked motion."""

    code = "conflict"
    status_code = 409


class InvalidTransitionError(ServiceError):
    """Requested motion status change is not in the transition table."""

    code = "invalid_transition"
    status_code = 409

    def __init__(self, message: str, current: Optional[str] = None, requested: Optional[str] = None):
        super().__init__(message)
        self.current = current
        self.requested = requested


class ValidationError(ServiceError):
    """Malformed vote payload or admin input."""

    code = "validation_error"
    status_code = 400


class ExternalFailureError(ServiceError):
    """Storage or network failure. Transient from the caller's point of view."""

    code = "external_failure"
    status_code = 503
