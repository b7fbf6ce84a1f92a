"""
RoMod - Case Error Taxonomy
===========================

Domain exceptions raised by the case store and the case state machine.

DESIGN:
    State machine errors are synchronous and abort the commit.
    RelayFailure is only ever raised inside the relay gateway's
    background path and is never propagated to the original caller.
    The HTTP layer maps each class onto an ErrorCode (src.api.errors).

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import Any, Dict, Optional


class CaseError(Exception):
    """
    Base class for all case lifecycle errors.

    Attributes:
        message: Human readable description, surfaced verbatim.
        details: Optional structured context (ids, current state).
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ValidationError(CaseError):
    """Malformed or missing input. Never retried."""


class ConflictError(CaseError):
    """A concurrent or duplicate action would break a uniqueness rule."""


class NotFoundError(CaseError):
    """Entity does not exist or is outside the requester's scope."""


class InvalidStateError(CaseError):
    """Entity exists but the transition is illegal from its current state."""


class RelayFailure(CaseError):
    """Downstream enforcement or logging call failed."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.status = status

    @staticmethod
    def for_status(
        message: str,
        status: int,
        details: Optional[Dict[str, Any]] = None,
    ) -> "RelayFailure":
        """Pick the error for an HTTP status: 4xx other than 429 is permanent."""
        if 400 <= status < 500 and status != 429:
            return RelayRejected(message, status=status, details=details)
        return RelayFailure(message, status=status, details=details)


class RelayRejected(RelayFailure):
    """The platform refused the call outright. Never retried."""


__all__ = [
    "CaseError",
    "ValidationError",
    "ConflictError",
    "NotFoundError",
    "InvalidStateError",
    "RelayFailure",
    "RelayRejected",
]
