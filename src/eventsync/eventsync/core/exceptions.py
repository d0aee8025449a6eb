from __future__ import annotations

from datetime import datetime
from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    kind = "domain_error"
    status_code = 400

    def to_dict(self) -> dict:
        return {"success": False, "error": self.kind, "message": str(self)}


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    kind = "validation_error"
    status_code = 400


class AuthenticationError(DomainError):
    """Raised when the request carries no usable session."""

    kind = "unauthorized"
    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    kind = "forbidden"
    status_code = 403


class NotFoundError(DomainError):
    """Raised when an event, team or tracking record does not exist."""

    kind = "not_found"
    status_code = 404


class MalformedPayloadError(ValidationError):
    """Raised when no tracking id can be extracted from a scanned payload."""

    kind = "malformed_payload"


class WrongEventError(ValidationError):
    """Raised when a code issued for one event is scanned under another."""

    kind = "wrong_event"


class AlreadyScannedError(ValidationError):
    """Raised on every scan after the first one."""

    kind = "already_scanned"

    def __init__(self, message: str, *, scanned_at: Optional[datetime], scanned_by: str):
        super().__init__(message)
        self.scanned_at = scanned_at
        self.scanned_by = scanned_by

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["scannedAt"] = self.scanned_at.isoformat() if self.scanned_at else None
        data["scannedBy"] = self.scanned_by
        return data


class DuplicateTrackingError(DomainError):
    """Raised by a repository when the identity tuple already has a row."""

    kind = "already_exists"
