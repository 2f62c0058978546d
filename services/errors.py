"""
Error taxonomy for the dues engine.
Each error knows the HTTP status it maps to; main.py turns them into JSON responses.
"""
from typing import Optional


class DuesError(Exception):
    status_code = 500
    reason = "error"

    def __init__(self, message: str, reason: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if reason:
            self.reason = reason

    def to_dict(self) -> dict:
        return {"detail": self.message, "reason": self.reason}


class ValidationError(DuesError):
    """Malformed, missing or out-of-vocabulary field"""
    status_code = 400
    reason = "validation-failed"

    def __init__(self, message: str, field: Optional[str] = None, reason: Optional[str] = None):
        super().__init__(message, reason)
        self.field = field

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.field:
            data["field"] = self.field
        return data


class AuthorizationError(DuesError):
    """Principal lacks rights for the action. Never retried automatically."""
    status_code = 403
    reason = "role-insufficient"


class PreconditionFailed(DuesError):
    """State-machine guard violated. Caller must re-fetch before retrying."""
    status_code = 409
    reason = "precondition-failed"


class NotFound(DuesError):
    status_code = 404
    reason = "not-found"
