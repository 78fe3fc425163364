"""
Exceptions raised by the verification services.

Each error carries a stable ``error_code`` and an HTTP status so the app
factory can render every service failure with a single handler.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class VerificationError(Exception):
    """Base exception for verification pipeline errors"""
    status_code = 500
    error_code = "VERIFICATION_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if error_code:
            self.error_code = error_code
        self.timestamp = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp,
        }


class ValidationError(VerificationError):
    """Missing or malformed input, rejected before any write"""
    status_code = 400
    error_code = "VALIDATION_ERROR"


class TransitionError(ValidationError):
    """Requested status change is not legal from the current status"""
    status_code = 409
    error_code = "INVALID_TRANSITION"

    def __init__(self, current: str, target: str):
        super().__init__(
            f"Transition {current} -> {target} is not allowed",
            details={"current": current, "target": target},
        )


class AuthorizationError(VerificationError):
    status_code = 403
    error_code = "ACCESS_DENIED"


class NotFoundError(VerificationError):
    status_code = 404
    error_code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(
            f"{resource} with id {resource_id} not found",
            details={"resource_type": resource, "id": resource_id},
        )


class DependencyError(VerificationError):
    """An external collaborator (OCR, regulator mail, storage) failed"""
    status_code = 502
    error_code = "DEPENDENCY_ERROR"

    def __init__(self, collaborator: str, message: str, cause: Optional[Exception] = None):
        super().__init__(f"{collaborator}: {message}", details={"collaborator": collaborator})
        self.collaborator = collaborator
        if cause is not None:
            self.__cause__ = cause


class ConsistencyError(VerificationError):
    """Stored documents do not match the expected shape (e.g. duplicate types)"""
    status_code = 500
    error_code = "CONSISTENCY_ERROR"


class RecomputeError(VerificationError):
    """A decision was stored but the educator status could not be re-derived.

    The stored decision stands; re-running the recompute is safe.
    """
    status_code = 500
    error_code = "STATUS_RECOMPUTE_FAILED"
