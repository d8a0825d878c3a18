"""Domain error taxonomy for the access engine.

Every error carries a human readable ``message`` and a stable ``code`` that
the HTTP adapter maps to a status code. Denials of protected reads also carry
the ``AccessReason`` so clients can tell "request access" from "renew".
"""

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from src.access.models import AccessReason


class AccessError(Exception):
    """Base access engine error."""

    def __init__(self, message: str, code: str = "access_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(AccessError):
    """No such student, course, lesson or access record."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, "not_found")


class ConflictError(AccessError):
    """A request is already pending or access is already approved."""

    def __init__(self, message: str = "Access request already exists"):
        super().__init__(message, "conflict")


class ForbiddenError(AccessError):
    """Caller lacks permission for the operation."""

    def __init__(self, message: str = "Insufficient permissions", code: str = "forbidden"):
        super().__init__(message, code)


class AccessDeniedError(ForbiddenError):
    """Student may not view the requested course or lesson right now."""

    def __init__(self, reason: "AccessReason", message: str | None = None):
        self.reason = reason
        super().__init__(message or f"Access denied: {reason.value}", "access_denied")


class InvalidOperationError(AccessError):
    """Structurally nonsensical input (bad period, end before start, ...)."""

    def __init__(self, message: str):
        super().__init__(message, "invalid_operation")


# HTTP status per error code
ERROR_STATUS_CODES: dict[str, int] = {
    "not_found": 404,
    "conflict": 409,
    "forbidden": 403,
    "access_denied": 403,
    "invalid_operation": 400,
}


def status_code_for(error: AccessError) -> int:
    """HTTP status code for a domain error (500 for unknown codes)."""
    return ERROR_STATUS_CODES.get(error.code, 500)
