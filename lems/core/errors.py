"""
Error taxonomy for the LEMS backend.

Every error raised by the services carries the HTTP status the API answers
with. Route handlers let these propagate; the exception handlers registered in
``lems.main`` turn them into ``{"ok": false, "error": ..., "message": ...}``.
"""

from typing import Any, Dict, Optional


class LemsError(Exception):
    """Base class for all domain errors."""
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_response(self) -> Dict[str, Any]:
        body = {"ok": False, "error": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(LemsError):
    """Missing/malformed input or a violated precondition."""
    status_code = 400
    code = "VALIDATION_ERROR"


class AuthenticationError(LemsError):
    status_code = 401
    code = "AUTH_REQUIRED"


class AuthorizationError(LemsError):
    """Role or division mismatch."""
    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(LemsError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(LemsError):
    """The request is valid but clashes with current state (e.g. schedule already materialised)."""
    status_code = 409
    code = "CONFLICT"


class InvalidTransitionError(ValidationError):
    """A lifecycle transition not allowed from the entity's current status."""
    code = "INVALID_TRANSITION"


class SchedulingInfeasibleError(LemsError):
    """Teams do not fit into the available rooms/tables before the event ends."""
    status_code = 422
    code = "SCHEDULING_INFEASIBLE"


class PersistenceError(LemsError):
    """The store did not acknowledge a write."""
    status_code = 500
    code = "PERSISTENCE_ERROR"


class TaskQueueError(LemsError):
    """The background task broker could not accept a task."""
    status_code = 503
    code = "TASK_QUEUE_UNAVAILABLE"
