"""
Exceptions raised by the seating service.

Every error carries a stable ``code`` and an HTTP status so the API layer can
render it without knowing where it came from:

    raise NotFoundError("Seating plan", plan_id)
"""

from typing import Any, Dict, Optional


class SeatingError(Exception):
    """Base exception for all seating errors"""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


class ValidationError(SeatingError):
    """Missing or malformed input"""

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class CapacityExceededError(SeatingError):
    """The rooms cannot hold the whole roster"""

    status_code = 400

    def __init__(self, unseated_count: int):
        self.unseated_count = unseated_count
        super().__init__(
            f"Capacity exceeded. {unseated_count} students could not be seated. "
            "Add more rooms or increase bench capacity.",
            code="CAPACITY_EXCEEDED",
            details={"unseatedCount": unseated_count}
        )


class NotFoundError(SeatingError):
    status_code = 404

    def __init__(self, resource_type: str, resource_id: Any):
        super().__init__(
            f"{resource_type} with ID '{resource_id}' not found",
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": str(resource_id)}
        )


class AuthorizationError(SeatingError):
    """Actor has no authority over the section, department or plan"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_AUTHORIZED")


class StateConflictError(SeatingError):
    """Status change attempted on a plan that is no longer pending"""

    status_code = 409

    def __init__(self, plan_id: Any, current_status: Optional[str]):
        super().__init__(
            f"Seating plan '{plan_id}' has already been {current_status}",
            code="STATE_CONFLICT",
            details={"plan_id": str(plan_id), "status": current_status}
        )


class DependencyFailure(SeatingError):
    """A collaborator (e.g. the notification sink) failed"""

    status_code = 502

    def __init__(self, dependency: str, message: str):
        super().__init__(
            f"{dependency} failed: {message}",
            code="DEPENDENCY_FAILURE",
            details={"dependency": dependency}
        )
