from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict | None = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        return {"message": self.message, "details": self.details}


class ValidationError(AppError):
    """Raised for invalid input or a dependency that cannot be used (inactive, other branch)."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=400, details=details)


class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: Any | None = None, message: str | None = None):
        if message is None:
            message = f"{resource_type} with ID {resource_id} not found"
        super().__init__(message, status_code=404, details={"resource": resource_type})


class ConflictError(AppError):
    """Raised on duplicate keys or when dependent records block the operation."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=409, details=details)


class ScheduleConflictError(ConflictError):
    """Raised when a teacher or room would be double-booked.

    ``conflicts`` holds every detected record, teacher conflicts first.
    """
    def __init__(self, conflicts: list, message: str = "Schedule conflicts detected"):
        super().__init__(message, details={"count": len(conflicts)})
        self.conflicts = list(conflicts)

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["conflicts"] = [
            item.model_dump(mode="json", by_alias=True) if hasattr(item, "model_dump") else item
            for item in self.conflicts
        ]
        return payload


class ForbiddenError(AppError):
    """Raised when the caller's role does not allow the operation."""
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message, status_code=403)


class AuthenticationError(AppError):
    """Raised when the bearer token or login credentials are missing or invalid."""
    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message, status_code=401)
        self.headers = {"WWW-Authenticate": "Bearer"}
