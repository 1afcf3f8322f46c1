from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from medsched.domain.violations import ConflictViolation


class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_content(self) -> dict:
        return {"message": self.message, "details": self.details}


class ResourceNotFoundError(AppError):
    """Raised when a referenced room, course, group or schedule entry is missing."""
    def __init__(self, resource_type: str, resource_id: str | int, message: str | None = None):
        super().__init__(
            message or f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": str(resource_id)},
        )


class ScheduleInputError(AppError):
    """Raised when a request is structurally valid JSON but cannot describe a schedule entry."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=422, details=details)


class ScheduleRejectedError(AppError):
    """Raised when a single candidate entry breaks a business rule."""
    def __init__(self, violations: list[ConflictViolation]):
        self.violations = violations
        first = violations[0]
        super().__init__(
            first.message,
            status_code=422,
            details={
                "kind": first.kind.value,
                "conflicting_entry_id": first.conflicting_entry_id,
            },
        )


class BatchRejectedError(AppError):
    """Raised when an import batch is refused; nothing from the batch is written."""

    INTRA_BATCH = "intra_batch"
    DATABASE = "database"
    INPUT = "input"

    def __init__(self, *, stage: str, total: int, errors: list[str], message: str):
        self.stage = stage
        self.total = total
        self.errors = errors
        super().__init__(message, status_code=422, details={"stage": stage})

    def to_content(self) -> dict:
        return {
            "success": 0,
            "total": self.total,
            "errors": self.errors,
            "message": self.message,
            "stage": self.stage,
        }


class ConfigurationError(AppError):
    """Raised when system configuration is invalid."""
    def __init__(self, message: str):
        super().__init__(message, status_code=500)
