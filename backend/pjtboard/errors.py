"""
Exception types raised by the service layer.

The HTTP layer registers one handler per type:
    NotFoundError   -> 404
    ValidationError -> 422

The pure computation modules (status_rules, timeline, portfolio) never raise
these; they fall back to safe defaults instead.
"""


class NotFoundError(Exception):
    """Raised when a project, cost record or schedule item does not exist."""

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when well-formed input violates a business rule."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)
