"""
Application exceptions.

Every error a use case can raise derives from ``OnetimeError`` so the API
layer can render it with the right status code and a stable error code.
"""

from typing import Any


class OnetimeError(Exception):
    """
    Base application error.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for API responses
        status_code: HTTP status code for this error type
        context: Additional context data about the error
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        status_code: int = 400,
        context: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or "ONETIME_ERROR"
        self.status_code = status_code
        self.context = context or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "status_code": self.status_code,
            "context": self.context,
        }


class FormError(OnetimeError):
    """Invalid form input. Echoes the submitted fields back to the client."""

    def __init__(self, message: str, form_fields: dict[str, Any] | None = None):
        super().__init__(
            message,
            "FORM_ERROR",
            status_code=400,
            context={"form_fields": form_fields or {}},
        )
        self.form_fields = form_fields or {}


class NotFoundError(OnetimeError):
    """Requested record does not exist."""

    def __init__(self, message: str = "Not found", context: dict[str, Any] | None = None):
        super().__init__(message, "NOT_FOUND", status_code=404, context=context)


class MissingSecret(NotFoundError):
    """Secret or metadata is gone (never existed, expired, or already received)."""

    def __init__(self, message: str = "Unknown secret"):
        super().__init__(message)
        self.error_code = "MISSING_SECRET"


class Unauthorized(OnetimeError):
    """Request requires an authenticated session."""

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, "UNAUTHORIZED", status_code=401)


class Redirect(OnetimeError):
    """Quietly send the client somewhere else instead of completing the action."""

    def __init__(self, location: str, status_code: int = 303):
        super().__init__(
            f"Redirect to {location}", "REDIRECT", status_code=status_code, context={"location": location}
        )
        self.location = location


class LimitExceeded(OnetimeError):
    """
    An identifier went over the configured limit for an event.

    The counter has already been incremented when this is raised; callers
    must abort the current use case.
    """

    def __init__(self, event: str, identifier: str, count: int, limit: int | None = None):
        super().__init__(
            "Too many attempts. Please wait and try again.",
            "RATE_LIMITED",
            status_code=429,
            context={"event": event, "count": count, "limit": limit},
        )
        self.event = event
        self.identifier = identifier
        self.count = count
        self.limit = limit
        self.retry_after: int | None = None

    def __str__(self) -> str:
        return f"[{self.event}] {self.identifier} ({self.count})"


class RateLimitStoreError(OnetimeError):
    """The counter store could not be reached or returned an error."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message, "RATE_LIMIT_UNAVAILABLE", status_code=503, context=context)
