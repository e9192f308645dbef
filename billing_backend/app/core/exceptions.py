"""
Domain exceptions for the billing backend.

Every error raised by the service layer derives from BillingError and carries
a machine-readable code. The API layer maps each family to an HTTP status.
"""

from typing import Any


class BillingError(Exception):
    """Base exception for all billing errors."""

    def __init__(self, message: str, code: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"detail": self.message, "error_code": self.code}


class ValidationError(BillingError):
    """Input rejected before it reaches the store."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, code="VALIDATION_ERROR", details={"field": field} if field else None)


class NotFoundError(BillingError):
    def __init__(self, entity: str, entity_id: Any = None):
        super().__init__(f"{entity} not found", code=f"{entity.upper()}_NOT_FOUND", details={"id": entity_id})


class InvalidStateTransition(BillingError):
    def __init__(self, message: str):
        super().__init__(message, code="INVALID_STATE_TRANSITION")


class ConflictError(BillingError):
    """Raised when an update carries a stale version."""

    def __init__(self, message: str = "Record was modified by another session"):
        super().__init__(message, code="CONFLICT")


class ConfigurationError(BillingError):
    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(message, code="CONFIGURATION_ERROR", details={"missing": missing or []})


class TransportError(BillingError):
    """An external service (store, email, storage) was unreachable or refused the call."""

    def __init__(self, message: str, code: str = "TRANSPORT_ERROR"):
        super().__init__(message, code=code)


class EmailAuthError(TransportError):
    def __init__(self, message: str = "Email authentication failed. Please check your email credentials."):
        super().__init__(message, code="EMAIL_AUTH_FAILED")


class EmailTimeoutError(TransportError):
    def __init__(self, message: str = "Email connection timed out. Please check your SMTP settings and try again."):
        super().__init__(message, code="EMAIL_TIMEOUT")


class EmailConnectionRefusedError(TransportError):
    def __init__(self, message: str = "Email connection refused. Please check your SMTP host and port settings."):
        super().__init__(message, code="EMAIL_CONNECTION_REFUSED")


class EmailSocketError(TransportError):
    def __init__(self, message: str = "Email socket error. Please check your SMTP configuration."):
        super().__init__(message, code="EMAIL_SOCKET_ERROR")
