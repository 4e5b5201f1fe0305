"""
Base exception classes for the GateKeeper backend.

Each module should define its own exceptions that inherit from these bases.
Every exception carries a stable machine-readable code and an HTTP status,
so the API layer can render a consistent error envelope.
"""

from typing import Optional, Any


class GateKeeperError(Exception):
    """
    Base exception for all GateKeeper errors.

    All custom exceptions should inherit from this class.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to the API error envelope."""
        return {
            "success": False,
            "message": self.message,
            "code": self.code,
        }


class ValidationError(GateKeeperError):
    """Input validation failed."""

    status_code = 400


class NotFoundError(GateKeeperError):
    """Resource not found."""

    status_code = 404


class ConflictError(GateKeeperError):
    """Resource already exists."""

    status_code = 409


class ExpiredError(GateKeeperError):
    """A credential (OTP, session, reset token) is past its expiry."""

    status_code = 400


class AuthenticationError(GateKeeperError):
    """Authentication failed (invalid or missing credentials)."""

    status_code = 401


class AuthorizationError(GateKeeperError):
    """Authorization failed (insufficient permissions)."""

    status_code = 403


class ServerError(GateKeeperError):
    """Unexpected server-side failure."""

    status_code = 500


class ExternalServiceError(GateKeeperError):
    """Error communicating with an external service."""

    status_code = 500

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service


class DeliveryError(ExternalServiceError):
    """A downstream delivery (mail, OAuth provider) failed."""

    pass


class OperationTimeoutError(GateKeeperError):
    """A network call exceeded its time budget."""

    status_code = 504

    def __init__(self, operation: str, timeout: float):
        super().__init__(
            f"Operation timed out after {timeout:g}s: {operation}",
            code="TIMEOUT",
            details={"operation": operation, "timeout": timeout},
        )
        self.operation = operation
        self.timeout = timeout


class StoreError(ServerError):
    """The backing data store rejected or failed an operation."""

    def __init__(
        self,
        operation: str,
        message: str,
        db_code: Optional[str] = None,
    ):
        super().__init__(
            f"Store operation failed ({operation}): {message}",
            code="STORE_ERROR",
            details={"operation": operation, "db_code": db_code},
        )
        self.operation = operation
        self.db_code = db_code
