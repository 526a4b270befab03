"""
Custom exception classes for the application.

Every error renders to the same JSON envelope used by successful
responses, with success set to False.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "WEBHOOK_TIMEOUT")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "success": False,
            "error": self.code,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Request validation failed (400)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=400,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# WEBHOOK ERRORS
# ===================

class WebhookNotConfiguredError(ExternalServiceError):
    """Webhook URL missing from settings."""

    def __init__(self, setting_name: str):
        super().__init__(
            service="webhook",
            message="Webhook URL is not configured",
            details={"setting": setting_name}
        )
        self.code = "WEBHOOK_NOT_CONFIGURED"


class WebhookTimeoutError(AppError):
    """Webhook did not answer before the timeout (504)."""

    def __init__(self, url: str, timeout: float):
        super().__init__(
            code="WEBHOOK_TIMEOUT",
            message="Timeout al conectar con el servidor. Intenta nuevamente.",
            status_code=504,
            details={"url": url, "timeout_seconds": timeout}
        )


class WebhookError(AppError):
    """Webhook answered with a non-2xx status."""

    def __init__(self, upstream_status: int, body: str):
        super().__init__(
            code="WEBHOOK_ERROR",
            message="Error al procesar en webhook",
            status_code=upstream_status,
            details={"status": upstream_status, "body": body}
        )
        self.upstream_status = upstream_status
        self.body = body


# ===================
# RECONCILIATION ERRORS
# ===================

class ComboNotFoundError(NotFoundError):
    """Combo not found in the mapping store."""

    def __init__(self, combo_id: str):
        super().__init__(
            resource="Combo",
            identifier=combo_id,
            code="COMBO_NOT_FOUND"
        )


class InvalidComboError(ValidationError):
    """Combo definition rejected before saving."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="INVALID_COMBO",
            message=message,
            details=details
        )
