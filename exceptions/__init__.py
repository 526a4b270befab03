"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ExternalServiceError,
    DatabaseError,

    # Webhooks
    WebhookNotConfiguredError,
    WebhookTimeoutError,
    WebhookError,

    # Reconciliation
    ComboNotFoundError,
    InvalidComboError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ExternalServiceError",
    "DatabaseError",

    # Webhooks
    "WebhookNotConfiguredError",
    "WebhookTimeoutError",
    "WebhookError",

    # Reconciliation
    "ComboNotFoundError",
    "InvalidComboError",
]
