"""Error body format and shared route helpers."""

from typing import Any

from pydantic import BaseModel, Field

from core.exceptions import ConfigurationError


class APIError(BaseModel):
    """Error body returned by every failing endpoint."""

    error: str = Field(..., description="Human-readable error message")
    details: Any | None = Field(None, description="Upstream or validation detail, when available")


def error_response(error: str, details: Any = None) -> dict:
    """Create an error body."""
    return APIError(error=error, details=details).model_dump(mode="json", exclude_none=True)


def require_service(services: dict, name: str, missing: list[str]):
    """
    Look up a service that only exists when the provider is configured.

    Raises:
        ConfigurationError: If the service could not be built
    """
    service = services.get(name)
    if service is None:
        raise ConfigurationError(missing)
    return service


class ErrorMessages:
    """Standard error messages, one per failure the HTTP surface reports."""

    # Provider
    INVOICE_CREATION_FAILED = "Failed to create invoice"
    STATUS_CHECK_FAILED = "Failed to check status"
    PROVIDER_ERROR = "Payment provider request failed"
    NOT_CONFIGURED = "Payment provider not configured"

    # Webhooks
    MISSING_SIGNATURE = "Missing signature"
    INVALID_SIGNATURE = "Invalid signature"
    WEBHOOK_FAILED = "Webhook processing failed"

    # Requests
    VALIDATION_ERROR = "Invalid request"
    IDENTIFIER_REQUIRED = "Invoice ID or order ID required"

    # Infrastructure
    INTERNAL_ERROR = "An internal error occurred"
