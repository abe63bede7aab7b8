"""Typed exceptions for checkout failures."""

from typing import Any


class CheckoutError(Exception):
    """Base class for checkout errors."""


class ConfigurationError(CheckoutError):
    """
    Required provider settings are missing.

    Non-fatal at startup (health reports configured=false), fatal to any
    call that needs the missing setting.
    """

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Payment provider not configured. Missing: {', '.join(missing)}")


class InvoiceCreationError(CheckoutError):
    """The provider rejected or failed the invoice-create call. Never retried."""

    def __init__(self, message: str, details: Any = None):
        self.details = details
        super().__init__(message)
