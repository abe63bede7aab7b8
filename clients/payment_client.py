"""
Payment provider client for the Elenpay / BTCPay-compatible Greenfield API.

Thin authenticated wrapper: attaches the store token and JSON headers on
every call. Never retries. Callers own retry policy.
"""

import json
import logging
from typing import Any
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)


class PaymentProviderError(Exception):
    """Raised when a payment provider request fails."""

    def __init__(self, message: str, status_code: int | None = None, details: Any = None):
        self.status_code = status_code
        self.details = details if details is not None else message
        super().__init__(message)


class PaymentProviderClient:
    """Call the provider's store-scoped invoice endpoints."""

    AUTH_SCHEMES = ("Token", "Bearer")

    def __init__(
        self,
        base_url: str,
        api_token: str,
        store_id: str,
        auth_scheme: str = "Token",
        timeout_seconds: float = 10,
    ):
        """
        Initialize with provider credentials.

        Args:
            base_url: Provider API root, e.g. https://api.staging.elenpay.tech
            api_token: Store API token for the Authorization header
            store_id: Store the invoices belong to
            auth_scheme: "Token" or "Bearer", depending on deployment
            timeout_seconds: Per-request timeout

        Raises:
            ValueError: If any credential is empty or the scheme is unknown
        """
        if not base_url:
            raise ValueError("base_url is required")
        if not api_token:
            raise ValueError("api_token is required")
        if not store_id:
            raise ValueError("store_id is required")
        if auth_scheme not in self.AUTH_SCHEMES:
            raise ValueError(
                f"auth_scheme must be one of {', '.join(self.AUTH_SCHEMES)}, got '{auth_scheme}'"
            )

        self.base_url = base_url.rstrip("/")
        self.store_id = store_id
        self.timeout_seconds = timeout_seconds

        self._session = requests.Session()
        self._session.headers.update({
            "Authorization": f"{auth_scheme} {api_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

    def request(self, endpoint: str, method: str = "GET", body: dict | None = None) -> Any:
        """
        Send one request and return the decoded JSON body.

        Args:
            endpoint: Path starting with '/', appended to base_url
            method: HTTP method
            body: Optional dict sent as JSON

        Raises:
            PaymentProviderError: On transport failure, non-2xx status or invalid JSON
        """
        url = f"{self.base_url}{endpoint}"

        try:
            response = self._session.request(
                method,
                url,
                data=json.dumps(body) if body is not None else None,
                timeout=self.timeout_seconds,
            )
        except (requests.exceptions.RequestException, ConnectionError) as e:
            logger.error(f"Payment provider connection failed: {method} {endpoint}: {e}")
            raise PaymentProviderError(f"Connection failed: {e}")

        if not response.ok:
            details = _error_details(response)
            logger.error(
                f"Payment provider error: {method} {endpoint} -> {response.status_code}: {details}"
            )
            raise PaymentProviderError(
                f"Provider returned {response.status_code}",
                status_code=response.status_code,
                details=details,
            )

        try:
            return response.json()
        except ValueError:
            logger.error(f"Payment provider returned invalid JSON: {response.text}")
            raise PaymentProviderError(
                "Invalid response from provider",
                status_code=response.status_code,
            )

    def _invoices_path(self) -> str:
        return f"/api/v1/stores/{self.store_id}/invoices"

    def _invoice_path(self, invoice_id: str) -> str:
        # Caller-supplied ids must stay one path segment
        return f"{self._invoices_path()}/{quote(invoice_id, safe='')}"

    def create_invoice(self, payload: dict) -> dict:
        """Create an invoice. Returns the provider's invoice record."""
        return self.request(self._invoices_path(), "POST", payload)

    def get_invoice(self, invoice_id: str) -> dict:
        """Fetch a single invoice record."""
        return self.request(self._invoice_path(invoice_id))

    def get_payment_methods(self, invoice_id: str) -> list:
        """
        Fetch the payment method entries of an invoice.

        The provider fills these in asynchronously, so an empty list
        right after creation is normal.
        """
        return self.request(f"{self._invoice_path(invoice_id)}/payment-methods") or []

    def close(self) -> None:
        """Release pooled connections."""
        self._session.close()


def _error_details(response: requests.Response) -> Any:
    """Pull the most useful error detail out of a failed response."""
    try:
        data = response.json()
    except ValueError:
        return response.text or response.reason
    if isinstance(data, dict) and data.get("message"):
        return data["message"]
    return data
