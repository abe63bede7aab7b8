"""Invoice status vocabulary.

The provider's status names drift between API versions. Everything that
means "the money arrived" collapses to Paid; every other status passes
through unchanged.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class InvoiceStatus(str, Enum):
    """Normalized statuses this service produces itself."""

    NEW = "New"
    PAID = "Paid"
    NOT_FOUND = "Not Found"


# Lower-cased provider status -> normalized status
STATUS_MAP = {
    "settled": InvoiceStatus.PAID.value,
    "complete": InvoiceStatus.PAID.value,
    "completed": InvoiceStatus.PAID.value,
    "confirmed": InvoiceStatus.PAID.value,
    "paid": InvoiceStatus.PAID.value,
}


def normalize_status(raw: Any) -> str | None:
    """Map a provider status onto the normalized vocabulary."""
    if raw is None:
        return None
    raw = str(raw)
    return STATUS_MAP.get(raw.strip().lower(), raw)


class StatusView(BaseModel):
    """Status of one invoice as exposed to the checkout page."""

    status: str
    paid_at: Any = Field(None, alias="paidAt")
    amount: Any = None
    currency: str | None = None

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def not_found(cls) -> "StatusView":
        return cls(status=InvoiceStatus.NOT_FOUND.value)

    def to_response(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
