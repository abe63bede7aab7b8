"""Invoice creation and status routes."""

import logging

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from api.base import error_response, require_service, ErrorMessages
from clients.payment_client import PaymentProviderError
from core.config import CheckoutConfig
from core.models import InvoiceRequest

logger = logging.getLogger(__name__)


def create_invoices_router(services: dict, config: CheckoutConfig) -> APIRouter:
    """
    Create invoice router with injected services.

    Handlers are plain functions so FastAPI runs them in its threadpool:
    invoice creation may block for the whole on-chain poll budget.
    """
    router = APIRouter(tags=["invoices"])

    @router.post("/create-invoice")
    def create_invoice(body: InvoiceRequest):
        invoice_service = require_service(services, "invoice", config.missing_provider_settings())
        result = invoice_service.create_invoice(body)
        return result.to_response()

    def _check_status(identifier: str):
        status_service = require_service(services, "status", config.missing_provider_settings())
        try:
            view = status_service.get_status(identifier)
        except PaymentProviderError as e:
            logger.error(f"Error checking status of {identifier}: {e.details}")
            return JSONResponse(
                status_code=500,
                content=error_response(ErrorMessages.STATUS_CHECK_FAILED, e.details),
            )
        return view.to_response()

    @router.get("/check-status/{identifier}")
    def check_status_by_path(identifier: str):
        """Status by invoice ID or order ID."""
        return _check_status(identifier)

    @router.get("/check-status")
    def check_status(
        invoice_id: str | None = Query(None, alias="invoiceId"),
        order_id: str | None = Query(None, alias="orderId"),
    ):
        """Status by ?invoiceId= or ?orderId=."""
        identifier = invoice_id or order_id
        if not identifier:
            return JSONResponse(
                status_code=400,
                content=error_response(ErrorMessages.IDENTIFIER_REQUIRED),
            )
        return _check_status(identifier)

    return router
