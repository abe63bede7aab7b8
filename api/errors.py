"""Global exception handlers for FastAPI."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from api.base import error_response, ErrorMessages
from clients.payment_client import PaymentProviderError
from core.exceptions import ConfigurationError, InvoiceCreationError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(request: Request, exc: ConfigurationError):
        logger.error(str(exc))
        return JSONResponse(
            status_code=503,
            content=error_response(ErrorMessages.NOT_CONFIGURED, exc.missing),
        )

    @app.exception_handler(InvoiceCreationError)
    async def invoice_creation_error_handler(request: Request, exc: InvoiceCreationError):
        logger.error(f"Error creating invoice: {exc.details}")
        return JSONResponse(
            status_code=500,
            content=error_response(ErrorMessages.INVOICE_CREATION_FAILED, exc.details),
        )

    @app.exception_handler(PaymentProviderError)
    async def provider_error_handler(request: Request, exc: PaymentProviderError):
        return JSONResponse(
            status_code=500,
            content=error_response(ErrorMessages.PROVIDER_ERROR, exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = [
            {
                "field": ".".join(str(part) for part in error["loc"] if part != "body"),
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=422,
            content=error_response(ErrorMessages.VALIDATION_ERROR, details),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return JSONResponse(
            status_code=500,
            content=error_response(ErrorMessages.INTERNAL_ERROR),
        )
