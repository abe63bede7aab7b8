"""POST /api/webhook: provider payment notifications."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from api.base import error_response, require_service, ErrorMessages
from core.config import CheckoutConfig
from core.exceptions import ConfigurationError
from core.webhook_verifier import verify

logger = logging.getLogger(__name__)


def create_webhooks_router(services: dict, config: CheckoutConfig) -> APIRouter:
    router = APIRouter(tags=["webhooks"])

    @router.post("/webhook")
    async def receive_webhook(request: Request):
        """
        Verify and apply one webhook delivery.

        Returns:
            - 200 {received: true}: applied (also for redeliveries)
            - 400: signature header missing
            - 401: signature doesn't match the raw body
            - 500: body couldn't be processed; the provider will retry
        """
        if not config.webhook_secret:
            raise ConfigurationError(["webhook_secret"])
        webhook_service = require_service(services, "webhook", config.missing_provider_settings())

        signature = request.headers.get(config.signature_header)
        if not signature:
            logger.warning("Webhook rejected: missing signature header")
            return JSONResponse(
                status_code=400,
                content=error_response(ErrorMessages.MISSING_SIGNATURE),
            )

        raw_body = await request.body()
        if not verify(raw_body, signature, config.webhook_secret):
            logger.warning("Webhook rejected: invalid signature")
            return JSONResponse(
                status_code=401,
                content=error_response(ErrorMessages.INVALID_SIGNATURE),
            )

        try:
            await run_in_threadpool(webhook_service.handle, raw_body)
        except Exception:
            logger.exception("Webhook processing failed")
            return JSONResponse(
                status_code=500,
                content=error_response(ErrorMessages.WEBHOOK_FAILED),
            )

        return {"received": True}

    return router
