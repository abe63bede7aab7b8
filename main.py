"""Bitcoin checkout bridge: application assembly and entry point."""

import logging
import time
from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI

from api.errors import register_error_handlers
from api.health import create_health_router
from api.invoices import create_invoices_router
from api.middleware import RequestIDMiddleware
from api.webhooks import create_webhooks_router
from clients.payment_client import PaymentProviderClient
from core.config import CheckoutConfig, load_config
from core.event_bus import EventBus
from core.events import InvoiceCreated, WebhookInvoiceEvent
from core.handlers.invoice_handlers import handle_invoice_created, log_invoice_event
from core.services.invoice_service import InvoiceService
from core.services.status_service import CachedStatusReconciler, LiveStatusReconciler
from core.services.webhook_service import WebhookService
from core.status_store import InMemoryStatusStore, StatusStore, ValkeyStatusStore
from utils.request_context import RequestIDLogFilter

logger = logging.getLogger("app")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"


def configure_logging(level: int = logging.INFO) -> None:
    """Root logging with the request ID on every line."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    for handler in logging.getLogger().handlers:
        handler.addFilter(RequestIDLogFilter())


def build_services(
    config: CheckoutConfig,
    store: StatusStore | None = None,
    event_bus: EventBus | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> dict:
    """
    Wire clients, reconciler and services from config.

    Services that need provider credentials are None when those are
    missing; routes turn that into a 503.
    """
    event_bus = event_bus or EventBus()

    client = None
    if not config.missing_provider_settings():
        client = PaymentProviderClient(
            base_url=config.api_url,
            api_token=config.api_token,
            store_id=config.store_id,
            auth_scheme=config.auth_scheme,
            timeout_seconds=config.request_timeout_seconds,
        )

    live = LiveStatusReconciler(client) if client else None

    if config.status_mode == "live":
        reconciler = live
    else:
        if store is None:
            if config.valkey_url:
                store = ValkeyStatusStore(config.valkey_url, expire_seconds=config.status_ttl_seconds)
            else:
                store = InMemoryStatusStore()
        reconciler = CachedStatusReconciler(store, live=live)

    if reconciler is not None:
        event_bus.subscribe(InvoiceCreated, handle_invoice_created(reconciler))
    event_bus.subscribe(WebhookInvoiceEvent, log_invoice_event)

    return {
        "client": client,
        "store": store,
        "event_bus": event_bus,
        "invoice": InvoiceService(client, config, event_bus, sleep=sleep) if client else None,
        "status": reconciler,
        "webhook": WebhookService(reconciler, event_bus) if reconciler else None,
    }


def create_app(config: CheckoutConfig | None = None, services: dict | None = None) -> FastAPI:
    """FastAPI app with request IDs, error handlers, and the checkout routes."""
    config = config or load_config()
    services = services if services is not None else build_services(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Payment provider API: {config.api_url} (status mode: {config.status_mode})")
        yield
        if services.get("client") is not None:
            services["client"].close()
        if isinstance(services.get("store"), ValkeyStatusStore):
            services["store"].close()

    app = FastAPI(title="Bitcoin Checkout Bridge", version="0.1.0", lifespan=lifespan)
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    app.include_router(create_invoices_router(services, config), prefix="/api")
    app.include_router(create_webhooks_router(services, config), prefix="/api")
    app.include_router(create_health_router(config), prefix="/api")

    return app


def main() -> None:
    import uvicorn

    configure_logging()
    config = load_config()
    uvicorn.run(create_app(config), host="0.0.0.0", port=config.port)


if __name__ == "__main__":
    main()
