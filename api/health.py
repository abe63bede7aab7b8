"""GET /api/health."""

from fastapi import APIRouter

from core.config import CheckoutConfig


def create_health_router(config: CheckoutConfig) -> APIRouter:
    router = APIRouter(tags=["health"])

    @router.get("/health")
    async def health():
        """Always 200. configured=false means calls needing credentials will fail."""
        return {"status": "ok", "configured": config.is_configured}

    return router
