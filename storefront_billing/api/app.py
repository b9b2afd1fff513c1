"""FastAPI application factory"""

import logging
import sys
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from storefront_billing.adapter.services.clock import SystemClock
from storefront_billing.adapter.services.payment_provider import create_payment_provider
from storefront_billing.api.error import register_error_handlers
from storefront_billing.api.routes import (
    checkout_router,
    credit_packs_router,
    credits_router,
    discounts_router,
    guest_quota_router,
)
from storefront_billing.app.billing_settings import BillingSettings

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        stream=sys.stdout,
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def create_app(config) -> FastAPI:
    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        from storefront_billing.depends import engine, init_models

        setup_logging(config.LOG_LEVEL)
        logger.info("Storefront billing API starting up")
        if config.DB_AUTO_CREATE:
            await init_models()
        yield
        await engine.dispose()
        logger.info("Storefront billing API shutting down")

    app = FastAPI(
        title="Storefront Billing Service",
        description="Credit ledger, guest quota, discount codes and checkout",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.settings = BillingSettings.from_config(config)
    app.state.clock = SystemClock(config.LEDGER_TIMEZONE)
    app.state.payment_provider = create_payment_provider(
        base_url=config.PAYMENT_PROVIDER_URL,
        api_token=config.PAYMENT_PROVIDER_TOKEN,
        location_id=config.PAYMENT_PROVIDER_LOCATION_ID,
        timeout=float(config.PAYMENT_PROVIDER_TIMEOUT_SECONDS),
    )

    if config.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.CORS_ORIGINS,
            allow_credentials=config.CORS_ALLOW_CREDENTIALS,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    if config.ENABLE_LOGGING_MIDDLEWARE:
        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            """Log HTTP requests, skipping OPTIONS preflight and health checks."""
            if request.method == "OPTIONS" or request.url.path == "/health":
                return await call_next(request)

            started = time.perf_counter()
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)")
            return response

    register_error_handlers(app)

    app.include_router(credits_router)
    app.include_router(guest_quota_router)
    app.include_router(discounts_router)
    app.include_router(checkout_router)
    app.include_router(credit_packs_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app
