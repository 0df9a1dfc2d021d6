"""
FastAPI Application Entry Point

Main application module that configures and starts the FastAPI server.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from payment_service.config import settings
from payment_service.api.routes import health, payments
from payment_service.core.exceptions import PaymentServiceError
from payment_service.core.store.gateway import StoreGateway
from payment_service.db.session import (
    close_db,
    create_engine,
    create_session_factory,
    init_db,
    wait_for_db,
)
from payment_service.monitoring.logging import RequestLoggingMiddleware, get_logger, setup_logging
from payment_service.monitoring.metrics import initialize_metrics

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown events."""
    # Startup
    setup_logging()
    initialize_metrics(settings.app_name, settings.app_version)

    engine = create_engine(settings)
    await wait_for_db(
        engine,
        retries=settings.database_connect_retries,
        delay=settings.database_connect_retry_delay,
    )
    await init_db(engine, settings)

    app.state.engine = engine
    app.state.store_gateway = StoreGateway(create_session_factory(engine))
    logger.info("payment_service_started", port=settings.port)

    yield

    # Shutdown
    await close_db(engine)


async def payment_error_handler(request: Request, exc: PaymentServiceError) -> JSONResponse:
    """Render service errors as ``{"error": message}``."""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"error": "invalid request body", "details": jsonable_encoder(exc.errors())},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Idempotent payment charging service",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(PaymentServiceError, payment_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Mount Prometheus metrics
    if settings.prometheus_enabled:
        metrics_app = make_asgi_app()
        app.mount("/metrics", metrics_app)

    # Include routers
    app.include_router(health.router, tags=["Health"])
    app.include_router(
        payments.router,
        prefix=f"{settings.api_v1_prefix}/payments",
        tags=["Payments"],
    )

    return app


# Application instance
app = create_app()


def run() -> None:
    """Run the service with uvicorn."""
    uvicorn.run(
        "payment_service.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
