"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from miles_ledger.api.middleware import RequestIDMiddleware, MetricsMiddleware
from miles_ledger.api.v1 import catalog, positions, quotes, schedules, transactions
from miles_ledger.infrastructure.observability.logging import setup_logging
from miles_ledger.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Miles Ledger",
        description="Miles inventory, installment schedules and cost-per-thousand service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(catalog.router, prefix="/v1", tags=["catalog"])
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(schedules.router, prefix="/v1", tags=["schedules"])
    app.include_router(positions.router, prefix="/v1", tags=["positions"])
    app.include_router(quotes.router, prefix="/v1", tags=["quotes"])

    return app


app = create_app()
