"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from discount_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from discount_gateway.api.v1 import decisions, invoices
from discount_gateway.infrastructure.observability.logging import setup_logging
from discount_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Discount Gateway",
        description="Early-payment discount decisions for vendor invoices",
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
    app.include_router(invoices.router, prefix="/v1", tags=["invoices"])
    app.include_router(decisions.router, prefix="/v1", tags=["decisions"])

    return app


app = create_app()
