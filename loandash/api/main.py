"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from loandash.api.middleware import RequestIDMiddleware, MetricsMiddleware
from loandash.api.v1 import data, obligations, summary, version
from loandash.infrastructure.observability.logging import setup_logging
from loandash.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="LoanDash",
        description="Personal debt and loan tracker with automatic payment scheduling",
        version=settings.app_version,
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
    app.include_router(data.router, prefix="/api", tags=["data"])
    app.include_router(summary.router, prefix="/api", tags=["summary"])
    app.include_router(version.router, prefix="/api", tags=["version"])
    app.include_router(obligations.router, prefix="/api", tags=["obligations"])

    return app


app = create_app()
