"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from pocket_ledger.api.middleware import RequestIDMiddleware, MetricsMiddleware
from pocket_ledger.api.v1 import budgets, financial_health, ledger, loans
from pocket_ledger.infrastructure.database.models import Base
from pocket_ledger.infrastructure.database.session import engine
from pocket_ledger.infrastructure.observability.logging import setup_logging
from pocket_ledger.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Pocket Ledger",
        description="Personal loans, installments, budgets and financial health",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
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
    app.include_router(loans.router, prefix="/v1", tags=["loans"])
    app.include_router(budgets.router, prefix="/v1", tags=["budgets"])
    app.include_router(ledger.router, prefix="/v1", tags=["ledger"])
    app.include_router(financial_health.router, prefix="/v1", tags=["financial-health"])

    return app


app = create_app()
