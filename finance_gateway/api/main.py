"""FastAPI application factory"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from finance_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from finance_gateway.api.v1 import budgets, cards, categories, invoices, reports, transactions
from finance_gateway.infrastructure.database.models import Base
from finance_gateway.infrastructure.database.session import engine
from finance_gateway.infrastructure.observability.logging import setup_logging
from finance_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def init_db() -> None:
    """Create tables that do not exist yet"""
    Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        lifespan=lifespan,
        title="Finance Gateway",
        description="Personal finance tracker: credit card billing cycles, installments and invoices",
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
    app.include_router(cards.router, prefix="/v1", tags=["cards"])
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(invoices.router, prefix="/v1", tags=["invoices"])
    app.include_router(categories.router, prefix="/v1", tags=["categories"])
    app.include_router(budgets.router, prefix="/v1", tags=["budgets"])
    app.include_router(reports.router, prefix="/v1", tags=["reports"])

    return app


app = create_app()
