"""FastAPI application factory"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from woyu_finance.api.errors import register_exception_handlers
from woyu_finance.api.middleware import RequestIDMiddleware, MetricsMiddleware
from woyu_finance.api.v1 import (
    batch_import,
    budget,
    household,
    loans,
    notifications,
    payment_items,
    payment_records,
    projects,
)
from woyu_finance.config import settings
from woyu_finance.infrastructure.database.session import SessionLocal, init_db
from woyu_finance.infrastructure.observability.logging import setup_logging
from woyu_finance.infrastructure.scheduler import ReminderScheduler

# Setup structured logging
setup_logging(settings.log_level)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    os.makedirs(os.path.join(settings.upload_dir, "receipts"), exist_ok=True)

    scheduler = None
    if settings.scheduler_enabled:
        scheduler = ReminderScheduler(SessionLocal, interval_minutes=settings.reminder_interval_minutes)
        scheduler.start()
    app.state.scheduler = scheduler

    yield

    if scheduler is not None:
        scheduler.stop()
    logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Woyu Finance",
        description="Payment tracking, loans, budgets and household ledger",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # Receipt images
    app.mount("/uploads", StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(projects.router, prefix="/api", tags=["projects"])
    app.include_router(payment_items.router, prefix="/api/payment", tags=["payment items"])
    app.include_router(payment_records.router, prefix="/api/payment", tags=["payment records"])
    app.include_router(batch_import.router, prefix="/api/payment", tags=["batch import"])
    app.include_router(notifications.router, prefix="/api", tags=["notifications"])
    app.include_router(loans.router, prefix="/api/loan-investment", tags=["loans"])
    app.include_router(budget.router, prefix="/api/budget", tags=["budget"])
    app.include_router(household.router, prefix="/api/household", tags=["household"])

    return app


app = create_app()
