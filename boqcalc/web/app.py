"""FastAPI application for the BOQCalc API."""

from __future__ import annotations

from contextlib import asynccontextmanager
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from boqcalc.config import get_config
from boqcalc.core.logging import configure_logging
from boqcalc.db.connection import close_db
from boqcalc.web.errors import register_error_handlers
from boqcalc.web.routes import boq, health, projects, quotations, suppliers

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(get_config())
    yield
    await close_db()


app = FastAPI(
    title="BOQCalc API",
    description="Bill of quantities and quotation workflow for project procurement",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


# Request Logging Middleware
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        structlog.contextvars.clear_contextvars()

        request_id = request.headers.get("X-Request-ID", str(uuid4()))
        structlog.contextvars.bind_contextvars(request_id=request_id)

        logger.info(
            "request_started",
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)

            logger.info(
                "request_completed",
                status_code=response.status_code,
            )
            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as exc:
            logger.error("request_failed", error=str(exc))
            raise


app.add_middleware(RequestLoggingMiddleware)
register_error_handlers(app)

# Include Routers
app.include_router(health.router)
app.include_router(projects.router)
app.include_router(boq.router)
app.include_router(quotations.router)
app.include_router(suppliers.router)
