"""
FastAPI application entry point
"""

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from offerflow.infrastructure.settings import get_settings
from offerflow.infrastructure.logging_config import setup_logging
from offerflow.api.exceptions import (
    http_exception_handler,
    validation_exception_handler,
    lifecycle_exception_handler,
    general_exception_handler,
)
from offerflow.api.public.health import router as health_router
from offerflow.api.public.metrics import router as metrics_router
from offerflow.api.v1 import router as api_v1_router
from offerflow.services.lifecycle.errors import LifecycleError
from offerflow.utils.trace_id import TraceIDMiddleware
from offerflow.utils.request_logging import RequestLoggingMiddleware

settings = get_settings()

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Offerflow API",
    description="Offer lifecycle engine for investors, startups and investment advisors",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

if settings.CORS_ENABLED:
    cors_origins = settings.cors_allow_origins_list
    if not cors_origins:
        logger.warning(
            "CORS_ENABLED=True but CORS_ALLOW_ORIGINS is empty. "
            "Set CORS_ALLOW_ORIGINS (comma-separated, e.g. 'http://localhost:3000')."
        )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_methods=settings.cors_allow_methods_list or ["*"],
        allow_headers=settings.cors_allow_headers_list or ["*"],
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    )

# Last added is outermost: TraceIDMiddleware wraps RequestLoggingMiddleware
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(TraceIDMiddleware)

app.add_exception_handler(LifecycleError, lifecycle_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

app.include_router(health_router)
app.include_router(metrics_router)
app.include_router(api_v1_router)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "name": "Offerflow API",
        "version": "1.0.0",
        "status": "running",
    }
