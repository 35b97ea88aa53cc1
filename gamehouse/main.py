"""
Game House Back Office - Main Application
Operators, customers, service catalog, session billing, activity log and backups
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from gamehouse.config import get_settings
from gamehouse.errors import GameHouseError
from gamehouse.messages import translate
from gamehouse.routes import (
    activity_logs, auth, backup, catalog, customers, health, operators, reports, sessions, settings as settings_routes
)
from gamehouse.utils.activity_middleware import log_activity_middleware
from gamehouse.utils.database import GameHouseDatabase
from gamehouse.utils.logger import setup_logging
from gamehouse.utils.telegram_client import telegram_client

settings = get_settings()

setup_logging(
    log_level=settings.log_level,
    log_format=settings.log_format,
    config_path=settings.logging_config_path
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events"""
    logger.info("Starting Game House Back Office", version=settings.app_version)

    try:
        db = GameHouseDatabase()
        await db.initialize()
        app.state.db = db
        logger.info("Database connection initialized")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    await telegram_client.start()

    yield

    await telegram_client.stop()
    if hasattr(app.state, 'db'):
        await app.state.db.close()
        logger.info("Database connection closed")

    logger.info("Game House Back Office shutdown complete")


app = FastAPI(
    title=settings.app_name,
    description="Back office for a gaming house: customers, services, billed sessions and audit trail",
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Registered before log_requests so it runs inside it
app.middleware("http")(log_activity_middleware)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests"""
    start = time.perf_counter()
    logger.info(
        "Request received",
        method=request.method,
        url=str(request.url),
        client_ip=request.client.host if request.client else "unknown"
    )

    response = await call_next(request)

    logger.info(
        "Request completed",
        method=request.method,
        url=str(request.url),
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - start) * 1000, 1)
    )

    return response


@app.exception_handler(GameHouseError)
async def gamehouse_exception_handler(request: Request, exc: GameHouseError):
    """Render domain errors with their status code and localized message"""
    if exc.status_code >= 500:
        logger.error("Request failed", key=exc.key, method=request.method, url=str(request.url))
    content = {
        "error": True,
        "message": exc.message,
        "status_code": exc.status_code
    }
    if exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Custom HTTP exception handler"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": True,
            "message": exc.detail,
            "status_code": exc.status_code
        },
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "error": True,
            "message": translate("validation_failed"),
            "details": jsonable_encoder(exc.errors()),
            "status_code": 400
        }
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(
        "Unhandled exception",
        error=str(exc),
        method=request.method,
        url=str(request.url),
        exc_info=True
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": True,
            "message": translate("internal_error"),
            "status_code": 500
        }
    )


# Register routes
app.include_router(health.router, tags=["Health"])
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(customers.router, prefix="/api/customers", tags=["Customers"])
app.include_router(catalog.services_router, prefix="/api/services", tags=["Services"])
app.include_router(catalog.categories_router, prefix="/api/categories", tags=["Categories"])
app.include_router(sessions.router, prefix="/api/sessions", tags=["Sessions"])
app.include_router(operators.router, prefix="/api/operators", tags=["Operators"])
app.include_router(settings_routes.router, prefix="/api/settings", tags=["Settings"])
app.include_router(settings_routes.retention_router, prefix="/api/admin/settings", tags=["Settings"])
app.include_router(activity_logs.router, prefix="/api/admin/activity-logs", tags=["Activity Logs"])
app.include_router(backup.router, prefix="/api/admin/backup", tags=["Backup"])
app.include_router(reports.router, prefix="/api/reports", tags=["Reports"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "gamehouse",
        "version": settings.app_version,
        "status": "running",
        "docs": "/docs"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "gamehouse.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
