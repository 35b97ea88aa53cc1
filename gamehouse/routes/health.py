"""
Health check routes
"""

from fastapi import APIRouter, HTTPException, Request
import structlog

from gamehouse.config import get_settings
from gamehouse.utils.database import utcnow

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check():
    """Service health check"""
    settings = get_settings()
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "timestamp": utcnow().isoformat()
    }


@router.get("/health/database")
async def database_health_check(request: Request):
    """Database connection health check"""
    try:
        db = request.app.state.db
        await db.ping()
        return {
            "status": "healthy",
            "database": "connected",
            "collections": await db.get_stats()
        }
    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        raise HTTPException(status_code=503, detail="Database connection failed")
