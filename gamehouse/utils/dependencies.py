"""
FastAPI Dependencies
Database access, operator authentication and request metadata
"""

from typing import Annotated, Optional

import structlog
from fastapi import Depends, Request

from gamehouse.config import get_settings
from gamehouse.errors import Forbidden, Unauthorized
from gamehouse.models.operator import OperatorRole
from gamehouse.services.auth_service import AuthService
from gamehouse.utils.database import GameHouseDatabase

logger = structlog.get_logger(__name__)


def get_database(request: Request) -> GameHouseDatabase:
    """Dependency to get database instance"""
    return request.app.state.db


def get_token(request: Request) -> Optional[str]:
    """Credential from the auth cookie, else from an Authorization: Bearer header"""
    token = request.cookies.get(get_settings().auth_cookie_name)
    if token:
        return token
    authorization = request.headers.get("authorization", "")
    if authorization.lower().startswith("bearer "):
        return authorization[7:].strip() or None
    return None


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


def get_user_agent(request: Request) -> Optional[str]:
    return request.headers.get("user-agent")


async def get_current_operator(
    request: Request,
    db: GameHouseDatabase = Depends(get_database)
) -> dict:
    """
    Get the authenticated operator

    The operator is also stored on request.state for the activity middleware.

    Raises:
        Unauthorized: missing, invalid or revoked credential
    """
    operator = await AuthService(db).verify(get_token(request))
    request.state.operator = operator
    return operator


async def require_admin(operator: dict = Depends(get_current_operator)) -> dict:
    """Get the authenticated operator, who must be an admin"""
    if operator.get("role") != OperatorRole.ADMIN.value:
        logger.warning("Admin route refused", operator_id=operator.get("id"))
        raise Forbidden()
    return operator


def set_activity_details(request: Request, **details):
    """Attach extra details to this request's activity log entry"""
    existing = getattr(request.state, "activity_details", None) or {}
    existing.update(details)
    request.state.activity_details = existing


def skip_activity_log(request: Request):
    """Mark a request as already logged explicitly"""
    request.state.skip_activity_log = True


# Type aliases for cleaner dependency injection
DatabaseDep = Annotated[GameHouseDatabase, Depends(get_database)]
CurrentOperator = Annotated[dict, Depends(get_current_operator)]
AdminOperator = Annotated[dict, Depends(require_admin)]
