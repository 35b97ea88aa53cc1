"""
Authentication Routes
Operator login, logout, credential verification and password reset
"""

from fastapi import APIRouter, BackgroundTasks, HTTPException, Query, Request, Response, status
import structlog

from gamehouse.config import get_settings
from gamehouse.errors import GameHouseError, Unauthorized
from gamehouse.messages import translate
from gamehouse.models.activity_log import LogAction, LogResource, LogStatus
from gamehouse.models.operator import ForgotPasswordRequest, LoginRequest, ResetPasswordRequest
from gamehouse.services.activity_log_service import ActivityLogService
from gamehouse.services.auth_service import AuthService
from gamehouse.utils.dependencies import DatabaseDep, get_client_ip, get_token, get_user_agent

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/login", response_model=dict)
async def login(login_data: LoginRequest, request: Request, response: Response, db: DatabaseDep):
    """
    Operator login

    Returns the credential and also sets it as an HTTP-only cookie
    """
    settings = get_settings()
    ip_address = get_client_ip(request)
    user_agent = get_user_agent(request)
    try:
        result = await AuthService(db).login(
            login_data.username,
            login_data.password,
            ip_address=ip_address,
            user_agent=user_agent
        )

        response.set_cookie(
            key=settings.auth_cookie_name,
            value=result["token"],
            max_age=settings.login_session_hours * 3600,
            httponly=True,
            secure=settings.cookie_secure,
            samesite="lax",
            path="/"
        )

        operator = result["operator"]
        await ActivityLogService(db).log_activity(
            operator["id"], operator["username"],
            LogAction.LOGIN.value, LogResource.AUTH.value,
            details={"role": operator.get("role")},
            ip_address=ip_address,
            user_agent=user_agent
        )

        return {
            "success": True,
            "message": translate("login_success"),
            "token": result["token"],
            "operator": operator
        }

    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Login error", username=login_data.username, error=str(e), exc_info=True)
        await ActivityLogService(db).log_activity(
            None, login_data.username,
            LogAction.LOGIN.value, LogResource.AUTH.value,
            details={"error": "unexpected failure"},
            ip_address=ip_address,
            user_agent=user_agent,
            status=LogStatus.FAILED.value
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=translate("login_failed")
        )


@router.get("/verify", response_model=dict)
async def verify(request: Request, db: DatabaseDep):
    """Check the current credential and return its operator"""
    operator = await AuthService(db).verify(get_token(request))
    return {"success": True, "operator": operator}


@router.post("/logout", response_model=dict)
async def logout(request: Request, response: Response, db: DatabaseDep):
    """Revoke the login session and clear the cookie"""
    settings = get_settings()
    token = get_token(request)
    auth = AuthService(db)
    try:
        operator = await auth.verify(token)
    except Unauthorized:
        operator = None

    await auth.logout(token)
    response.delete_cookie(settings.auth_cookie_name, path="/")

    if operator:
        await ActivityLogService(db).log_activity(
            operator["id"], operator["username"],
            LogAction.LOGOUT.value, LogResource.AUTH.value,
            ip_address=get_client_ip(request),
            user_agent=get_user_agent(request)
        )

    return {"success": True, "message": translate("logout_success")}


@router.post("/forgot-password", response_model=dict)
async def forgot_password(data: ForgotPasswordRequest, background_tasks: BackgroundTasks, db: DatabaseDep):
    """
    Request a password reset link

    The response is the same whether or not the email is registered
    """
    try:
        await AuthService(db).forgot_password(data.email, background_tasks=background_tasks)
        return {"success": True, "message": translate("reset_link_sent")}
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Forgot password error", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@router.get("/reset-password", response_model=dict)
async def check_reset_token(db: DatabaseDep, token: str = Query("", description="Reset token")):
    """Check whether a reset token is still valid"""
    return await AuthService(db).check_reset_token(token)


@router.post("/reset-password", response_model=dict)
async def reset_password(data: ResetPasswordRequest, db: DatabaseDep):
    """Set a new password with a reset token"""
    try:
        await AuthService(db).reset_password(data.token, data.password)
        return {"success": True, "message": translate("password_reset_success")}
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Reset password error", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))
