"""
Authentication Service
Operator login sessions, credential verification and password reset
"""

import re
from datetime import timedelta
from typing import Any, Dict, Optional

import structlog
from fastapi import BackgroundTasks
from pymongo import ReturnDocument

from gamehouse.config import get_settings
from gamehouse.errors import NotFound, Unauthorized, ValidationFailed
from gamehouse.utils.database import serialize_document, to_object_id, utcnow
from gamehouse.utils.security import (
    create_access_token,
    decode_access_token,
    generate_token,
    hash_password,
    verify_password,
)
from gamehouse.utils.smtp_client import EmailMessage, SMTPClient, SMTPError, get_smtp_client

logger = structlog.get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def public_operator(operator: Dict[str, Any]) -> Dict[str, Any]:
    """Operator document without its password hash"""
    data = serialize_document(operator)
    data.pop("password_hash", None)
    return data


class AuthService:
    """Operator authentication service"""

    def __init__(self, db, smtp: Optional[SMTPClient] = None):
        self.db = db
        self.smtp = smtp or get_smtp_client()

    async def purge_login_sessions(self) -> int:
        """Remove expired or revoked login sessions"""
        result = await self.db.user_sessions.delete_many(
            {"$or": [{"expires_at": {"$lt": utcnow()}}, {"is_active": False}]}
        )
        return result.deleted_count

    async def login(
        self,
        username: str,
        password: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Authenticate an operator and open a login session

        Returns:
            dict with the signed token, its login-session expiry and the operator

        Raises:
            Unauthorized: unknown username or wrong password
        """
        operator = await self.db.operators.find_one({"username": username})
        if operator is None or not await verify_password(password, operator.get("password_hash", "")):
            logger.warning("Login rejected", username=username)
            raise Unauthorized("invalid_credentials")

        await self.purge_login_sessions()

        settings = get_settings()
        operator_id = str(operator["_id"])
        token = create_access_token(operator_id, operator["username"], operator["role"])
        now = utcnow()
        expires_at = now + timedelta(hours=settings.login_session_hours)
        await self.db.user_sessions.insert_one({
            "token": token,
            "operator_id": operator_id,
            "user_agent": user_agent,
            "ip_address": ip_address,
            "is_active": True,
            "expires_at": expires_at,
            "created_at": now,
            "last_accessed_at": now,
        })

        logger.info("Operator logged in", operator_id=operator_id, username=username)
        return {"token": token, "expires_at": expires_at, "operator": public_operator(operator)}

    async def verify(self, token: Optional[str]) -> Dict[str, Any]:
        """
        Resolve a credential to its operator

        Checks signature and expiry, then requires an active, unexpired login
        session for the token and an existing operator.

        Raises:
            Unauthorized: any check failed
        """
        if not token:
            raise Unauthorized()
        payload = decode_access_token(token)
        if payload is None:
            raise Unauthorized()

        now = utcnow()
        login_session = await self.db.user_sessions.find_one_and_update(
            {"token": token, "is_active": True, "expires_at": {"$gt": now}},
            {"$set": {"last_accessed_at": now}}
        )
        if login_session is None:
            raise Unauthorized("session_expired")

        operator = await self.db.operators.find_one({"_id": to_object_id(payload["operator_id"])})
        if operator is None:
            raise Unauthorized()
        return public_operator(operator)

    async def logout(self, token: Optional[str]) -> bool:
        """Revoke the login session for a token"""
        if not token:
            return False
        result = await self.db.user_sessions.update_one(
            {"token": token},
            {"$set": {"is_active": False}}
        )
        return result.modified_count > 0

    async def forgot_password(self, email: str, background_tasks: Optional[BackgroundTasks] = None) -> None:
        """
        Issue a password reset token and mail the link

        Behaves identically whether or not the email belongs to an operator.
        Mail failures are logged and never surfaced. With background_tasks the
        mail goes out after the response is sent.

        Raises:
            ValidationFailed: malformed email
        """
        email = (email or "").strip().lower()
        if not email:
            raise ValidationFailed("email_required")
        if not EMAIL_PATTERN.match(email):
            raise ValidationFailed("email_invalid")

        now = utcnow()
        await self.db.password_resets.delete_many(
            {"$or": [{"expires_at": {"$lt": now}}, {"is_used": True}]}
        )

        operator = await self.db.operators.find_one({"email": email})
        if operator is None:
            logger.info("Password reset requested for unknown email")
            return

        await self.db.password_resets.update_many(
            {"email": email, "is_used": False},
            {"$set": {"is_used": True}}
        )

        settings = get_settings()
        token = generate_token(32)
        await self.db.password_resets.insert_one({
            "email": email,
            "token": token,
            "expires_at": now + timedelta(minutes=settings.password_reset_minutes),
            "is_used": False,
            "created_at": now,
        })

        name = operator.get("first_name") or operator["username"]
        if background_tasks is not None:
            background_tasks.add_task(self.send_reset_email, email, name, token)
        else:
            await self.send_reset_email(email, name, token)

    async def send_reset_email(self, email: str, name: str, token: str):
        settings = get_settings()
        reset_link = f"{settings.frontend_url.rstrip('/')}/reset-password?token={token}"
        message = EmailMessage(
            to_emails=[email],
            subject=f"{settings.app_name} - Password reset",
            text_content=(
                f"Hello {name},\n\n"
                f"Use the link below to choose a new password. "
                f"It expires in {settings.password_reset_minutes} minutes.\n\n"
                f"{reset_link}\n\n"
                "If you did not request this, you can ignore this email."
            ),
            html_content=(
                f"<p>Hello {name},</p>"
                f"<p>Use the link below to choose a new password. "
                f"It expires in {settings.password_reset_minutes} minutes.</p>"
                f'<p><a href="{reset_link}">{reset_link}</a></p>'
                "<p>If you did not request this, you can ignore this email.</p>"
            ),
        )
        try:
            await self.smtp.send_email(message)
        except SMTPError as e:
            logger.error("Failed to send password reset email", error=str(e))

    async def check_reset_token(self, token: str) -> Dict[str, Any]:
        """Report whether a reset token can still be redeemed"""
        if not token:
            raise ValidationFailed("token_required")
        reset = await self.db.password_resets.find_one(
            {"token": token, "is_used": False, "expires_at": {"$gt": utcnow()}}
        )
        if reset is None:
            raise ValidationFailed("reset_token_invalid")
        return {"valid": True, "email": reset["email"]}

    async def reset_password(self, token: str, password: str) -> None:
        """
        Redeem a reset token and set a new password

        The token is claimed atomically, so a second redemption fails.

        Raises:
            ValidationFailed: short password, or token used/expired/unknown
            NotFound: the email no longer belongs to an operator
        """
        settings = get_settings()
        if not token or not password:
            raise ValidationFailed("reset_fields_required")
        if len(password) < settings.password_min_length:
            raise ValidationFailed("password_too_short", min_length=settings.password_min_length)

        now = utcnow()
        reset = await self.db.password_resets.find_one_and_update(
            {"token": token, "is_used": False, "expires_at": {"$gt": now}},
            {"$set": {"is_used": True, "used_at": now}},
            return_document=ReturnDocument.AFTER
        )
        if reset is None:
            raise ValidationFailed("reset_token_invalid")

        operator = await self.db.operators.find_one({"email": reset["email"]})
        if operator is None:
            raise NotFound("operator_not_found")

        password_hash = await hash_password(password)
        await self.db.operators.update_one(
            {"_id": operator["_id"]},
            {"$set": {"password_hash": password_hash, "updated_at": now}}
        )
        await self.db.password_resets.update_many(
            {"email": reset["email"], "is_used": False},
            {"$set": {"is_used": True}}
        )
        # Existing logins end with the old password
        await self.db.user_sessions.update_many(
            {"operator_id": str(operator["_id"])},
            {"$set": {"is_active": False}}
        )

        logger.info("Password reset completed", operator_id=str(operator["_id"]))
