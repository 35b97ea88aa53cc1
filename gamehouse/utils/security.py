"""
Security utilities
Password hashing, JWT credentials and random tokens
"""

import asyncio
import secrets
from datetime import timedelta
from typing import Any, Dict, Optional

import bcrypt
import jwt
import structlog

from gamehouse.config import get_settings
from gamehouse.utils.database import utcnow

logger = structlog.get_logger(__name__)


def _sync_hash_password(password: str) -> str:
    """Synchronous bcrypt hash (CPU-bound)"""
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def _sync_verify_password(password: str, hashed_password: str) -> bool:
    """Synchronous bcrypt verify (CPU-bound)"""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), hashed_password.encode('utf-8'))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


async def hash_password(password: str) -> str:
    """Hash password using bcrypt in thread pool to avoid blocking"""
    return await asyncio.to_thread(_sync_hash_password, password)


async def verify_password(password: str, hashed_password: str) -> bool:
    """Verify password against hash in thread pool to avoid blocking"""
    return await asyncio.to_thread(_sync_verify_password, password, hashed_password)


def generate_token(length: int = 32) -> str:
    """Generate secure random token (login sessions, password resets)"""
    return secrets.token_urlsafe(length)


def create_access_token(operator_id: str, username: str, role: str) -> str:
    """
    Issue a signed credential for an operator

    Args:
        operator_id: Operator id
        username: Operator username
        role: 'admin' or 'operator'

    Returns:
        JWT string valid for the configured number of days
    """
    settings = get_settings()
    now = utcnow()
    payload = {
        "operator_id": operator_id,
        "username": username,
        "role": role,
        "iat": now,
        "exp": now + timedelta(days=settings.jwt_expire_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Verify and decode JWT token

    Returns:
        Decoded payload or None if invalid or expired
    """
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        logger.warning("Token has expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token", error=str(e))
        return None
