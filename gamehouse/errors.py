"""
Error taxonomy

Services raise these; the exception handlers in gamehouse.main render them
as JSON with the matching status code.
"""

from typing import Any, Dict, Optional

from gamehouse.messages import translate


class GameHouseError(Exception):
    """Base error with an HTTP status and a localized message key"""

    status_code = 500
    default_key = "internal_error"

    def __init__(self, key: Optional[str] = None, details: Optional[Dict[str, Any]] = None, **params):
        self.key = key or self.default_key
        self.params = params
        self.details = details
        super().__init__(self.key)

    @property
    def message(self) -> str:
        return translate(self.key, **self.params)


class ValidationFailed(GameHouseError):
    status_code = 400
    default_key = "validation_failed"


class Conflict(GameHouseError):
    status_code = 400
    default_key = "conflict"


class InvalidState(GameHouseError):
    status_code = 400
    default_key = "invalid_state"


class ExternalServiceError(GameHouseError):
    status_code = 400
    default_key = "telegram_failed"


class Unauthorized(GameHouseError):
    status_code = 401
    default_key = "unauthorized"


class Forbidden(GameHouseError):
    status_code = 403
    default_key = "forbidden"


class NotFound(GameHouseError):
    status_code = 404
    default_key = "not_found"
