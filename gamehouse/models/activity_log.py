"""
Activity log data models
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class LogAction(str, Enum):
    """Audited actions"""
    LOGIN = "login"
    LOGOUT = "logout"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    VIEW = "view"
    START_SESSION = "start_session"
    END_SESSION = "end_session"
    CANCEL_SESSION = "cancel_session"
    PAUSE_SESSION = "pause_session"
    RESUME_SESSION = "resume_session"
    ADD_SERVICE = "add_service"
    EDIT_SERVICE = "edit_service"
    REMOVE_SERVICE = "remove_service"


class LogResource(str, Enum):
    """Audited resources"""
    AUTH = "auth"
    CUSTOMER = "customer"
    SERVICE = "service"
    SESSION = "session"
    CATEGORY = "category"
    OPERATOR = "operator"
    SETTINGS = "settings"
    BACKUP = "backup"


class LogStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ActivityLogQuery(BaseModel):
    """Filters for the admin activity log listing"""
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=200)
    search: Optional[str] = None
    action: Optional[str] = None
    resource: Optional[str] = None
    operator: Optional[str] = Field(None, description="Operator username")
    status: Optional[LogStatus] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    sort_by: str = Field(default="timestamp")
    sort_order: SortOrder = Field(default=SortOrder.DESC)
