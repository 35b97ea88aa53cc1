"""
Settings data models and schemas
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class LogRetentionOption(str, Enum):
    """Activity log retention choices"""
    ONE_MONTH = "1_month"
    THREE_MONTHS = "3_months"
    SIX_MONTHS = "6_months"
    ONE_YEAR = "1_year"
    NEVER = "never"


# Days kept per option; -1 keeps logs forever
RETENTION_DAYS = {
    LogRetentionOption.ONE_MONTH: 30,
    LogRetentionOption.THREE_MONTHS: 90,
    LogRetentionOption.SIX_MONTHS: 180,
    LogRetentionOption.ONE_YEAR: 365,
    LogRetentionOption.NEVER: -1,
}


class SettingUpsert(BaseModel):
    """Schema for creating or replacing a setting"""
    key: str = Field(..., min_length=1, max_length=100)
    value: Any = Field(..., description="Any JSON value")
    description: Optional[str] = Field(None, max_length=500)


class LogRetentionUpdate(BaseModel):
    """Schema for changing the activity log retention"""
    option: LogRetentionOption
