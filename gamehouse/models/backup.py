"""
Backup data models
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class BackupStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ERROR = "error"


class BackupCreate(BaseModel):
    """Schema for starting a backup"""
    collections: List[str] = Field(default_factory=list, description="Collection keys to export")


class BackupJob(BaseModel):
    """Persisted backup progress"""
    backup_id: str
    status: BackupStatus = BackupStatus.PENDING
    progress: int = 0
    current_collection: Optional[str] = None
    processed_records: int = 0
    total_records: int = 0
    collections: List[str] = Field(default_factory=list)
    created_by: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    error: Optional[str] = None
    download_url: Optional[str] = None


class BackupTelegramRequest(BaseModel):
    """Schema for sending a finished backup to Telegram"""
    backup_id: Optional[str] = None
    backup_url: Optional[str] = Field(None, description="Download URL containing backup_id")
    bot_token: str = Field(..., min_length=1)
    chat_id: str = Field(..., min_length=1)
