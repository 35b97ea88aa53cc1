"""
Session data models and schemas
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class SessionStatus(str, Enum):
    """Session status enumeration"""
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class ServiceStatus(str, Enum):
    """Status of a service attached to a session"""
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class SessionServiceInput(BaseModel):
    """A service to attach, with its quantity"""
    service_id: str = Field(..., description="Catalog service id")
    quantity: int = Field(default=1, ge=1, description="Units (unit-based) or seats (time-based)")


class SessionCreate(BaseModel):
    """Schema for opening a session"""
    customer_id: str = Field(..., description="Customer id")
    notes: Optional[str] = Field(None, max_length=1000)
    services: List[SessionServiceInput] = Field(default_factory=list, description="Services attached on open")


class SessionUpdate(BaseModel):
    """Schema for updating notes or toggling active/paused"""
    notes: Optional[str] = Field(None, max_length=1000)
    status: Optional[SessionStatus] = None


class AttachServiceRequest(SessionServiceInput):
    """Schema for attaching a service to an open session"""
    pass


class EditServiceRequest(BaseModel):
    """Schema for correcting an attached service"""
    quantity: Optional[int] = Field(None, ge=1)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None


class InvoiceRequest(BaseModel):
    """Schema for posting an invoice image to a Telegram chat"""
    image_data: str = Field(..., min_length=1, description="Base64 PNG, optionally a data URL")
    bot_token: str = Field(..., min_length=1)
    chat_id: str = Field(..., min_length=1)
    customer_name: Optional[str] = None
