"""
Operator and authentication data models and schemas
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class OperatorRole(str, Enum):
    """Operator role enumeration"""
    ADMIN = "admin"
    OPERATOR = "operator"


class OperatorBase(BaseModel):
    """Base operator model with common fields"""
    username: str = Field(..., min_length=3, max_length=50, description="Unique login name")
    email: EmailStr = Field(..., description="Unique email, stored lower-case")
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    role: OperatorRole = Field(default=OperatorRole.OPERATOR)

    @field_validator('email')
    @classmethod
    def lower_email(cls, v):
        return v.lower()


class OperatorCreate(OperatorBase):
    """Schema for creating an operator"""
    password: str = Field(..., min_length=6, max_length=128)


class OperatorUpdate(BaseModel):
    """Schema for updating an operator; password is optional"""
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    role: Optional[OperatorRole] = None
    password: Optional[str] = Field(None, min_length=6, max_length=128)

    @field_validator('email')
    @classmethod
    def lower_email(cls, v):
        return v.lower() if v is not None else v


class LoginRequest(BaseModel):
    """Login schema"""
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    """Forgot password schema; email format is checked by the service"""
    email: str = ""


class ResetPasswordRequest(BaseModel):
    """Reset password schema"""
    token: str = ""
    password: str = ""
