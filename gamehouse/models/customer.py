"""
Customer data models and schemas
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class CustomerBase(BaseModel):
    """Base customer model with common fields"""
    first_name: str = Field(..., min_length=1, max_length=100, description="Customer first name")
    last_name: str = Field(..., min_length=1, max_length=100, description="Customer last name")
    phone: str = Field(..., min_length=1, max_length=32, description="Phone number, unique per customer")

    @field_validator('first_name', 'last_name', 'phone')
    @classmethod
    def strip_whitespace(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Field cannot be blank')
        return v


class CustomerCreate(CustomerBase):
    """Schema for creating a new customer"""
    pass


class CustomerUpdate(BaseModel):
    """Schema for updating customer information"""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, min_length=1, max_length=32)

    @field_validator('first_name', 'last_name', 'phone')
    @classmethod
    def strip_whitespace(cls, v):
        return v.strip() if v is not None else v


class Pagination(BaseModel):
    """Pagination block returned with paged customer lists"""
    current_page: int
    total_pages: int
    total_customers: int
    limit: int
    has_next_page: bool
    has_prev_page: bool
