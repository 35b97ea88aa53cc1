"""
Service catalog data models and schemas
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class PricingMode(str, Enum):
    """How a service is billed"""
    TIME_BASED = "time-based"
    UNIT_BASED = "unit-based"


class ServiceBase(BaseModel):
    """Base service model with common fields"""
    name: str = Field(..., min_length=1, max_length=100, description="Service display name")
    pricing_mode: PricingMode = Field(..., description="Time-based or unit-based billing")
    unit_price: float = Field(..., ge=0, description="Price per unit, or per rate period for time-based services")
    description: Optional[str] = Field(None, max_length=500, description="Free-form description")
    category: Optional[str] = Field(None, description="Category id")
    is_active: bool = Field(default=True, description="Inactive services are hidden from listings")


class ServiceCreate(ServiceBase):
    """Schema for creating a new service"""
    pass


class ServiceUpdate(BaseModel):
    """Schema for updating a service"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    pricing_mode: Optional[PricingMode] = None
    unit_price: Optional[float] = Field(None, ge=0)
    description: Optional[str] = Field(None, max_length=500)
    category: Optional[str] = None
    is_active: Optional[bool] = None


class CategoryCreate(BaseModel):
    """Schema for creating a category"""
    name: str = Field(..., min_length=1, max_length=100, description="Unique category name")
    description: Optional[str] = Field(None, max_length=500)
    is_active: bool = Field(default=True)


class CategoryUpdate(BaseModel):
    """Schema for updating a category"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    is_active: Optional[bool] = None
