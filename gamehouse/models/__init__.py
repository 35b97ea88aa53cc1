"""
Data models for the game house back office
"""

from .catalog import PricingMode, ServiceCreate, ServiceUpdate, CategoryCreate, CategoryUpdate
from .customer import CustomerCreate, CustomerUpdate, Pagination
from .operator import OperatorRole, OperatorCreate, OperatorUpdate
from .session import SessionStatus, ServiceStatus, SessionCreate, SessionUpdate

__all__ = [
    "PricingMode",
    "ServiceCreate",
    "ServiceUpdate",
    "CategoryCreate",
    "CategoryUpdate",
    "CustomerCreate",
    "CustomerUpdate",
    "Pagination",
    "OperatorRole",
    "OperatorCreate",
    "OperatorUpdate",
    "SessionStatus",
    "ServiceStatus",
    "SessionCreate",
    "SessionUpdate",
]
