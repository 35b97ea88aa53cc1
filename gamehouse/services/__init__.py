"""
Business logic services for the game house back office
"""

from .activity_log_service import ActivityLogService
from .auth_service import AuthService
from .backup_service import BackupService
from .catalog_service import CatalogService
from .customer_service import CustomerService
from .operator_service import OperatorService
from .report_service import ReportService
from .session_service import SessionService
from .settings_service import SettingsService

__all__ = [
    "ActivityLogService",
    "AuthService",
    "BackupService",
    "CatalogService",
    "CustomerService",
    "OperatorService",
    "ReportService",
    "SessionService",
    "SettingsService",
]
