"""
API routes for the game house back office
"""

from . import activity_logs, auth, backup, catalog, customers, health, operators, reports, sessions, settings

__all__ = [
    "activity_logs",
    "auth",
    "backup",
    "catalog",
    "customers",
    "health",
    "operators",
    "reports",
    "sessions",
    "settings",
]
