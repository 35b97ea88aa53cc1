"""
Activity log service
Best-effort audit trail of operator actions plus the admin listing
"""

import math
import re
from datetime import datetime, time, timedelta
from typing import Any, Dict, Optional

import structlog
from pymongo import ASCENDING, DESCENDING

from gamehouse.config import get_settings
from gamehouse.models.activity_log import ActivityLogQuery, LogStatus, SortOrder
from gamehouse.utils.database import ensure_utc, serialize_document, utcnow

logger = structlog.get_logger(__name__)

RETENTION_SETTING_KEY = "log_retention_days"
SORTABLE_FIELDS = {"timestamp", "action", "resource", "operator_username", "status"}
SENSITIVE_FIELDS = {"password", "password_hash", "token", "bot_token", "new_password"}


def strip_sensitive(details: Any) -> Any:
    """Drop credential-like keys from a details payload"""
    if isinstance(details, dict):
        return {
            key: strip_sensitive(value)
            for key, value in details.items()
            if key not in SENSITIVE_FIELDS
        }
    if isinstance(details, list):
        return [strip_sensitive(item) for item in details]
    return details


class ActivityLogService:
    """Activity log business logic service"""

    def __init__(self, db):
        self.db = db

    async def get_retention_days(self) -> int:
        """Retention in days from the settings store; -1 keeps logs forever"""
        setting = await self.db.settings.find_one({"key": RETENTION_SETTING_KEY})
        if setting is None:
            return get_settings().log_retention_days_default
        try:
            return int(setting["value"])
        except (TypeError, ValueError):
            logger.warning("Invalid log retention setting", value=setting.get("value"))
            return get_settings().log_retention_days_default

    async def log_activity(
        self,
        operator_id: Optional[str],
        operator_username: Optional[str],
        action: str,
        resource: str,
        resource_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        status: str = LogStatus.SUCCESS.value
    ) -> Optional[str]:
        """
        Append an activity entry

        Never raises: a failed audit write is logged and the caller carries on.

        Returns:
            Inserted entry id, or None if the write failed
        """
        try:
            now = utcnow()
            retention_days = await self.get_retention_days()
            entry = {
                "operator_id": operator_id,
                "operator_username": operator_username,
                "action": action,
                "resource": resource,
                "resource_id": resource_id,
                "details": strip_sensitive(details or {}),
                "ip_address": ip_address,
                "user_agent": user_agent,
                "timestamp": now,
                "status": status,
                "expires_at": now + timedelta(days=retention_days) if retention_days > 0 else None,
            }
            result = await self.db.activity_logs.insert_one(entry)
            return str(result.inserted_id)
        except Exception as e:
            logger.error("Failed to log activity", action=action, resource=resource, error=str(e))
            return None

    async def apply_retention(self, retention_days: int) -> int:
        """Stamp expires_at on entries that have none"""
        if retention_days <= 0:
            return 0
        result = await self.db.activity_logs.update_many(
            {"expires_at": None},
            [{"$set": {"expires_at": {"$add": ["$timestamp", retention_days * 24 * 60 * 60 * 1000]}}}]
        )
        logger.info("Log retention applied", retention_days=retention_days, updated=result.modified_count)
        return result.modified_count

    @staticmethod
    def build_filter(query: ActivityLogQuery) -> Dict[str, Any]:
        """Translate listing filters into a MongoDB query"""
        conditions: Dict[str, Any] = {}
        if query.search:
            pattern = {"$regex": re.escape(query.search), "$options": "i"}
            conditions["$or"] = [
                {"operator_username": pattern},
                {"action": pattern},
                {"resource": pattern},
                {"resource_id": pattern},
            ]
        if query.action:
            conditions["action"] = query.action
        if query.resource:
            conditions["resource"] = query.resource
        if query.operator:
            conditions["operator_username"] = query.operator
        if query.status:
            conditions["status"] = query.status.value

        timestamp: Dict[str, datetime] = {}
        if query.start_date:
            start = ensure_utc(query.start_date)
            timestamp["$gte"] = datetime.combine(start.date(), time.min, tzinfo=start.tzinfo)
        if query.end_date:
            end = ensure_utc(query.end_date)
            timestamp["$lte"] = datetime.combine(end.date(), time.max, tzinfo=end.tzinfo)
        if timestamp:
            conditions["timestamp"] = timestamp
        return conditions

    async def list_logs(self, query: ActivityLogQuery) -> Dict[str, Any]:
        """Filtered, sorted and paginated listing with filter facets"""
        conditions = self.build_filter(query)
        sort_field = query.sort_by if query.sort_by in SORTABLE_FIELDS else "timestamp"
        direction = ASCENDING if query.sort_order == SortOrder.ASC else DESCENDING
        skip = (query.page - 1) * query.limit

        total = await self.db.activity_logs.count_documents(conditions)
        logs = await (
            self.db.activity_logs.find(conditions)
            .sort(sort_field, direction)
            .skip(skip)
            .limit(query.limit)
            .to_list()
        )
        total_pages = math.ceil(total / query.limit) if total else 0

        return {
            "logs": serialize_document(logs),
            "pagination": {
                "current_page": query.page,
                "total_pages": total_pages,
                "total_logs": total,
                "limit": query.limit,
                "has_next_page": query.page < total_pages,
                "has_prev_page": query.page > 1,
            },
            "filters": {
                "actions": sorted(await self.db.activity_logs.distinct("action")),
                "resources": sorted(await self.db.activity_logs.distinct("resource")),
                "operators": sorted(
                    name for name in await self.db.activity_logs.distinct("operator_username") if name
                ),
                "statuses": [status.value for status in LogStatus],
            },
        }

    async def delete_all(self) -> int:
        result = await self.db.activity_logs.delete_many({})
        logger.info("Activity logs deleted", count=result.deleted_count)
        return result.deleted_count
