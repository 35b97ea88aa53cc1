"""
Settings store business logic
Key/value settings plus the activity log retention policy
"""

from typing import Any, Dict, List

import structlog
from pymongo import ASCENDING, ReturnDocument

from gamehouse.errors import NotFound, ValidationFailed
from gamehouse.models.setting import RETENTION_DAYS, LogRetentionOption, SettingUpsert
from gamehouse.services.activity_log_service import RETENTION_SETTING_KEY, ActivityLogService
from gamehouse.utils.database import utcnow

logger = structlog.get_logger(__name__)


def retention_option_for(days: int) -> str:
    """Map stored days back to the closest retention option"""
    for option, option_days in RETENTION_DAYS.items():
        if option_days == days:
            return option.value
    return LogRetentionOption.SIX_MONTHS.value


class SettingsService:
    """Key/value settings"""

    def __init__(self, db):
        self.db = db

    async def list_settings(self) -> List[Dict[str, Any]]:
        return await self.db.settings.find({}).sort("key", ASCENDING).to_list()

    async def get_setting(self, key: str) -> Dict[str, Any]:
        setting = await self.db.settings.find_one({"key": key})
        if setting is None:
            raise NotFound("setting_not_found")
        return setting

    async def upsert_setting(self, data: SettingUpsert) -> Dict[str, Any]:
        if not data.key or data.value is None:
            raise ValidationFailed("setting_fields_required")

        now = utcnow()
        changes = {"value": data.value, "updated_at": now}
        if data.description is not None:
            changes["description"] = data.description
        return await self.db.settings.find_one_and_update(
            {"key": data.key},
            {"$set": changes, "$setOnInsert": {"key": data.key, "created_at": now}},
            upsert=True,
            return_document=ReturnDocument.AFTER
        )

    async def delete_setting(self, key: str) -> Dict[str, Any]:
        if not key:
            raise ValidationFailed("setting_key_required")
        setting = await self.db.settings.find_one_and_delete({"key": key})
        if setting is None:
            raise NotFound("setting_not_found")
        return setting

    async def get_log_retention(self) -> Dict[str, Any]:
        days = await ActivityLogService(self.db).get_retention_days()
        return {"retention_days": days, "retention_option": retention_option_for(days)}

    async def update_log_retention(self, option: LogRetentionOption) -> Dict[str, Any]:
        """Store a retention option and stamp expiry on logs lacking one"""
        days = RETENTION_DAYS[option]
        await self.upsert_setting(SettingUpsert(
            key=RETENTION_SETTING_KEY,
            value=days,
            description="Activity log retention in days (-1 keeps logs forever)"
        ))
        if option != LogRetentionOption.NEVER:
            await ActivityLogService(self.db).apply_retention(days)
        logger.info("Log retention updated", option=option.value, retention_days=days)
        return {"retention_days": days, "retention_option": option.value}
