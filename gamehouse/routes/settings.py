"""
Settings routes
Key/value settings and activity log retention
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request
import structlog

from gamehouse.errors import GameHouseError
from gamehouse.messages import translate
from gamehouse.models.setting import LogRetentionUpdate, SettingUpsert
from gamehouse.services.settings_service import SettingsService
from gamehouse.utils.database import serialize_document
from gamehouse.utils.dependencies import AdminOperator, CurrentOperator, DatabaseDep, set_activity_details

logger = structlog.get_logger(__name__)

router = APIRouter()
retention_router = APIRouter()


@router.get("", response_model=dict)
async def get_settings(
    db: DatabaseDep,
    operator: CurrentOperator,
    key: Optional[str] = Query(None, description="Return a single setting")
):
    """List all settings, or one by key"""
    service = SettingsService(db)
    if key:
        setting = await service.get_setting(key)
        return {"success": True, "setting": serialize_document(setting)}
    try:
        settings = await service.list_settings()
        return {"success": True, "settings": serialize_document(settings)}
    except Exception as e:
        logger.error("Failed to list settings", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@router.post("", response_model=dict)
async def upsert_setting(data: SettingUpsert, request: Request, db: DatabaseDep, admin: AdminOperator):
    """Create or replace a setting"""
    try:
        setting = await SettingsService(db).upsert_setting(data)
        set_activity_details(request, key=data.key)
        return {"success": True, "setting": serialize_document(setting)}
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to save setting", key=data.key, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@router.delete("", response_model=dict)
async def delete_setting(
    request: Request,
    db: DatabaseDep,
    admin: AdminOperator,
    key: str = Query("", description="Setting key")
):
    try:
        await SettingsService(db).delete_setting(key)
        set_activity_details(request, key=key)
        return {"success": True, "message": translate("setting_deleted")}
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to delete setting", key=key, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@retention_router.get("/log-retention", response_model=dict)
async def get_log_retention(db: DatabaseDep, admin: AdminOperator):
    """Current retention in days and as an option"""
    retention = await SettingsService(db).get_log_retention()
    return {"success": True, **retention}


@retention_router.put("/log-retention", response_model=dict)
async def update_log_retention(data: LogRetentionUpdate, request: Request, db: DatabaseDep, admin: AdminOperator):
    """Change retention and stamp expiry on logs that lack one"""
    try:
        retention = await SettingsService(db).update_log_retention(data.option)
        set_activity_details(request, **retention)
        return {"success": True, "message": translate("retention_updated"), **retention}
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to update log retention", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))
