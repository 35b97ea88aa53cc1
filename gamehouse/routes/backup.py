"""
Backup routes
Admin only; exports run as background tasks and are polled for progress
"""

from fastapi import APIRouter, BackgroundTasks, HTTPException, Query, Request, Response
import structlog

from gamehouse.errors import GameHouseError, ValidationFailed
from gamehouse.messages import translate
from gamehouse.models.backup import BackupCreate, BackupTelegramRequest
from gamehouse.services.backup_service import BackupService, backup_id_from_url
from gamehouse.utils.dependencies import AdminOperator, DatabaseDep, set_activity_details
from gamehouse.utils.telegram_client import get_telegram_client

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/collections", response_model=dict)
async def list_collections(admin: AdminOperator):
    """Collections that can be exported"""
    return {"success": True, "collections": BackupService.list_collections()}


@router.post("/create", response_model=dict)
async def create_backup(
    data: BackupCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    db: DatabaseDep,
    admin: AdminOperator
):
    """Start a backup job and return its id"""
    try:
        service = BackupService(db)
        backup_id = await service.start_backup(data.collections, admin)
        background_tasks.add_task(service.run_backup, backup_id, admin)
        set_activity_details(request, backup_id=backup_id, collections=data.collections, stage="started")
        return {"success": True, "message": translate("backup_started"), "backup_id": backup_id}
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to start backup", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@router.get("/progress", response_model=dict)
async def backup_progress(db: DatabaseDep, admin: AdminOperator, backup_id: str = Query("")):
    """Current state of a backup job"""
    progress = await BackupService(db).get_progress(backup_id)
    return {"success": True, **progress}


@router.get("/download")
async def download_backup(db: DatabaseDep, admin: AdminOperator, backup_id: str = Query("")):
    content = await BackupService(db).read_archive(backup_id)
    return Response(
        content=content,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{backup_id}.zip"'}
    )


@router.post("/send-telegram", response_model=dict)
async def send_backup_telegram(data: BackupTelegramRequest, request: Request, db: DatabaseDep, admin: AdminOperator):
    """Upload a finished archive to a Telegram chat"""
    backup_id = data.backup_id or backup_id_from_url(data.backup_url)
    if not backup_id:
        raise ValidationFailed("backup_id_required")
    try:
        await BackupService(db).send_to_telegram(backup_id, data.bot_token, data.chat_id, get_telegram_client())
        set_activity_details(request, backup_id=backup_id, chat_id=data.chat_id, stage="sent_to_telegram")
        return {"success": True, "message": translate("telegram_sent_backup")}
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to send backup to Telegram", backup_id=backup_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))
