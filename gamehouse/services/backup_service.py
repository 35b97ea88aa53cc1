"""
Backup/Export service

Exports selected collections as MongoDB Extended JSON, one file per
collection plus metadata.json, zipped into the backup directory. Progress
is persisted in the backup_jobs collection so any worker can report it.
"""

import asyncio
import json
import re
import secrets
import time
import zipfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import structlog
from bson import json_util

from gamehouse.config import get_settings
from gamehouse.errors import InvalidState, NotFound, ValidationFailed
from gamehouse.messages import translate
from gamehouse.models.activity_log import LogAction, LogResource, LogStatus
from gamehouse.models.backup import BackupStatus
from gamehouse.services.activity_log_service import ActivityLogService
from gamehouse.utils.database import serialize_document, utcnow
from gamehouse.utils.telegram_client import TelegramClient

logger = structlog.get_logger(__name__)

BACKUP_FORMAT_VERSION = "1.0"
BACKUP_ID_PATTERN = re.compile(r"^backup_\d+_[0-9a-f]+$")
EXPORT_SHARE = 80
ZIP_PROGRESS = 85

# key -> (collection, English label, Persian label, description)
EXPORTABLE_COLLECTIONS = {
    "customers": ("customers", "Customers", "مشتریان", "Customer records"),
    "operators": ("operators", "Operators", "اپراتورها", "System users"),
    "services": ("services", "Services", "سرویس‌ها", "Service catalog"),
    "categories": ("categories", "Categories", "دسته‌بندی‌ها", "Service categories"),
    "sessions": ("sessions", "Sessions", "جلسات", "Customer sessions"),
    "settings": ("settings", "Settings", "تنظیمات", "System settings"),
    "activity_logs": ("activity_logs", "Activity logs", "لاگ‌های فعالیت", "Audit trail"),
    "password_resets": ("password_resets", "Password resets", "بازنشانی رمز عبور", "Password reset requests"),
    "user_sessions": ("user_sessions", "Login sessions", "جلسات کاربری", "Operator login sessions"),
}


def collection_label(key: str) -> str:
    _, english, persian, _ = EXPORTABLE_COLLECTIONS[key]
    return persian if get_settings().language == "fa" else english


def new_backup_id() -> str:
    return f"backup_{int(time.time() * 1000)}_{secrets.token_hex(5)}"


def write_archive(archive: Path, metadata: Dict[str, Any], payloads: List[Tuple[str, str]]):
    """
    Zip metadata.json and the collection payloads into ``archive``

    The zip is built under a .part name and renamed once finalized, so
    ``archive`` never exists half-written.
    """
    partial = archive.with_name(archive.name + ".part")
    try:
        with zipfile.ZipFile(partial, "w", zipfile.ZIP_DEFLATED) as zf:
            zf.writestr("metadata.json", json.dumps(metadata, indent=2, ensure_ascii=False))
            for name, payload in payloads:
                zf.writestr(name, payload)
        partial.replace(archive)
    finally:
        partial.unlink(missing_ok=True)


class BackupService:
    """Collection export jobs"""

    def __init__(self, db, backup_dir: Optional[str] = None):
        self.db = db
        self.backup_dir = Path(backup_dir or get_settings().backup_dir)

    @staticmethod
    def list_collections() -> List[Dict[str, str]]:
        return [
            {"name": key, "label": collection_label(key), "description": description}
            for key, (_, _, _, description) in EXPORTABLE_COLLECTIONS.items()
        ]

    def archive_path(self, backup_id: str) -> Path:
        if not backup_id:
            raise ValidationFailed("backup_id_required")
        if not BACKUP_ID_PATTERN.match(backup_id):
            raise NotFound("backup_not_found")
        return self.backup_dir / f"{backup_id}.zip"

    async def start_backup(self, collections: List[str], operator: Dict[str, Any]) -> str:
        """
        Register a backup job

        Returns:
            The new backup id; run_backup does the export

        Raises:
            ValidationFailed: nothing selected, or no known collection selected
        """
        if not collections:
            raise ValidationFailed("backup_select_collection")
        selected = [key for key in EXPORTABLE_COLLECTIONS if key in collections]
        if not selected:
            raise ValidationFailed("backup_invalid_collections")

        backup_id = new_backup_id()
        await self.db.backup_jobs.insert_one({
            "backup_id": backup_id,
            "status": BackupStatus.IN_PROGRESS.value,
            "progress": 0,
            "current_collection": None,
            "processed_records": 0,
            "total_records": 0,
            "collections": selected,
            "created_by": operator.get("username"),
            "start_time": utcnow(),
            "end_time": None,
            "error": None,
            "download_url": None,
        })
        logger.info("Backup started", backup_id=backup_id, collections=selected)
        return backup_id

    async def _update_job(self, backup_id: str, **changes):
        await self.db.backup_jobs.update_one({"backup_id": backup_id}, {"$set": changes})

    async def _export_collection(self, key: str) -> List[Dict[str, Any]]:
        collection_name = EXPORTABLE_COLLECTIONS[key][0]
        return await self.db.collection(collection_name).find({}).to_list()

    async def run_backup(self, backup_id: str, operator: Dict[str, Any]):
        """Export, zip and record the outcome of a registered job"""
        job = await self.db.backup_jobs.find_one({"backup_id": backup_id})
        if job is None:
            logger.error("Backup job missing", backup_id=backup_id)
            return

        activity = ActivityLogService(self.db)
        selected = job["collections"]
        archive = self.backup_dir / f"{backup_id}.zip"
        try:
            await asyncio.to_thread(self.backup_dir.mkdir, parents=True, exist_ok=True)

            total = 0
            for key in selected:
                total += await self.db.collection(EXPORTABLE_COLLECTIONS[key][0]).estimated_document_count()
            await self._update_job(backup_id, total_records=total)

            metadata = {
                "version": BACKUP_FORMAT_VERSION,
                "created_at": utcnow().isoformat(),
                "created_by": operator.get("username"),
                "total_collections": len(selected),
                "collections": [{"name": key, "label": collection_label(key)} for key in selected],
            }

            processed = 0
            payloads = []
            for index, key in enumerate(selected):
                await self._update_job(
                    backup_id,
                    current_collection=collection_label(key),
                    progress=round(index / len(selected) * EXPORT_SHARE)
                )
                documents = await self._export_collection(key)
                payloads.append((
                    f"{key}.json",
                    json_util.dumps(documents, json_options=json_util.RELAXED_JSON_OPTIONS, indent=2)
                ))
                processed += len(documents)
                await self._update_job(backup_id, processed_records=processed)

            await self._update_job(backup_id, progress=ZIP_PROGRESS)
            await asyncio.to_thread(write_archive, archive, metadata, payloads)

            end_time = utcnow()
            await self._update_job(
                backup_id,
                status=BackupStatus.COMPLETED.value,
                progress=100,
                current_collection=None,
                end_time=end_time,
                download_url=f"/api/admin/backup/download?backup_id={backup_id}"
            )
            duration_ms = int((end_time - job["start_time"]).total_seconds() * 1000)
            logger.info("Backup completed", backup_id=backup_id, records=processed, duration_ms=duration_ms)
            await activity.log_activity(
                operator.get("id"), operator.get("username"),
                LogAction.CREATE.value, LogResource.BACKUP.value,
                resource_id=backup_id,
                details={"stage": "completed", "total_records": processed, "duration_ms": duration_ms},
            )

        except Exception as e:
            logger.error("Backup failed", backup_id=backup_id, error=str(e), exc_info=True)
            await asyncio.to_thread(archive.unlink, missing_ok=True)
            await self._update_job(
                backup_id,
                status=BackupStatus.ERROR.value,
                error=str(e),
                end_time=utcnow()
            )
            await activity.log_activity(
                operator.get("id"), operator.get("username"),
                LogAction.CREATE.value, LogResource.BACKUP.value,
                resource_id=backup_id,
                details={"stage": "failed", "error": str(e)},
                status=LogStatus.FAILED.value,
            )

    async def get_progress(self, backup_id: str) -> Dict[str, Any]:
        if not backup_id:
            raise ValidationFailed("backup_id_required")
        job = await self.db.backup_jobs.find_one({"backup_id": backup_id}, {"_id": 0})
        if job is None:
            raise NotFound("backup_not_found")
        return serialize_document(job)

    async def read_archive(self, backup_id: str) -> bytes:
        """
        Raises:
            NotFound: unknown id, or the archive is missing on disk
            InvalidState: the job has not completed
        """
        path = self.archive_path(backup_id)
        job = await self.db.backup_jobs.find_one({"backup_id": backup_id}, {"status": 1})
        if job is None:
            raise NotFound("backup_not_found")
        if job.get("status") != BackupStatus.COMPLETED.value:
            raise InvalidState("backup_not_ready")
        if not await asyncio.to_thread(path.exists):
            raise NotFound("backup_not_found")
        return await asyncio.to_thread(path.read_bytes)

    async def send_to_telegram(
        self,
        backup_id: str,
        bot_token: str,
        chat_id: str,
        client: TelegramClient
    ) -> Dict[str, Any]:
        """Upload a finished archive to a Telegram chat"""
        content = await self.read_archive(backup_id)
        now = utcnow()
        filename = f"backup_{now.date().isoformat()}_{backup_id.split('_')[1]}.zip"
        caption = translate("backup_caption", date=now.strftime("%Y-%m-%d"), time=now.strftime("%H:%M"))
        result = await client.send_document(bot_token, chat_id, content, filename, caption)
        logger.info("Backup sent to Telegram", backup_id=backup_id, chat_id=chat_id)
        return result


def backup_id_from_url(url: Optional[str]) -> Optional[str]:
    """Pull backup_id out of a download URL"""
    if not url:
        return None
    match = re.search(r"[?&]backup_?[iI]d=([^&]+)", url)
    return match.group(1) if match else None
