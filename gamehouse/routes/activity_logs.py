"""
Activity log routes
Admin only
"""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Request
import structlog

from gamehouse.errors import GameHouseError
from gamehouse.messages import translate
from gamehouse.models.activity_log import ActivityLogQuery, LogAction, LogResource
from gamehouse.services.activity_log_service import ActivityLogService
from gamehouse.utils.dependencies import AdminOperator, DatabaseDep, get_client_ip, get_user_agent

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("", response_model=dict)
async def list_activity_logs(
    query: Annotated[ActivityLogQuery, Query()],
    db: DatabaseDep,
    admin: AdminOperator
):
    """
    List activity logs

    Supports free-text search, action/resource/operator/status filters,
    an inclusive date range, sorting and pagination.
    """
    try:
        result = await ActivityLogService(db).list_logs(query)
        return {"success": True, **result}
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to list activity logs", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@router.delete("/delete-all", response_model=dict)
async def delete_all_activity_logs(request: Request, db: DatabaseDep, admin: AdminOperator):
    """Delete every activity log, then record who did it"""
    service = ActivityLogService(db)
    try:
        count = await service.delete_all()
    except Exception as e:
        logger.error("Failed to delete activity logs", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))

    await service.log_activity(
        admin["id"], admin["username"],
        LogAction.DELETE.value, LogResource.SETTINGS.value,
        details={"target": "activity_logs", "deleted_count": count},
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request)
    )
    return {"success": True, "message": translate("logs_deleted", count=count), "deleted_count": count}
