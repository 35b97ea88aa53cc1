"""
Report routes
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query
import structlog

from gamehouse.errors import GameHouseError
from gamehouse.messages import translate
from gamehouse.services.report_service import ReportService
from gamehouse.utils.dependencies import CurrentOperator, DatabaseDep

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("", response_model=dict)
async def get_report(
    db: DatabaseDep,
    operator: CurrentOperator,
    type: str = Query(..., description="peak-hours or customer-loyalty"),
    period: Optional[str] = Query(None, description="daily, weekly, monthly or yearly")
):
    """Peak hours of completed sessions, or the most loyal customers"""
    try:
        data = await ReportService(db).get_report(type, period)
        return {"success": True, "type": type, "period": period, "data": data}
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to build report", report_type=type, period=period, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))
