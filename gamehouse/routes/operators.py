"""
Operator management routes
Admin only
"""

from fastapi import APIRouter, HTTPException, Request
import structlog

from gamehouse.errors import GameHouseError
from gamehouse.messages import translate
from gamehouse.models.operator import OperatorCreate, OperatorUpdate
from gamehouse.services.auth_service import public_operator
from gamehouse.services.operator_service import OperatorService
from gamehouse.utils.database import serialize_document
from gamehouse.utils.dependencies import AdminOperator, DatabaseDep, set_activity_details

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("", response_model=dict)
async def list_operators(db: DatabaseDep, admin: AdminOperator):
    try:
        operators = await OperatorService(db).list_operators()
        return {"success": True, "operators": serialize_document(operators)}
    except Exception as e:
        logger.error("Failed to list operators", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@router.post("", response_model=dict, status_code=201)
async def create_operator(operator_data: OperatorCreate, request: Request, db: DatabaseDep, admin: AdminOperator):
    """Create an operator account"""
    try:
        operator = await OperatorService(db).create_operator(operator_data)
        set_activity_details(
            request,
            resource_id=str(operator["_id"]),
            username=operator["username"],
            role=operator["role"]
        )
        return {"success": True, "operator": public_operator(operator)}
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to create operator", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@router.put("/{operator_id}", response_model=dict)
async def update_operator(
    operator_id: str,
    update_data: OperatorUpdate,
    request: Request,
    db: DatabaseDep,
    admin: AdminOperator
):
    """Update an operator; password is optional"""
    try:
        operator = await OperatorService(db).update_operator(operator_id, update_data)
        set_activity_details(request, fields=sorted(update_data.model_dump(exclude_none=True)))
        return {"success": True, "operator": public_operator(operator)}
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to update operator", operator_id=operator_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@router.delete("/{operator_id}", response_model=dict)
async def delete_operator(operator_id: str, request: Request, db: DatabaseDep, admin: AdminOperator):
    """Delete a non-admin operator"""
    try:
        operator = await OperatorService(db).delete_operator(operator_id)
        set_activity_details(request, username=operator["username"])
        return {"success": True, "message": translate("operator_deleted")}
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to delete operator", operator_id=operator_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))
