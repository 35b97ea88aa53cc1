"""
Session routes
Opening, billing and closing customer sessions
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request
import structlog

from gamehouse.errors import GameHouseError
from gamehouse.messages import translate
from gamehouse.models.session import (
    AttachServiceRequest, EditServiceRequest, InvoiceRequest, SessionCreate, SessionStatus, SessionUpdate
)
from gamehouse.services.session_service import SessionService
from gamehouse.utils.database import serialize_document
from gamehouse.utils.dependencies import CurrentOperator, DatabaseDep, set_activity_details
from gamehouse.utils.telegram_client import get_telegram_client

logger = structlog.get_logger(__name__)

router = APIRouter()


def _session_response(service: SessionService, session: dict, **extra) -> dict:
    payload = serialize_document(session)
    payload["running_cost"] = service.running_cost(session)
    return {"success": True, "session": payload, **extra}


@router.get("", response_model=dict)
async def list_sessions(
    db: DatabaseDep,
    operator: CurrentOperator,
    status: Optional[SessionStatus] = Query(None, description="Filter by session status")
):
    """List sessions, newest first"""
    try:
        sessions = await SessionService(db).list_sessions(status)
        return {"success": True, "sessions": serialize_document(sessions)}
    except Exception as e:
        logger.error("Failed to list sessions", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@router.post("", response_model=dict, status_code=201)
async def create_session(
    session_data: SessionCreate,
    request: Request,
    db: DatabaseDep,
    operator: CurrentOperator
):
    """Open a session for a customer, optionally with services attached"""
    try:
        service = SessionService(db)
        session = await service.create_session(session_data, operator.get("id"))
        set_activity_details(
            request,
            resource_id=str(session["_id"]),
            customer_name=session.get("customer_name"),
            services_count=len(session["services"])
        )
        return _session_response(service, session)
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to create session", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@router.post("/send-invoice-telegram", response_model=dict)
async def send_invoice_telegram(invoice: InvoiceRequest, request: Request, operator: CurrentOperator):
    """Post a rendered invoice image to a Telegram chat"""
    try:
        await SessionService.send_invoice(invoice, get_telegram_client())
        set_activity_details(request, customer_name=invoice.customer_name, chat_id=invoice.chat_id)
        return {"success": True, "message": translate("telegram_sent_invoice")}
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to send invoice", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@router.get("/{session_id}", response_model=dict)
async def get_session(session_id: str, db: DatabaseDep, operator: CurrentOperator):
    """Get a session with its running cost"""
    service = SessionService(db)
    session = await service.get_session(session_id)
    return _session_response(service, session)


@router.put("/{session_id}", response_model=dict)
async def update_session(
    session_id: str,
    update_data: SessionUpdate,
    db: DatabaseDep,
    operator: CurrentOperator
):
    try:
        service = SessionService(db)
        session = await service.update_session(session_id, update_data)
        return _session_response(service, session)
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to update session", session_id=session_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@router.delete("/{session_id}", response_model=dict)
async def delete_session(session_id: str, request: Request, db: DatabaseDep, operator: CurrentOperator):
    """Cancel a session and delete it"""
    try:
        session = await SessionService(db).delete_session(session_id)
        set_activity_details(
            request,
            customer_name=session.get("customer_name"),
            total_cost=session.get("total_cost", 0),
            status=session.get("status")
        )
        return {"success": True, "message": translate("session_deleted")}
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to delete session", session_id=session_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@router.post("/{session_id}/services", response_model=dict)
async def attach_service(
    session_id: str,
    data: AttachServiceRequest,
    request: Request,
    db: DatabaseDep,
    operator: CurrentOperator
):
    """Attach a catalog service to an open session"""
    try:
        service = SessionService(db)
        session = await service.attach_service(session_id, data.service_id, data.quantity)
        set_activity_details(request, service_id=data.service_id, quantity=data.quantity)
        return _session_response(service, session)
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to attach service", session_id=session_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@router.put("/{session_id}/services/{service_id}", response_model=dict)
async def edit_service(
    session_id: str,
    service_id: str,
    data: EditServiceRequest,
    request: Request,
    db: DatabaseDep,
    operator: CurrentOperator
):
    """Correct quantity or times of an attached service"""
    try:
        service = SessionService(db)
        session = await service.edit_service(session_id, service_id, data)
        set_activity_details(request, service_id=service_id, changes=data.model_dump(mode="json", exclude_none=True))
        return _session_response(service, session)
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to edit service", session_id=session_id, service_id=service_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@router.delete("/{session_id}/services/{service_id}", response_model=dict)
async def detach_service(
    session_id: str,
    service_id: str,
    request: Request,
    db: DatabaseDep,
    operator: CurrentOperator
):
    try:
        service = SessionService(db)
        session = await service.detach_service(session_id, service_id)
        set_activity_details(request, service_id=service_id)
        return _session_response(service, session)
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to detach service", session_id=session_id, service_id=service_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@router.post("/{session_id}/services/{service_id}/pause", response_model=dict)
async def pause_service(
    session_id: str,
    service_id: str,
    request: Request,
    db: DatabaseDep,
    operator: CurrentOperator
):
    """Stop the clock on a time-based service"""
    try:
        service = SessionService(db)
        session = await service.pause_service(session_id, service_id)
        set_activity_details(request, service_id=service_id)
        return _session_response(service, session)
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to pause service", session_id=session_id, service_id=service_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@router.post("/{session_id}/services/{service_id}/resume", response_model=dict)
async def resume_service(
    session_id: str,
    service_id: str,
    request: Request,
    db: DatabaseDep,
    operator: CurrentOperator
):
    """Restart the clock on a paused service"""
    try:
        service = SessionService(db)
        session = await service.resume_service(session_id, service_id)
        set_activity_details(request, service_id=service_id)
        return _session_response(service, session)
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to resume service", session_id=session_id, service_id=service_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@router.post("/{session_id}/end", response_model=dict)
async def end_session(session_id: str, request: Request, db: DatabaseDep, operator: CurrentOperator):
    """Finalize every service and complete the session"""
    try:
        service = SessionService(db)
        session = await service.complete_session(session_id, operator.get("id"))
        set_activity_details(
            request,
            customer_name=session.get("customer_name"),
            total_cost=session["total_cost"]
        )
        return _session_response(service, session, message=translate("session_ended"))
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to end session", session_id=session_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))
