"""
Session service business logic

Loads a session, applies the billing rules from gamehouse.services.billing and
persists the result. Sessions are never cached in process memory.
"""

import base64
import binascii
from typing import Any, Dict, List, Optional

import structlog
from pymongo import DESCENDING

from gamehouse.config import get_settings
from gamehouse.errors import InvalidState, NotFound, ValidationFailed
from gamehouse.messages import translate
from gamehouse.models.session import (
    EditServiceRequest, InvoiceRequest, SessionCreate, SessionStatus, SessionUpdate
)
from gamehouse.services import billing
from gamehouse.services.catalog_service import CatalogService
from gamehouse.services.customer_service import CustomerService
from gamehouse.utils.database import to_object_id, utcnow
from gamehouse.utils.telegram_client import TelegramClient

logger = structlog.get_logger(__name__)

INVOICE_DATA_URL_PREFIX = "data:image/png;base64,"


class SessionService:
    """Customer billing sessions"""

    def __init__(self, db, policy: Optional[billing.BillingPolicy] = None):
        self.db = db
        self.policy = policy or billing.BillingPolicy.from_settings(get_settings())
        self.catalog = CatalogService(db)
        self.customers = CustomerService(db)

    async def list_sessions(self, status: Optional[SessionStatus] = None) -> List[Dict[str, Any]]:
        conditions = {"status": status.value} if status else {}
        return await self.db.sessions.find(conditions).sort("created_at", DESCENDING).to_list()

    async def get_session(self, session_id: str) -> Dict[str, Any]:
        session = await self.db.sessions.find_one({"_id": to_object_id(session_id)})
        if session is None:
            raise NotFound("session_not_found")
        return session

    def running_cost(self, session: Dict[str, Any]) -> float:
        return billing.running_cost(session, utcnow(), self.policy)

    async def _save(self, session: Dict[str, Any]):
        session["updated_at"] = utcnow()
        await self.db.sessions.update_one(
            {"_id": session["_id"]},
            {"$set": {
                "services": session.get("services", []),
                "total_cost": session.get("total_cost", 0),
                "status": session["status"],
                "end_time": session.get("end_time"),
                "completed_by_operator": session.get("completed_by_operator"),
                "notes": session.get("notes"),
                "updated_at": session["updated_at"],
            }}
        )

    async def create_session(self, data: SessionCreate, operator_id: Optional[str]) -> Dict[str, Any]:
        """
        Open a session for a customer

        Services listed in the request are attached in order.
        """
        customer = await self.customers.get_customer(data.customer_id)
        now = utcnow()
        session = {
            "customer_id": str(customer["_id"]),
            "customer_name": f"{customer['first_name']} {customer['last_name']}",
            "customer_phone": customer["phone"],
            "operator_id": operator_id,
            "start_time": now,
            "end_time": None,
            "status": SessionStatus.ACTIVE.value,
            "services": [],
            "total_cost": 0,
            "notes": data.notes,
            "completed_by_operator": None,
            "created_at": now,
            "updated_at": now,
        }
        for item in data.services:
            service = await self.catalog.get_service(item.service_id)
            billing.attach_service(session, service, item.quantity, now)

        result = await self.db.sessions.insert_one(session)
        session["_id"] = result.inserted_id
        logger.info(
            "Session started",
            session_id=str(result.inserted_id),
            customer_id=session["customer_id"],
            services=len(session["services"])
        )
        return session

    async def update_session(self, session_id: str, data: SessionUpdate) -> Dict[str, Any]:
        """Update notes, or toggle between active and paused"""
        changes = data.model_dump(exclude_none=True)
        if not changes:
            raise ValidationFailed("no_update_data")

        session = await self.get_session(session_id)
        if "status" in changes:
            if session["status"] == SessionStatus.COMPLETED.value:
                raise InvalidState("session_completed")
            if data.status == SessionStatus.COMPLETED:
                raise InvalidState("session_status_invalid")
            session["status"] = data.status.value
        if "notes" in changes:
            session["notes"] = data.notes

        await self._save(session)
        return session

    async def delete_session(self, session_id: str) -> Dict[str, Any]:
        session = await self.get_session(session_id)
        await self.db.sessions.delete_one({"_id": session["_id"]})
        logger.info("Session cancelled", session_id=session_id)
        return session

    async def attach_service(self, session_id: str, service_id: str, quantity: int = 1) -> Dict[str, Any]:
        session = await self.get_session(session_id)
        service = await self.catalog.get_service(service_id)
        entry = billing.attach_service(session, service, quantity, utcnow())
        await self._save(session)
        logger.info(
            "Service attached",
            session_id=session_id,
            service_id=service_id,
            pricing_mode=entry["pricing_mode"],
            total_cost=session["total_cost"]
        )
        return session

    async def pause_service(self, session_id: str, service_id: str) -> Dict[str, Any]:
        session = await self.get_session(session_id)
        billing.pause_service(session, service_id, utcnow())
        await self._save(session)
        logger.info("Service paused", session_id=session_id, service_id=service_id)
        return session

    async def resume_service(self, session_id: str, service_id: str) -> Dict[str, Any]:
        session = await self.get_session(session_id)
        paused_minutes = billing.resume_service(session, service_id, utcnow())
        await self._save(session)
        logger.info(
            "Service resumed",
            session_id=session_id,
            service_id=service_id,
            paused_minutes=paused_minutes
        )
        return session

    async def edit_service(self, session_id: str, service_id: str, data: EditServiceRequest) -> Dict[str, Any]:
        session = await self.get_session(session_id)
        billing.edit_service(
            session,
            service_id,
            self.policy,
            quantity=data.quantity,
            start_time=data.start_time,
            end_time=data.end_time
        )
        await self._save(session)
        return session

    async def detach_service(self, session_id: str, service_id: str) -> Dict[str, Any]:
        session = await self.get_session(session_id)
        billing.detach_service(session, service_id)
        await self._save(session)
        logger.info("Service removed", session_id=session_id, service_id=service_id)
        return session

    async def complete_session(self, session_id: str, operator_id: Optional[str]) -> Dict[str, Any]:
        session = await self.get_session(session_id)
        billing.complete_session(session, utcnow(), self.policy, operator_id)
        await self._save(session)
        logger.info("Session completed", session_id=session_id, total_cost=session["total_cost"])
        return session

    @staticmethod
    async def send_invoice(request: InvoiceRequest, client: TelegramClient) -> Dict[str, Any]:
        """Post a rendered invoice image to a Telegram chat"""
        encoded = request.image_data
        if encoded.startswith(INVOICE_DATA_URL_PREFIX):
            encoded = encoded[len(INVOICE_DATA_URL_PREFIX):]
        try:
            image = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError):
            raise ValidationFailed("invoice_image_invalid")

        now = utcnow()
        customer_name = request.customer_name or translate("unknown_customer")
        caption = translate(
            "invoice_caption",
            customer=customer_name,
            date=now.strftime("%Y-%m-%d"),
            time=now.strftime("%H:%M")
        )
        filename = f"invoice_{request.customer_name or 'customer'}_{now.date().isoformat()}.png"
        result = await client.send_photo(request.bot_token, request.chat_id, image, filename, caption)
        logger.info("Invoice sent to Telegram", chat_id=request.chat_id)
        return result
