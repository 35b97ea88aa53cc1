"""
Session service tests
"""

import base64
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from bson import ObjectId

from gamehouse.errors import InvalidState, NotFound, ValidationFailed
from gamehouse.models.session import InvoiceRequest, SessionCreate, SessionServiceInput, SessionUpdate
from gamehouse.services.billing import BillingPolicy
from gamehouse.services.session_service import SessionService


@pytest.fixture
def service(mock_db):
    return SessionService(mock_db, policy=BillingPolicy())


class TestSessionService:
    @pytest.mark.asyncio
    async def test_create_session_with_services(self, service, mock_db, customer_doc, unit_service):
        inserted_id = ObjectId()
        mock_db.customers.find_one.return_value = customer_doc
        mock_db.services.find_one.return_value = unit_service
        mock_db.sessions.insert_one.return_value = MagicMock(inserted_id=inserted_id)

        session = await service.create_session(
            SessionCreate(
                customer_id=str(customer_doc["_id"]),
                services=[SessionServiceInput(service_id=str(unit_service["_id"]), quantity=2)]
            ),
            operator_id="op-1"
        )

        assert session["_id"] == inserted_id
        assert session["customer_name"] == "Sara Ahmadi"
        assert session["customer_phone"] == "09120000000"
        assert session["status"] == "active"
        assert session["total_cost"] == 100000
        mock_db.sessions.insert_one.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_session_unknown_customer(self, service, mock_db):
        with pytest.raises(NotFound) as exc:
            await service.create_session(SessionCreate(customer_id=str(ObjectId())), operator_id=None)
        assert exc.value.key == "customer_not_found"
        mock_db.sessions.insert_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_session_invalid_id(self, service):
        with pytest.raises(ValidationFailed) as exc:
            await service.get_session("not-an-id")
        assert exc.value.key == "invalid_id"

    @pytest.mark.asyncio
    async def test_attach_persists_recomputed_total(self, service, mock_db, open_session, unit_service):
        mock_db.sessions.find_one.return_value = open_session
        mock_db.services.find_one.return_value = unit_service

        session = await service.attach_service(str(open_session["_id"]), str(unit_service["_id"]), 2)

        assert session["total_cost"] == 100000
        update = mock_db.sessions.update_one.await_args.args[1]["$set"]
        assert update["total_cost"] == 100000
        assert len(update["services"]) == 1

    @pytest.mark.asyncio
    async def test_update_completed_session_status_rejected(self, service, mock_db, open_session):
        open_session["status"] = "completed"
        mock_db.sessions.find_one.return_value = open_session

        with pytest.raises(InvalidState):
            await service.update_session(str(open_session["_id"]), SessionUpdate(status="paused"))
        mock_db.sessions.update_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_cannot_complete_via_status(self, service, mock_db, open_session):
        mock_db.sessions.find_one.return_value = open_session

        with pytest.raises(InvalidState) as exc:
            await service.update_session(str(open_session["_id"]), SessionUpdate(status="completed"))
        assert exc.value.key == "session_status_invalid"

    @pytest.mark.asyncio
    async def test_update_notes(self, service, mock_db, open_session):
        mock_db.sessions.find_one.return_value = open_session

        session = await service.update_session(str(open_session["_id"]), SessionUpdate(notes="VIP room"))

        assert session["notes"] == "VIP room"
        mock_db.sessions.update_one.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_complete_session(self, service, mock_db, open_session, time_service, now):
        open_session["services"] = [{
            "service_id": time_service["_id"],
            "service_name": "PS5 Station",
            "pricing_mode": "time-based",
            "unit_price": 1000,
            "quantity": 1,
            "start_time": now,
            "end_time": None,
            "is_paused": False,
            "paused_at": None,
            "total_paused_minutes": 0,
            "status": "active",
            "total_cost": 0,
        }]
        mock_db.sessions.find_one.return_value = open_session

        with patch("gamehouse.services.session_service.utcnow", return_value=now + timedelta(minutes=61)):
            session = await service.complete_session(str(open_session["_id"]), "op-1")

        assert session["status"] == "completed"
        assert session["total_cost"] == 61000
        saved = mock_db.sessions.update_one.await_args.args[1]["$set"]
        assert saved["status"] == "completed"
        assert saved["completed_by_operator"] == "op-1"


class TestSendInvoice:
    @pytest.mark.asyncio
    async def test_strips_data_url_and_sends_photo(self):
        image = b"\x89PNG fake"
        client = MagicMock()
        client.send_photo = AsyncMock(return_value={"ok": True})
        request = InvoiceRequest(
            image_data="data:image/png;base64," + base64.b64encode(image).decode(),
            bot_token="123:abc",
            chat_id="42",
            customer_name="Sara"
        )

        await SessionService.send_invoice(request, client)

        args = client.send_photo.await_args.args
        assert args[0] == "123:abc"
        assert args[1] == "42"
        assert args[2] == image
        assert args[3].startswith("invoice_Sara_")
        assert "Sara" in args[4]

    @pytest.mark.asyncio
    async def test_rejects_bad_base64(self):
        client = MagicMock()
        client.send_photo = AsyncMock()
        request = InvoiceRequest(image_data="not base64!!", bot_token="t", chat_id="1")

        with pytest.raises(ValidationFailed):
            await SessionService.send_invoice(request, client)
        client.send_photo.assert_not_called()
