"""
Activity log tests: recording, listing, retention and request classification
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from bson import ObjectId

from gamehouse.models.activity_log import ActivityLogQuery
from gamehouse.services.activity_log_service import ActivityLogService, strip_sensitive
from gamehouse.utils.activity_middleware import classify_request
from tests.conftest import make_cursor

SESSION_ID = "64b1f0c2a1b2c3d4e5f60718"
SERVICE_ID = "64b1f0c2a1b2c3d4e5f60719"


class TestStripSensitive:
    def test_nested_secrets_removed(self):
        details = {
            "password": "x",
            "name": "Sara",
            "nested": {"bot_token": "123:abc", "chat_id": "42"},
            "items": [{"token": "t", "ok": 1}],
        }
        assert strip_sensitive(details) == {
            "name": "Sara",
            "nested": {"chat_id": "42"},
            "items": [{"ok": 1}],
        }


class TestLogActivity:
    @pytest.mark.asyncio
    async def test_entry_gets_expiry_from_retention(self, mock_db):
        mock_db.settings.find_one.return_value = {"key": "log_retention_days", "value": 30}
        mock_db.activity_logs.insert_one.return_value = MagicMock(inserted_id=ObjectId())

        entry_id = await ActivityLogService(mock_db).log_activity(
            "op-1", "desk", "create", "customer", details={"password": "secret", "phone": "0912"}
        )

        assert entry_id is not None
        entry = mock_db.activity_logs.insert_one.await_args.args[0]
        assert entry["details"] == {"phone": "0912"}
        assert (entry["expires_at"] - entry["timestamp"]).days == 30

    @pytest.mark.asyncio
    async def test_never_retention_has_no_expiry(self, mock_db):
        mock_db.settings.find_one.return_value = {"key": "log_retention_days", "value": -1}
        mock_db.activity_logs.insert_one.return_value = MagicMock(inserted_id=ObjectId())

        await ActivityLogService(mock_db).log_activity("op-1", "desk", "update", "settings")

        entry = mock_db.activity_logs.insert_one.await_args.args[0]
        assert entry["expires_at"] is None

    @pytest.mark.asyncio
    async def test_write_failure_never_raises(self, mock_db):
        mock_db.activity_logs.insert_one.side_effect = RuntimeError("db down")

        result = await ActivityLogService(mock_db).log_activity("op-1", "desk", "delete", "customer")

        assert result is None

    @pytest.mark.asyncio
    async def test_default_retention(self, mock_db):
        assert await ActivityLogService(mock_db).get_retention_days() == 180


class TestListLogs:
    def test_build_filter(self):
        query = ActivityLogQuery(
            search="sess",
            action="end_session",
            status="failed",
            start_date=datetime(2024, 5, 1, 15, 30, tzinfo=timezone.utc),
            end_date=datetime(2024, 5, 3, tzinfo=timezone.utc),
        )

        conditions = ActivityLogService.build_filter(query)

        assert conditions["action"] == "end_session"
        assert conditions["status"] == "failed"
        assert len(conditions["$or"]) == 4
        assert conditions["timestamp"]["$gte"] == datetime(2024, 5, 1, tzinfo=timezone.utc)
        assert conditions["timestamp"]["$lte"].date() == datetime(2024, 5, 3).date()
        assert conditions["timestamp"]["$lte"].hour == 23

    @pytest.mark.asyncio
    async def test_pagination_and_facets(self, mock_db):
        mock_db.activity_logs.count_documents.return_value = 45
        mock_db.activity_logs.find.return_value = make_cursor([{"_id": ObjectId(), "action": "create"}])
        mock_db.activity_logs.distinct.side_effect = [["update", "create"], ["session"], ["desk", None]]

        result = await ActivityLogService(mock_db).list_logs(
            ActivityLogQuery(page=3, limit=20, sort_by="not_a_field", sort_order="asc")
        )

        assert result["pagination"]["total_pages"] == 3
        assert result["pagination"]["has_next_page"] is False
        assert result["pagination"]["has_prev_page"] is True
        assert result["filters"]["actions"] == ["create", "update"]
        assert result["filters"]["operators"] == ["desk"]
        mock_db.activity_logs.find.return_value.sort.assert_called_once_with("timestamp", 1)
        mock_db.activity_logs.find.return_value.skip.assert_called_once_with(40)

    @pytest.mark.asyncio
    async def test_apply_retention_uses_pipeline(self, mock_db):
        mock_db.activity_logs.update_many.return_value = MagicMock(modified_count=7)

        assert await ActivityLogService(mock_db).apply_retention(30) == 7
        filter_, pipeline = mock_db.activity_logs.update_many.await_args.args
        assert filter_ == {"expires_at": None}
        assert pipeline[0]["$set"]["expires_at"]["$add"][1] == 30 * 86400000


class TestClassifyRequest:
    @pytest.mark.parametrize("method,path,expected", [
        ("POST", "/api/sessions", ("start_session", "session", None)),
        ("DELETE", f"/api/sessions/{SESSION_ID}", ("cancel_session", "session", SESSION_ID)),
        ("POST", f"/api/sessions/{SESSION_ID}/end", ("end_session", "session", SESSION_ID)),
        ("POST", f"/api/sessions/{SESSION_ID}/services", ("add_service", "session", SESSION_ID)),
        ("PUT", f"/api/sessions/{SESSION_ID}/services/{SERVICE_ID}", ("edit_service", "session", SESSION_ID)),
        ("DELETE", f"/api/sessions/{SESSION_ID}/services/{SERVICE_ID}", ("remove_service", "session", SESSION_ID)),
        ("POST", f"/api/sessions/{SESSION_ID}/services/{SERVICE_ID}/pause", ("pause_session", "session", SESSION_ID)),
        ("POST", f"/api/sessions/{SESSION_ID}/services/{SERVICE_ID}/resume", ("resume_session", "session", SESSION_ID)),
        ("PUT", f"/api/customers/{SESSION_ID}", ("update", "customer", SESSION_ID)),
        ("POST", "/api/categories", ("create", "category", None)),
        ("PUT", "/api/admin/settings/log-retention", ("update", "settings", None)),
        ("POST", "/api/admin/backup/create", ("create", "backup", None)),
    ])
    def test_classification(self, method, path, expected):
        assert classify_request(method, path) == expected

    def test_unknown_resource(self):
        assert classify_request("POST", "/api/unknown")[1] is None
