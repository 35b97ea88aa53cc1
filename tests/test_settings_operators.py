"""
Settings and operator management tests
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from bson import ObjectId

from gamehouse.errors import Conflict, NotFound, ValidationFailed
from gamehouse.models.operator import OperatorCreate, OperatorUpdate
from gamehouse.models.setting import LogRetentionOption, SettingUpsert
from gamehouse.services.operator_service import OperatorService
from gamehouse.services.settings_service import SettingsService, retention_option_for


class TestSettingsService:
    @pytest.mark.asyncio
    async def test_upsert_setting(self, mock_db):
        mock_db.settings.find_one_and_update.return_value = {"key": "shop_name", "value": "Arena"}

        setting = await SettingsService(mock_db).upsert_setting(SettingUpsert(key="shop_name", value="Arena"))

        assert setting["value"] == "Arena"
        kwargs = mock_db.settings.find_one_and_update.await_args.kwargs
        assert kwargs["upsert"] is True

    @pytest.mark.asyncio
    async def test_upsert_requires_value(self, mock_db):
        with pytest.raises(ValidationFailed):
            await SettingsService(mock_db).upsert_setting(SettingUpsert(key="shop_name", value=None))

    @pytest.mark.asyncio
    async def test_get_missing_setting(self, mock_db):
        with pytest.raises(NotFound):
            await SettingsService(mock_db).get_setting("missing")

    @pytest.mark.asyncio
    async def test_delete_requires_key(self, mock_db):
        with pytest.raises(ValidationFailed) as exc:
            await SettingsService(mock_db).delete_setting("")
        assert exc.value.key == "setting_key_required"

    def test_retention_option_for(self):
        assert retention_option_for(30) == "1_month"
        assert retention_option_for(-1) == "never"
        assert retention_option_for(45) == "6_months"

    @pytest.mark.asyncio
    async def test_update_retention_applies_to_existing_logs(self, mock_db):
        mock_db.settings.find_one_and_update.return_value = {"key": "log_retention_days", "value": 90}
        mock_db.activity_logs.update_many.return_value = MagicMock(modified_count=3)

        result = await SettingsService(mock_db).update_log_retention(LogRetentionOption.THREE_MONTHS)

        assert result == {"retention_days": 90, "retention_option": "3_months"}
        mock_db.activity_logs.update_many.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_never_retention_leaves_logs(self, mock_db):
        mock_db.settings.find_one_and_update.return_value = {"key": "log_retention_days", "value": -1}

        result = await SettingsService(mock_db).update_log_retention(LogRetentionOption.NEVER)

        assert result["retention_days"] == -1
        mock_db.activity_logs.update_many.assert_not_called()


class TestOperatorService:
    @pytest.mark.asyncio
    async def test_create_operator_hashes_password(self, mock_db):
        mock_db.operators.insert_one.return_value = MagicMock(inserted_id=ObjectId())

        with patch("gamehouse.services.operator_service.hash_password", AsyncMock(return_value="hashed")):
            operator = await OperatorService(mock_db).create_operator(OperatorCreate(
                username="desk2", email="Desk2@Example.com", password="secret1",
                first_name="Desk", last_name="Two"
            ))

        assert operator["password_hash"] == "hashed"
        assert "password" not in operator
        assert operator["email"] == "desk2@example.com"
        assert operator["role"] == "operator"

    @pytest.mark.asyncio
    async def test_create_duplicate_username(self, mock_db):
        mock_db.operators.find_one.return_value = {"_id": ObjectId(), "username": "desk"}

        with pytest.raises(Conflict) as exc:
            await OperatorService(mock_db).create_operator(OperatorCreate(
                username="desk", email="new@example.com", password="secret1",
                first_name="Desk", last_name="One"
            ))
        assert exc.value.key == "username_taken"

    @pytest.mark.asyncio
    async def test_update_without_password_keeps_hash(self, mock_db):
        existing = {"_id": ObjectId(), "username": "desk", "password_hash": "old"}
        mock_db.operators.find_one.side_effect = [existing, None]

        operator = await OperatorService(mock_db).update_operator(
            str(existing["_id"]), OperatorUpdate(first_name="Renamed")
        )

        assert operator["password_hash"] == "old"
        changes = mock_db.operators.update_one.await_args.args[1]["$set"]
        assert "password_hash" not in changes

    @pytest.mark.asyncio
    async def test_admin_cannot_be_deleted(self, mock_db):
        admin = {"_id": ObjectId(), "username": "admin", "role": "admin"}
        mock_db.operators.find_one.return_value = admin

        with pytest.raises(ValidationFailed) as exc:
            await OperatorService(mock_db).delete_operator(str(admin["_id"]))
        assert exc.value.key == "admin_delete_forbidden"
        mock_db.operators.delete_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_revokes_sessions(self, mock_db):
        operator = {"_id": ObjectId(), "username": "desk", "role": "operator"}
        mock_db.operators.find_one.return_value = operator

        await OperatorService(mock_db).delete_operator(str(operator["_id"]))

        mock_db.user_sessions.update_many.assert_awaited_once_with(
            {"operator_id": str(operator["_id"])}, {"$set": {"is_active": False}}
        )

    @pytest.mark.asyncio
    async def test_ensure_admin_resets_existing(self, mock_db):
        existing = {"_id": ObjectId(), "username": "admin", "role": "operator"}
        mock_db.operators.find_one.return_value = existing

        with patch("gamehouse.services.operator_service.hash_password", AsyncMock(return_value="hashed")):
            operator = await OperatorService(mock_db).ensure_admin("admin", "admin@example.com", "secret1")

        assert operator["role"] == "admin"
        assert operator["password_hash"] == "hashed"
