"""
Operator management business logic
"""

from typing import Any, Dict, List, Optional

import structlog
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError

from gamehouse.errors import Conflict, NotFound, ValidationFailed
from gamehouse.models.operator import OperatorCreate, OperatorRole, OperatorUpdate
from gamehouse.utils.database import to_object_id, utcnow
from gamehouse.utils.security import hash_password

logger = structlog.get_logger(__name__)


class OperatorService:
    """Operator accounts"""

    def __init__(self, db):
        self.db = db

    async def list_operators(self) -> List[Dict[str, Any]]:
        return await (
            self.db.operators.find({}, {"password_hash": 0})
            .sort("created_at", DESCENDING)
            .to_list()
        )

    async def get_operator(self, operator_id: str) -> Dict[str, Any]:
        operator = await self.db.operators.find_one({"_id": to_object_id(operator_id)})
        if operator is None:
            raise NotFound("operator_not_found")
        return operator

    async def _check_unique(self, username: Optional[str], email: Optional[str], exclude_id=None):
        not_self = {"_id": {"$ne": exclude_id}} if exclude_id is not None else {}
        if username and await self.db.operators.find_one({"username": username, **not_self}):
            raise Conflict("username_taken")
        if email and await self.db.operators.find_one({"email": email, **not_self}):
            raise Conflict("email_taken")

    async def create_operator(self, data: OperatorCreate) -> Dict[str, Any]:
        """Create an operator; username and email must be unused"""
        await self._check_unique(data.username, data.email)

        now = utcnow()
        document = {
            **data.model_dump(mode="json", exclude={"password"}),
            "password_hash": await hash_password(data.password),
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = await self.db.operators.insert_one(document)
        except DuplicateKeyError:
            raise Conflict("username_taken")
        document["_id"] = result.inserted_id
        logger.info("Operator created", operator_id=str(result.inserted_id), role=data.role.value)
        return document

    async def update_operator(self, operator_id: str, data: OperatorUpdate) -> Dict[str, Any]:
        """Update profile fields; the password is replaced only when supplied"""
        changes = data.model_dump(mode="json", exclude_none=True)
        if not changes:
            raise ValidationFailed("no_update_data")

        operator = await self.get_operator(operator_id)
        await self._check_unique(changes.get("username"), changes.get("email"), exclude_id=operator["_id"])

        password = changes.pop("password", None)
        if password:
            changes["password_hash"] = await hash_password(password)
        changes["updated_at"] = utcnow()

        try:
            await self.db.operators.update_one({"_id": operator["_id"]}, {"$set": changes})
        except DuplicateKeyError:
            raise Conflict("username_taken")
        operator.update(changes)
        return operator

    async def delete_operator(self, operator_id: str) -> Dict[str, Any]:
        """Delete an operator; admin accounts are protected"""
        operator = await self.get_operator(operator_id)
        if operator.get("role") == OperatorRole.ADMIN.value:
            raise ValidationFailed("admin_delete_forbidden")
        await self.db.operators.delete_one({"_id": operator["_id"]})
        await self.db.user_sessions.update_many(
            {"operator_id": str(operator["_id"])},
            {"$set": {"is_active": False}}
        )
        logger.info("Operator deleted", operator_id=operator_id)
        return operator

    async def find_admins(self) -> List[Dict[str, Any]]:
        return await self.db.operators.find(
            {"role": OperatorRole.ADMIN.value}, {"password_hash": 0}
        ).to_list()

    async def ensure_admin(
        self,
        username: str,
        email: str,
        password: str,
        first_name: str = "Admin",
        last_name: str = "User"
    ) -> Dict[str, Any]:
        """Create an admin operator, or reset the password and role of an existing one"""
        existing = await self.db.operators.find_one({"username": username})
        if existing is None:
            return await self.create_operator(OperatorCreate(
                username=username,
                email=email,
                password=password,
                first_name=first_name,
                last_name=last_name,
                role=OperatorRole.ADMIN,
            ))

        changes = {
            "password_hash": await hash_password(password),
            "role": OperatorRole.ADMIN.value,
            "updated_at": utcnow(),
        }
        await self.db.operators.update_one({"_id": existing["_id"]}, {"$set": changes})
        existing.update(changes)
        logger.info("Admin operator reset", operator_id=str(existing["_id"]))
        return existing
