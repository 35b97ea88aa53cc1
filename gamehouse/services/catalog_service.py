"""
Service catalog business logic
Billable services and their categories
"""

from typing import Any, Dict, List

import structlog
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError

from gamehouse.errors import Conflict, NotFound, ValidationFailed
from gamehouse.models.catalog import CategoryCreate, CategoryUpdate, ServiceCreate, ServiceUpdate
from gamehouse.utils.database import to_object_id, utcnow

logger = structlog.get_logger(__name__)


class CatalogService:
    """Services and categories"""

    def __init__(self, db):
        self.db = db

    # ===== SERVICES =====

    async def list_services(self) -> List[Dict[str, Any]]:
        """Active services, newest first"""
        return await self.db.services.find({"is_active": True}).sort("created_at", DESCENDING).to_list()

    async def get_service(self, service_id: str) -> Dict[str, Any]:
        service = await self.db.services.find_one({"_id": to_object_id(service_id)})
        if service is None:
            raise NotFound("service_not_found")
        return service

    async def _check_category(self, category_id: str):
        if category_id and not await self.db.categories.find_one({"_id": to_object_id(category_id)}):
            raise NotFound("category_not_found")

    async def create_service(self, data: ServiceCreate) -> Dict[str, Any]:
        await self._check_category(data.category)
        now = utcnow()
        document = {**data.model_dump(mode="json"), "created_at": now, "updated_at": now}
        result = await self.db.services.insert_one(document)
        document["_id"] = result.inserted_id
        logger.info("Service created", service_id=str(result.inserted_id), name=data.name)
        return document

    async def update_service(self, service_id: str, data: ServiceUpdate) -> Dict[str, Any]:
        changes = data.model_dump(mode="json", exclude_none=True)
        if not changes:
            raise ValidationFailed("no_update_data")
        if "category" in changes:
            await self._check_category(changes["category"])

        service = await self.get_service(service_id)
        changes["updated_at"] = utcnow()
        await self.db.services.update_one({"_id": service["_id"]}, {"$set": changes})
        service.update(changes)
        return service

    async def delete_service(self, service_id: str) -> Dict[str, Any]:
        service = await self.get_service(service_id)
        await self.db.services.delete_one({"_id": service["_id"]})
        logger.info("Service deleted", service_id=service_id)
        return service

    # ===== CATEGORIES =====

    async def list_categories(self) -> List[Dict[str, Any]]:
        return await self.db.categories.find({}).sort("name", ASCENDING).to_list()

    async def get_category(self, category_id: str) -> Dict[str, Any]:
        category = await self.db.categories.find_one({"_id": to_object_id(category_id)})
        if category is None:
            raise NotFound("category_not_found")
        return category

    async def create_category(self, data: CategoryCreate) -> Dict[str, Any]:
        if await self.db.categories.find_one({"name": data.name}):
            raise Conflict("category_exists")
        now = utcnow()
        document = {**data.model_dump(), "created_at": now, "updated_at": now}
        try:
            result = await self.db.categories.insert_one(document)
        except DuplicateKeyError:
            raise Conflict("category_exists")
        document["_id"] = result.inserted_id
        return document

    async def update_category(self, category_id: str, data: CategoryUpdate) -> Dict[str, Any]:
        changes = data.model_dump(exclude_none=True)
        if not changes:
            raise ValidationFailed("no_update_data")

        category = await self.get_category(category_id)
        if "name" in changes:
            duplicate = await self.db.categories.find_one(
                {"name": changes["name"], "_id": {"$ne": category["_id"]}}
            )
            if duplicate:
                raise Conflict("category_exists")

        changes["updated_at"] = utcnow()
        try:
            await self.db.categories.update_one({"_id": category["_id"]}, {"$set": changes})
        except DuplicateKeyError:
            raise Conflict("category_exists")
        category.update(changes)
        return category

    async def delete_category(self, category_id: str) -> Dict[str, Any]:
        """Delete a category unless a service still references it"""
        category = await self.get_category(category_id)
        if await self.db.services.count_documents({"category": str(category["_id"])}, limit=1):
            raise Conflict("category_in_use")
        await self.db.categories.delete_one({"_id": category["_id"]})
        logger.info("Category deleted", category_id=category_id)
        return category
