"""
Customer service business logic
"""

import math
import re
from typing import Any, Dict, Optional

import structlog
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError

from gamehouse.errors import Conflict, NotFound, ValidationFailed
from gamehouse.models.customer import CustomerCreate, CustomerUpdate, Pagination
from gamehouse.utils.database import serialize_document, to_object_id, utcnow

logger = structlog.get_logger(__name__)


class CustomerService:
    """Customer directory"""

    def __init__(self, db):
        self.db = db

    @staticmethod
    def search_filter(search: Optional[str]) -> Dict[str, Any]:
        if not search:
            return {}
        pattern = {"$regex": re.escape(search.strip()), "$options": "i"}
        return {"$or": [{"first_name": pattern}, {"last_name": pattern}, {"phone": pattern}]}

    async def list_customers(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        search: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        List customers

        Without paging parameters every customer is returned sorted by name;
        with them, newest first plus a pagination block.
        """
        conditions = self.search_filter(search)

        if page is None and limit is None:
            customers = await (
                self.db.customers.find(conditions)
                .sort([("first_name", ASCENDING), ("last_name", ASCENDING)])
                .to_list()
            )
            return {"customers": serialize_document(customers)}

        page = page or 1
        limit = limit or 10
        total = await self.db.customers.count_documents(conditions)
        customers = await (
            self.db.customers.find(conditions)
            .sort("created_at", DESCENDING)
            .skip((page - 1) * limit)
            .limit(limit)
            .to_list()
        )
        total_pages = math.ceil(total / limit) if total else 0
        pagination = Pagination(
            current_page=page,
            total_pages=total_pages,
            total_customers=total,
            limit=limit,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )
        return {"customers": serialize_document(customers), "pagination": pagination.model_dump()}

    async def get_customer(self, customer_id: str) -> Dict[str, Any]:
        customer = await self.db.customers.find_one({"_id": to_object_id(customer_id)})
        if customer is None:
            raise NotFound("customer_not_found")
        return customer

    async def create_customer(self, data: CustomerCreate) -> Dict[str, Any]:
        """Create a customer; phone numbers are unique"""
        if await self.db.customers.find_one({"phone": data.phone}):
            raise Conflict("phone_exists")

        now = utcnow()
        document = {
            **data.model_dump(),
            "registration_date": now,
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = await self.db.customers.insert_one(document)
        except DuplicateKeyError:
            raise Conflict("phone_exists")
        document["_id"] = result.inserted_id
        logger.info("Customer created", customer_id=str(result.inserted_id))
        return document

    async def update_customer(self, customer_id: str, data: CustomerUpdate) -> Dict[str, Any]:
        """Update name or phone; a new phone must not belong to another customer"""
        changes = data.model_dump(exclude_none=True)
        if not changes:
            raise ValidationFailed("no_update_data")

        object_id = to_object_id(customer_id)
        existing = await self.db.customers.find_one({"_id": object_id})
        if existing is None:
            raise NotFound("customer_not_found")

        if "phone" in changes:
            duplicate = await self.db.customers.find_one(
                {"phone": changes["phone"], "_id": {"$ne": object_id}}
            )
            if duplicate:
                raise Conflict("phone_exists")

        changes["updated_at"] = utcnow()
        try:
            await self.db.customers.update_one({"_id": object_id}, {"$set": changes})
        except DuplicateKeyError:
            raise Conflict("phone_exists")
        existing.update(changes)
        return existing

    async def delete_customer(self, customer_id: str) -> Dict[str, Any]:
        object_id = to_object_id(customer_id)
        customer = await self.db.customers.find_one({"_id": object_id})
        if customer is None:
            raise NotFound("customer_not_found")
        await self.db.customers.delete_one({"_id": object_id})
        logger.info("Customer deleted", customer_id=customer_id)
        return customer
