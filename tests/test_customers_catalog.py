"""
Customer and catalog service tests
"""

from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from gamehouse.errors import Conflict, NotFound, ValidationFailed
from gamehouse.models.catalog import CategoryCreate, ServiceCreate
from gamehouse.models.customer import CustomerCreate, CustomerUpdate
from gamehouse.services.catalog_service import CatalogService
from gamehouse.services.customer_service import CustomerService
from tests.conftest import make_cursor


class TestCustomerService:
    @pytest.mark.asyncio
    async def test_list_all_sorted_by_name(self, mock_db, customer_doc):
        mock_db.customers.find.return_value = make_cursor([customer_doc])

        result = await CustomerService(mock_db).list_customers()

        assert "pagination" not in result
        assert result["customers"][0]["id"] == str(customer_doc["_id"])
        mock_db.customers.find.return_value.sort.assert_called_once_with(
            [("first_name", 1), ("last_name", 1)]
        )

    @pytest.mark.asyncio
    async def test_list_paginated(self, mock_db, customer_doc):
        mock_db.customers.count_documents.return_value = 25
        mock_db.customers.find.return_value = make_cursor([customer_doc])

        result = await CustomerService(mock_db).list_customers(page=2, limit=10)

        assert result["pagination"] == {
            "current_page": 2,
            "total_pages": 3,
            "total_customers": 25,
            "limit": 10,
            "has_next_page": True,
            "has_prev_page": True,
        }
        mock_db.customers.find.return_value.skip.assert_called_once_with(10)

    def test_search_filter_escapes_regex(self):
        conditions = CustomerService.search_filter("0912+")
        assert conditions["$or"][2]["phone"]["$regex"] == r"0912\+"
        assert CustomerService.search_filter("") == {}

    @pytest.mark.asyncio
    async def test_create_rejects_duplicate_phone(self, mock_db, customer_doc):
        mock_db.customers.find_one.return_value = customer_doc

        with pytest.raises(Conflict) as exc:
            await CustomerService(mock_db).create_customer(
                CustomerCreate(first_name="Ali", last_name="Rezaei", phone="09120000000")
            )
        assert exc.value.key == "phone_exists"
        mock_db.customers.insert_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_duplicate_key_race(self, mock_db):
        mock_db.customers.insert_one.side_effect = DuplicateKeyError("dup")

        with pytest.raises(Conflict):
            await CustomerService(mock_db).create_customer(
                CustomerCreate(first_name="Ali", last_name="Rezaei", phone="09121111111")
            )

    @pytest.mark.asyncio
    async def test_create_customer(self, mock_db):
        inserted_id = ObjectId()
        mock_db.customers.insert_one.return_value = MagicMock(inserted_id=inserted_id)

        customer = await CustomerService(mock_db).create_customer(
            CustomerCreate(first_name=" Ali ", last_name="Rezaei", phone="09121111111")
        )

        assert customer["_id"] == inserted_id
        assert customer["first_name"] == "Ali"
        assert "registration_date" in customer

    @pytest.mark.asyncio
    async def test_update_phone_taken_by_other(self, mock_db, customer_doc):
        other = {**customer_doc, "_id": ObjectId()}
        mock_db.customers.find_one.side_effect = [customer_doc, other]

        with pytest.raises(Conflict):
            await CustomerService(mock_db).update_customer(
                str(customer_doc["_id"]), CustomerUpdate(phone="09123333333")
            )

    @pytest.mark.asyncio
    async def test_update_without_fields(self, mock_db, customer_doc):
        with pytest.raises(ValidationFailed) as exc:
            await CustomerService(mock_db).update_customer(str(customer_doc["_id"]), CustomerUpdate())
        assert exc.value.key == "no_update_data"

    @pytest.mark.asyncio
    async def test_delete_missing(self, mock_db):
        with pytest.raises(NotFound):
            await CustomerService(mock_db).delete_customer(str(ObjectId()))


class TestCatalogService:
    @pytest.mark.asyncio
    async def test_create_service_checks_category(self, mock_db):
        with pytest.raises(NotFound) as exc:
            await CatalogService(mock_db).create_service(ServiceCreate(
                name="PS5", pricing_mode="time-based", unit_price=1000, category=str(ObjectId())
            ))
        assert exc.value.key == "category_not_found"

    @pytest.mark.asyncio
    async def test_create_service(self, mock_db):
        mock_db.services.insert_one.return_value = MagicMock(inserted_id=ObjectId())

        service = await CatalogService(mock_db).create_service(ServiceCreate(
            name="Soda", pricing_mode="unit-based", unit_price=50000
        ))

        assert service["pricing_mode"] == "unit-based"
        assert service["unit_price"] == 50000

    @pytest.mark.asyncio
    async def test_list_services_only_active(self, mock_db, unit_service):
        mock_db.services.find.return_value = make_cursor([unit_service])

        services = await CatalogService(mock_db).list_services()

        assert services == [unit_service]
        mock_db.services.find.assert_called_once_with({"is_active": True})

    @pytest.mark.asyncio
    async def test_create_category_duplicate_name(self, mock_db):
        mock_db.categories.find_one.return_value = {"_id": ObjectId(), "name": "Consoles"}

        with pytest.raises(Conflict) as exc:
            await CatalogService(mock_db).create_category(CategoryCreate(name="Consoles"))
        assert exc.value.key == "category_exists"

    @pytest.mark.asyncio
    async def test_delete_category_in_use(self, mock_db):
        category = {"_id": ObjectId(), "name": "Consoles"}
        mock_db.categories.find_one.return_value = category
        mock_db.services.count_documents.return_value = 1

        with pytest.raises(Conflict) as exc:
            await CatalogService(mock_db).delete_category(str(category["_id"]))
        assert exc.value.key == "category_in_use"
        mock_db.categories.delete_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_unused_category(self, mock_db):
        category = {"_id": ObjectId(), "name": "Snacks"}
        mock_db.categories.find_one.return_value = category

        await CatalogService(mock_db).delete_category(str(category["_id"]))

        mock_db.categories.delete_one.assert_awaited_once_with({"_id": category["_id"]})
