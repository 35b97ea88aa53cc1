"""
Shared fixtures for gamehouse tests
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId


def make_cursor(documents):
    """Mock of an async pymongo cursor supporting sort/skip/limit chains"""
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=documents)
    return cursor


def make_collection():
    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock()
    collection.update_one = AsyncMock()
    collection.update_many = AsyncMock()
    collection.delete_one = AsyncMock()
    collection.delete_many = AsyncMock()
    collection.count_documents = AsyncMock(return_value=0)
    collection.distinct = AsyncMock(return_value=[])
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.find_one_and_delete = AsyncMock(return_value=None)
    collection.find.return_value = make_cursor([])
    return collection


@pytest.fixture
def mock_db():
    """Database double exposing each collection as an attribute"""
    db = MagicMock()
    for name in (
        "customers", "categories", "services", "sessions", "operators",
        "user_sessions", "password_resets", "settings", "activity_logs", "backup_jobs",
    ):
        setattr(db, name, make_collection())
    db.collection.side_effect = lambda name: getattr(db, name)
    return db


@pytest.fixture
def now():
    return datetime(2024, 5, 1, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
def customer_doc():
    return {
        "_id": ObjectId(),
        "first_name": "Sara",
        "last_name": "Ahmadi",
        "phone": "09120000000",
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }


@pytest.fixture
def unit_service():
    return {
        "_id": ObjectId(),
        "name": "Soda",
        "pricing_mode": "unit-based",
        "unit_price": 50000,
        "is_active": True,
    }


@pytest.fixture
def time_service():
    return {
        "_id": ObjectId(),
        "name": "PS5 Station",
        "pricing_mode": "time-based",
        "unit_price": 1000,
        "is_active": True,
    }


@pytest.fixture
def open_session(customer_doc):
    return {
        "_id": ObjectId(),
        "customer_id": str(customer_doc["_id"]),
        "customer_name": "Sara Ahmadi",
        "status": "active",
        "services": [],
        "total_cost": 0,
        "start_time": datetime(2024, 5, 1, 17, 0, tzinfo=timezone.utc),
        "end_time": None,
    }


@pytest.fixture
def operator_user():
    return {"id": str(ObjectId()), "username": "desk", "role": "operator", "email": "desk@example.com"}


@pytest.fixture
def admin_user():
    return {"id": str(ObjectId()), "username": "admin", "role": "admin", "email": "admin@example.com"}
