"""
Utility modules for the game house back office
"""

from .database import GameHouseDatabase, serialize_document, to_object_id, utcnow

__all__ = [
    "GameHouseDatabase",
    "serialize_document",
    "to_object_id",
    "utcnow",
]
