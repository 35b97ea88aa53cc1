"""
Reports
Peak hours and customer loyalty over completed sessions
"""

from typing import Any, Dict, List

import structlog

from gamehouse.config import get_settings
from gamehouse.errors import ValidationFailed
from gamehouse.models.session import SessionStatus
from gamehouse.utils.database import to_object_id

logger = structlog.get_logger(__name__)

REPORT_TYPES = ("peak-hours", "customer-loyalty")
PERIODS = ("daily", "weekly", "monthly", "yearly")
OPENING_HOUR = 8
CLOSING_HOUR = 22
LOYALTY_LIMIT = 10

# $dayOfWeek is 1 for Sunday
WEEKDAY_NAMES = {
    "en": ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"],
    "fa": ["یکشنبه", "دوشنبه", "سه‌شنبه", "چهارشنبه", "پنجشنبه", "جمعه", "شنبه"],
}
MONTH_NAMES = {
    "en": ["January", "February", "March", "April", "May", "June", "July",
           "August", "September", "October", "November", "December"],
    "fa": ["فروردین", "اردیبهشت", "خرداد", "تیر", "مرداد", "شهریور",
           "مهر", "آبان", "آذر", "دی", "بهمن", "اسفند"],
}


def to_jalali_year(gregorian_year: int) -> int:
    """Approximate Solar Hijri year for a Gregorian year"""
    if gregorian_year >= 2023:
        return gregorian_year - 621
    return gregorian_year - 622


class ReportService:
    """Aggregations over completed sessions"""

    def __init__(self, db):
        self.db = db

    async def _count_by(self, operator: str) -> List[Dict[str, Any]]:
        timezone = get_settings().report_timezone
        pipeline = [
            {"$match": {"status": SessionStatus.COMPLETED.value}},
            {"$group": {
                "_id": {operator: {"date": "$start_time", "timezone": timezone}},
                "count": {"$sum": 1},
            }},
            {"$sort": {"_id": 1}},
        ]
        cursor = await self.db.sessions.aggregate(pipeline)
        return await cursor.to_list()

    async def peak_hours(self, period: str) -> List[Dict[str, Any]]:
        language = get_settings().language
        if period == "daily":
            rows = await self._count_by("$hour")
            return [
                {"hour": f"{row['_id']}:00", "count": row["count"]}
                for row in rows
                if OPENING_HOUR <= row["_id"] <= CLOSING_HOUR
            ]
        if period == "weekly":
            rows = await self._count_by("$dayOfWeek")
            names = WEEKDAY_NAMES[language]
            return [{"day": names[(row["_id"] - 1) % 7], "count": row["count"]} for row in rows]
        if period == "monthly":
            rows = await self._count_by("$month")
            names = MONTH_NAMES[language]
            return [{"month": names[(row["_id"] - 1) % 12], "count": row["count"]} for row in rows]
        if period == "yearly":
            rows = await self._count_by("$year")
            return [
                {"year": row["_id"], "jalali_year": to_jalali_year(row["_id"]), "count": row["count"]}
                for row in rows
            ]
        raise ValidationFailed("report_invalid")

    async def customer_loyalty(self) -> List[Dict[str, Any]]:
        """Top customers by number of completed sessions"""
        pipeline = [
            {"$match": {"status": SessionStatus.COMPLETED.value}},
            {"$group": {"_id": "$customer_id", "count": {"$sum": 1}}},
            {"$sort": {"count": -1}},
            {"$limit": LOYALTY_LIMIT},
        ]
        cursor = await self.db.sessions.aggregate(pipeline)
        rows = await cursor.to_list()

        ids = [to_object_id(row["_id"]) for row in rows if row["_id"]]
        customers = await self.db.customers.find({"_id": {"$in": ids}}).to_list()
        names = {str(c["_id"]): f"{c['first_name']} {c['last_name']}" for c in customers}

        return [
            {"customer_id": str(row["_id"]), "name": names.get(str(row["_id"]), "-"), "count": row["count"]}
            for row in rows
        ]

    async def get_report(self, report_type: str, period: str = None) -> List[Dict[str, Any]]:
        if report_type == "peak-hours":
            return await self.peak_hours(period)
        if report_type == "customer-loyalty":
            return await self.customer_loyalty()
        raise ValidationFailed("report_invalid")
