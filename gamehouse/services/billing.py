"""
Session billing rules

Pure functions over session documents (plain dicts as stored in the
``sessions`` collection). They mutate the session in place and never touch
the database, so the session service can load, apply and persist in one
step. Every change ends with a full recomputation of ``total_cost`` from the
stored per-service totals.
"""

import math
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from gamehouse.errors import Conflict, InvalidState, NotFound, ValidationFailed
from gamehouse.models.catalog import PricingMode
from gamehouse.models.session import ServiceStatus, SessionStatus
from gamehouse.utils.database import ensure_utc

ONE_MINUTE = timedelta(minutes=1)


class BillingPolicy:
    """Rate policy for time-based services"""

    def __init__(self, rate_period_minutes: int = 1, minimum_billable_minutes: int = 1):
        if rate_period_minutes < 1:
            raise ValueError("rate_period_minutes must be at least 1")
        self.rate_period_minutes = rate_period_minutes
        self.minimum_billable_minutes = minimum_billable_minutes

    @classmethod
    def from_settings(cls, settings) -> "BillingPolicy":
        return cls(settings.rate_period_minutes, settings.minimum_billable_minutes)

    def time_cost(self, minutes: int, unit_price: float) -> int:
        """Cost of ``minutes`` of active time; nothing is charged below the minimum"""
        if minutes < self.minimum_billable_minutes:
            return 0
        return math.floor(minutes * unit_price / self.rate_period_minutes)


def whole_minutes(start: datetime, end: datetime) -> int:
    """Elapsed whole minutes between two instants, floored, never negative"""
    return max(0, (ensure_utc(end) - ensure_utc(start)) // ONE_MINUTE)


def unit_cost(unit_price: float, quantity: int) -> float:
    return unit_price * quantity


def is_time_based(entry: Dict[str, Any]) -> bool:
    return entry.get("pricing_mode") == PricingMode.TIME_BASED.value


def recalculate_total(session: Dict[str, Any]) -> float:
    """Set and return total_cost as the sum of attached service totals"""
    total = sum(entry.get("total_cost", 0) for entry in session.get("services", []))
    session["total_cost"] = total
    return total


def find_service(session: Dict[str, Any], service_id: Any) -> Optional[Dict[str, Any]]:
    for entry in session.get("services", []):
        if str(entry.get("service_id")) == str(service_id):
            return entry
    return None


def _require_service(session: Dict[str, Any], service_id: Any) -> Dict[str, Any]:
    entry = find_service(session, service_id)
    if entry is None:
        raise NotFound("service_not_in_session")
    return entry


def _require_open(session: Dict[str, Any]):
    if session.get("status") == SessionStatus.COMPLETED.value:
        raise InvalidState("session_completed")


def attach_service(
    session: Dict[str, Any],
    service: Dict[str, Any],
    quantity: int,
    now: datetime
) -> Dict[str, Any]:
    """
    Attach a catalog service to a session

    Unit-based services are priced immediately and marked completed.
    Time-based services start accruing from ``now`` at zero cost.

    Raises:
        InvalidState: session already completed
        Conflict: service already attached
    """
    _require_open(session)
    if quantity < 1:
        raise ValidationFailed("validation_failed")
    if find_service(session, service["_id"]) is not None:
        raise Conflict("service_already_attached")

    pricing_mode = service["pricing_mode"]
    unit_price = service["unit_price"]
    entry = {
        "service_id": service["_id"],
        "service_name": service["name"],
        "pricing_mode": pricing_mode,
        "unit_price": unit_price,
        "quantity": quantity,
        "start_time": now,
        "end_time": None,
        "is_paused": False,
        "paused_at": None,
        "total_paused_minutes": 0,
        "duration_minutes": 0,
    }
    if pricing_mode == PricingMode.UNIT_BASED.value:
        entry["status"] = ServiceStatus.COMPLETED.value
        entry["total_cost"] = unit_cost(unit_price, quantity)
    else:
        entry["status"] = ServiceStatus.ACTIVE.value
        entry["total_cost"] = 0

    session.setdefault("services", []).append(entry)
    recalculate_total(session)
    return entry


def pause_service(session: Dict[str, Any], service_id: Any, now: datetime) -> Dict[str, Any]:
    """Pause a running time-based service"""
    _require_open(session)
    entry = _require_service(session, service_id)
    if not is_time_based(entry):
        raise InvalidState("only_time_based_pause")
    if entry.get("is_paused"):
        raise InvalidState("service_already_paused")
    if entry.get("end_time") is not None:
        raise InvalidState("service_finished")

    entry["is_paused"] = True
    entry["paused_at"] = now
    entry["status"] = ServiceStatus.PAUSED.value
    return entry


def resume_service(session: Dict[str, Any], service_id: Any, now: datetime) -> int:
    """
    Resume a paused time-based service

    Returns:
        Whole minutes added to total_paused_minutes
    """
    _require_open(session)
    entry = _require_service(session, service_id)
    if not is_time_based(entry):
        raise InvalidState("only_time_based_resume")
    if not entry.get("is_paused") or entry.get("paused_at") is None:
        raise InvalidState("service_not_paused")

    paused_minutes = whole_minutes(entry["paused_at"], now)
    entry["total_paused_minutes"] = entry.get("total_paused_minutes", 0) + paused_minutes
    entry["is_paused"] = False
    entry["paused_at"] = None
    entry["status"] = ServiceStatus.ACTIVE.value
    return paused_minutes


def active_minutes(entry: Dict[str, Any], end: datetime) -> int:
    """Elapsed minutes from start to ``end`` less paused minutes"""
    elapsed = whole_minutes(entry["start_time"], end)
    return max(0, elapsed - entry.get("total_paused_minutes", 0))


def edit_service(
    session: Dict[str, Any],
    service_id: Any,
    policy: BillingPolicy,
    quantity: Optional[int] = None,
    start_time: Optional[datetime] = None,
    end_time: Optional[datetime] = None
) -> Dict[str, Any]:
    """
    Correct quantity or times of an attached service and reprice it

    Raises:
        ValidationFailed: nothing to change, or end before start
    """
    if quantity is None and start_time is None and end_time is None:
        raise ValidationFailed("no_update_data")
    entry = _require_service(session, service_id)

    if quantity is not None:
        if quantity < 1:
            raise ValidationFailed("validation_failed")
        entry["quantity"] = quantity
        if not is_time_based(entry):
            entry["total_cost"] = math.floor(unit_cost(entry["unit_price"], quantity))

    if start_time is not None:
        entry["start_time"] = ensure_utc(start_time)
    if end_time is not None:
        entry["end_time"] = ensure_utc(end_time)

    if is_time_based(entry) and entry.get("end_time") is not None:
        if ensure_utc(entry["end_time"]) < ensure_utc(entry["start_time"]):
            raise ValidationFailed("validation_failed")
        minutes = active_minutes(entry, entry["end_time"])
        entry["duration_minutes"] = minutes
        entry["total_cost"] = policy.time_cost(minutes, entry["unit_price"])
        entry["is_paused"] = False
        entry["paused_at"] = None
        entry["status"] = ServiceStatus.COMPLETED.value

    recalculate_total(session)
    return entry


def detach_service(session: Dict[str, Any], service_id: Any) -> Dict[str, Any]:
    """Remove a service from a session"""
    _require_open(session)
    entry = _require_service(session, service_id)
    session["services"] = [
        item for item in session["services"] if str(item.get("service_id")) != str(service_id)
    ]
    recalculate_total(session)
    return entry


def finalize_service(entry: Dict[str, Any], now: datetime, policy: BillingPolicy):
    """Close a still-running time-based service; paused ones stop at paused_at"""
    end = entry["paused_at"] if entry.get("is_paused") and entry.get("paused_at") else now
    minutes = active_minutes(entry, end)
    entry["end_time"] = end
    entry["duration_minutes"] = minutes
    entry["total_cost"] = policy.time_cost(minutes, entry["unit_price"])
    entry["is_paused"] = False
    entry["paused_at"] = None
    entry["status"] = ServiceStatus.COMPLETED.value


def complete_session(
    session: Dict[str, Any],
    now: datetime,
    policy: BillingPolicy,
    operator_id: Optional[str] = None
) -> Dict[str, Any]:
    """
    Close a session and fix its final costs

    Raises:
        InvalidState: session already completed
    """
    _require_open(session)
    for entry in session.get("services", []):
        if is_time_based(entry):
            if entry.get("end_time") is None:
                finalize_service(entry, now, policy)
        else:
            entry["total_cost"] = math.floor(unit_cost(entry["unit_price"], entry.get("quantity", 1)))
            entry["status"] = ServiceStatus.COMPLETED.value

    session["status"] = SessionStatus.COMPLETED.value
    session["end_time"] = now
    session["completed_by_operator"] = operator_id
    recalculate_total(session)
    return session


def running_cost(session: Dict[str, Any], now: datetime, policy: BillingPolicy) -> float:
    """Projected total if the session were completed at ``now``; does not mutate"""
    total = 0
    for entry in session.get("services", []):
        if is_time_based(entry) and entry.get("end_time") is None:
            end = entry["paused_at"] if entry.get("is_paused") and entry.get("paused_at") else now
            minutes = active_minutes(entry, end)
            total += policy.time_cost(minutes, entry["unit_price"])
        else:
            total += entry.get("total_cost", 0)
    return total
