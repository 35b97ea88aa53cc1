"""
Session billing rule tests
"""

from datetime import datetime, timedelta

import pytest

from gamehouse.errors import Conflict, InvalidState, NotFound, ValidationFailed
from gamehouse.services import billing
from gamehouse.services.billing import BillingPolicy


@pytest.fixture
def policy():
    return BillingPolicy(rate_period_minutes=1, minimum_billable_minutes=1)


class TestBillingPolicy:
    def test_time_cost_per_minute(self, policy):
        assert policy.time_cost(90, 1000) == 90000

    def test_time_cost_below_minimum_is_free(self):
        policy = BillingPolicy(rate_period_minutes=60, minimum_billable_minutes=5)
        assert policy.time_cost(4, 60000) == 0
        assert policy.time_cost(5, 60000) == 5000

    def test_time_cost_floors(self):
        policy = BillingPolicy(rate_period_minutes=60)
        assert policy.time_cost(7, 1000) == 116

    def test_rejects_zero_rate_period(self):
        with pytest.raises(ValueError):
            BillingPolicy(rate_period_minutes=0)

    def test_whole_minutes_never_negative(self, now):
        assert billing.whole_minutes(now, now - timedelta(minutes=5)) == 0
        assert billing.whole_minutes(now, now + timedelta(seconds=119)) == 1

    def test_naive_datetimes_treated_as_utc(self, now):
        naive = now.replace(tzinfo=None)
        assert billing.whole_minutes(naive, now + timedelta(minutes=3)) == 3


class TestAttachService:
    def test_unit_based_priced_immediately(self, open_session, unit_service, now):
        entry = billing.attach_service(open_session, unit_service, 2, now)

        assert entry["status"] == "completed"
        assert entry["total_cost"] == 100000
        assert open_session["total_cost"] == 100000

    def test_time_based_starts_at_zero(self, open_session, time_service, now):
        entry = billing.attach_service(open_session, time_service, 1, now)

        assert entry["status"] == "active"
        assert entry["total_cost"] == 0
        assert entry["start_time"] == now
        assert entry["is_paused"] is False

    def test_duplicate_rejected(self, open_session, unit_service, now):
        billing.attach_service(open_session, unit_service, 1, now)
        with pytest.raises(Conflict) as exc:
            billing.attach_service(open_session, unit_service, 1, now)
        assert exc.value.key == "service_already_attached"
        assert len(open_session["services"]) == 1

    def test_completed_session_rejected(self, open_session, unit_service, now):
        open_session["status"] = "completed"
        with pytest.raises(InvalidState):
            billing.attach_service(open_session, unit_service, 1, now)


class TestPauseResume:
    def test_pause_then_resume_accumulates_minutes(self, open_session, time_service, now):
        billing.attach_service(open_session, time_service, 1, now)
        sid = time_service["_id"]

        billing.pause_service(open_session, sid, now + timedelta(minutes=10))
        added = billing.resume_service(open_session, sid, now + timedelta(minutes=13))

        entry = billing.find_service(open_session, sid)
        assert added == 3
        assert entry["total_paused_minutes"] == 3
        assert entry["is_paused"] is False
        assert entry["paused_at"] is None

    def test_paused_minutes_not_billed(self, open_session, time_service, now, policy):
        billing.attach_service(open_session, time_service, 1, now)
        sid = time_service["_id"]
        billing.pause_service(open_session, sid, now + timedelta(minutes=10))
        billing.resume_service(open_session, sid, now + timedelta(minutes=13))

        billing.complete_session(open_session, now + timedelta(minutes=30), policy)

        entry = billing.find_service(open_session, sid)
        assert entry["duration_minutes"] == 27
        assert entry["total_cost"] == 27000

    def test_pause_twice_rejected(self, open_session, time_service, now):
        billing.attach_service(open_session, time_service, 1, now)
        billing.pause_service(open_session, time_service["_id"], now)
        with pytest.raises(InvalidState) as exc:
            billing.pause_service(open_session, time_service["_id"], now)
        assert exc.value.key == "service_already_paused"

    def test_resume_unpaused_rejected(self, open_session, time_service, now):
        billing.attach_service(open_session, time_service, 1, now)
        with pytest.raises(InvalidState) as exc:
            billing.resume_service(open_session, time_service["_id"], now)
        assert exc.value.key == "service_not_paused"

    def test_pause_unit_based_rejected(self, open_session, unit_service, now):
        billing.attach_service(open_session, unit_service, 1, now)
        with pytest.raises(InvalidState) as exc:
            billing.pause_service(open_session, unit_service["_id"], now)
        assert exc.value.key == "only_time_based_pause"

    def test_pause_missing_service(self, open_session, now):
        with pytest.raises(NotFound):
            billing.pause_service(open_session, "64b000000000000000000000", now)


class TestCompleteSession:
    def test_total_is_sum_of_services(self, open_session, unit_service, time_service, now, policy):
        billing.attach_service(open_session, unit_service, 2, now)
        billing.attach_service(open_session, time_service, 1, now)

        billing.complete_session(open_session, now + timedelta(minutes=45), policy, operator_id="op-1")

        assert open_session["status"] == "completed"
        assert open_session["completed_by_operator"] == "op-1"
        assert open_session["total_cost"] == 100000 + 45000
        assert open_session["total_cost"] == sum(s["total_cost"] for s in open_session["services"])
        assert all(s["status"] == "completed" for s in open_session["services"])

    def test_paused_service_ends_at_paused_at(self, open_session, time_service, now, policy):
        billing.attach_service(open_session, time_service, 1, now)
        paused_at = now + timedelta(minutes=20)
        billing.pause_service(open_session, time_service["_id"], paused_at)

        billing.complete_session(open_session, now + timedelta(hours=2), policy)

        entry = billing.find_service(open_session, time_service["_id"])
        assert entry["end_time"] == paused_at
        assert entry["total_cost"] == 20000

    def test_complete_twice_rejected(self, open_session, now, policy):
        billing.complete_session(open_session, now, policy)
        with pytest.raises(InvalidState):
            billing.complete_session(open_session, now, policy)

    def test_running_cost_does_not_mutate(self, open_session, time_service, now, policy):
        billing.attach_service(open_session, time_service, 1, now)

        cost = billing.running_cost(open_session, now + timedelta(minutes=12), policy)

        assert cost == 12000
        assert open_session["total_cost"] == 0
        assert billing.find_service(open_session, time_service["_id"])["end_time"] is None


class TestEditAndDetach:
    def test_edit_unit_quantity_reprices(self, open_session, unit_service, now, policy):
        billing.attach_service(open_session, unit_service, 1, now)

        billing.edit_service(open_session, unit_service["_id"], policy, quantity=3)

        assert open_session["total_cost"] == 150000

    def test_fractional_unit_price_floored_on_edit_and_completion(self, open_session, unit_service, now, policy):
        chips = {**unit_service, "name": "Chips", "unit_price": 12.5}
        entry = billing.attach_service(open_session, chips, 1, now)
        assert entry["total_cost"] == 12.5

        billing.edit_service(open_session, chips["_id"], policy, quantity=1)
        assert open_session["total_cost"] == 12

        billing.complete_session(open_session, now, policy)
        assert open_session["total_cost"] == 12

    def test_edit_time_end_completes_service(self, open_session, time_service, now, policy):
        billing.attach_service(open_session, time_service, 1, now)

        entry = billing.edit_service(
            open_session, time_service["_id"], policy, end_time=now + timedelta(minutes=30)
        )

        assert entry["status"] == "completed"
        assert entry["total_cost"] == 30000
        assert open_session["total_cost"] == 30000

    def test_edit_end_before_start_rejected(self, open_session, time_service, now, policy):
        billing.attach_service(open_session, time_service, 1, now)
        with pytest.raises(ValidationFailed):
            billing.edit_service(open_session, time_service["_id"], policy, end_time=now - timedelta(minutes=1))

    def test_edit_without_changes_rejected(self, open_session, unit_service, now, policy):
        billing.attach_service(open_session, unit_service, 1, now)
        with pytest.raises(ValidationFailed) as exc:
            billing.edit_service(open_session, unit_service["_id"], policy)
        assert exc.value.key == "no_update_data"

    def test_edit_accepts_naive_times(self, open_session, time_service, now, policy):
        billing.attach_service(open_session, time_service, 1, now)
        naive_end = datetime(2024, 5, 1, 18, 10)

        entry = billing.edit_service(open_session, time_service["_id"], policy, end_time=naive_end)

        assert entry["duration_minutes"] == 10

    def test_detach_recomputes_total(self, open_session, unit_service, time_service, now):
        billing.attach_service(open_session, unit_service, 2, now)
        billing.attach_service(open_session, time_service, 1, now)

        billing.detach_service(open_session, unit_service["_id"])

        assert open_session["total_cost"] == 0
        assert len(open_session["services"]) == 1
