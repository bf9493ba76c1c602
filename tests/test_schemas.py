"""Tests for payload validation, wire format and object ids."""

import itertools
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from app.goals import ids
from app.goals.ids import is_valid_object_id, new_object_id
from app.goals.models import Goal
from app.goals.schemas import FieldError, GoalFilters, GoalOut, validate_goal_payload
from tests.conftest import day, goal_body

USER = "5c8a1d5b0190b214360dc031"
HABIT = "5c8a1d5b0190b214360dc032"


def _fields(errors: list[FieldError]) -> set[str]:
    return {e.field for e in errors}


class TestValidateGoalPayload:
    def test_valid_body(self):
        payload, errors = validate_goal_payload(goal_body(USER, HABIT))
        assert errors == []
        assert payload is not None
        assert payload.user_id == USER
        assert payload.habit_id == HABIT
        assert payload.target == 100.0
        assert payload.start.tzinfo is not None

    def test_fractional_target(self):
        payload, errors = validate_goal_payload(goal_body(USER, HABIT, target=10.5))
        assert errors == []
        assert payload.target == 10.5

    def test_required_fields(self):
        for field in ("userId", "habitId", "start", "end", "type", "name", "period", "target"):
            body = goal_body(USER, HABIT)
            del body[field]
            payload, errors = validate_goal_payload(body)
            assert payload is None
            assert field in _fields(errors), field

    def test_user_id_must_be_string(self):
        _, errors = validate_goal_payload(goal_body(USER, HABIT, userId=12345))
        assert _fields(errors) == {"userId"}

    def test_habit_id_must_be_string(self):
        _, errors = validate_goal_payload(goal_body(USER, HABIT, habitId=12345.5))
        assert _fields(errors) == {"habitId"}

    def test_id_length_bounded(self):
        long_id = "12345678901234567890123456789"
        _, errors = validate_goal_payload(goal_body(long_id, long_id))
        assert _fields(errors) == {"userId", "habitId"}

    def test_type_length_bounded(self):
        _, errors = validate_goal_payload(goal_body(USER, HABIT, type="x" * 26))
        assert _fields(errors) == {"type"}

    def test_bad_dates(self):
        _, errors = validate_goal_payload(goal_body(USER, HABIT) | {"start": "abc", "end": "abc"})
        assert _fields(errors) == {"start", "end"}

    def test_target_must_be_number(self):
        _, errors = validate_goal_payload(goal_body(USER, HABIT, target="abcdef"))
        assert _fields(errors) == {"target"}

    def test_target_must_be_finite(self):
        for value in ("Infinity", "-Infinity", "NaN", float("inf"), float("nan")):
            payload, errors = validate_goal_payload(goal_body(USER, HABIT, target=value))
            assert payload is None, value
            assert _fields(errors) == {"target"}, value

    def test_status_flags_must_be_boolean(self):
        body = goal_body(USER, HABIT, active="bad")
        body["pass"] = "bad"
        _, errors = validate_goal_payload(body)
        assert _fields(errors) == {"active", "pass"}

    def test_unknown_field_rejected(self):
        _, errors = validate_goal_payload(goal_body(USER, HABIT, colour="red"))
        assert _fields(errors) == {"colour"}

    def test_not_an_object(self):
        payload, errors = validate_goal_payload(["not", "a", "dict"])
        assert payload is None
        assert errors

    def test_naive_dates_taken_as_utc(self):
        body = goal_body(USER, HABIT) | {"start": "2026-03-01T00:00:00", "end": "2026-03-02T00:00:00"}
        payload, _ = validate_goal_payload(body)
        assert payload.start == day(0)

    def test_offset_dates_normalized(self):
        body = goal_body(USER, HABIT) | {"start": "2026-03-01T02:00:00+02:00"}
        payload, _ = validate_goal_payload(body)
        assert payload.start == day(0)
        assert payload.start.utcoffset() == timedelta(0)


class TestGoalOut:
    def test_wire_aliases(self):
        goal = Goal(
            id=new_object_id(), user_id=USER, habit_id=HABIT,
            start=datetime(2026, 3, 1), end=datetime(2026, 3, 2),
            type="beat", name="n", period="week", target=5.0, passed=False, active=True,
        )
        data = GoalOut.from_record(goal).model_dump(mode="json", by_alias=True)
        assert data["_id"] == goal.id
        assert data["userId"] == USER
        assert data["habitId"] == HABIT
        assert data["pass"] is False
        assert data["active"] is True

    def test_naive_store_dates_get_utc(self):
        goal = Goal(
            id=new_object_id(), user_id=USER, habit_id=HABIT,
            start=datetime(2026, 3, 1), end=datetime(2026, 3, 2),
            type="beat", name="n", period="week", target=5.0, passed=False, active=True,
        )
        out = GoalOut.from_record(goal)
        assert out.start.tzinfo == timezone.utc


class TestGoalFilters:
    def test_window_needs_both_ends(self):
        assert GoalFilters(start=day(0)).window is None
        assert GoalFilters(end=day(0)).window is None
        assert GoalFilters(start=day(0), end=day(1)).window == (day(0), day(1))


class TestObjectIds:
    def test_shape(self):
        oid = new_object_id()
        assert len(oid) == 24
        assert is_valid_object_id(oid)

    def test_unique_and_ordered(self):
        ids = [new_object_id() for _ in range(100)]
        assert len(set(ids)) == 100
        assert ids == sorted(ids)

    def test_invalid(self):
        assert not is_valid_object_id("12345")
        assert not is_valid_object_id("z" * 24)
        assert not is_valid_object_id(None)
        assert not is_valid_object_id(12345)

    def test_counter_wrap_breaks_order_within_a_second(self):
        with patch.object(ids, "_counter", itertools.count(0xFFFFFE)), \
                patch.object(ids.time, "time", return_value=1_700_000_000):
            before, last, wrapped = (new_object_id() for _ in range(3))
        assert last.endswith("ffffff")
        assert wrapped.endswith("000000")
        assert len({before, last, wrapped}) == 3
        assert wrapped < before
