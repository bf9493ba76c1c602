"""Goal engine — goal invariants at the request boundary.

Rules enforced here:
- a goal's end must be strictly after its start (create and update);
- at most one active goal per habit (explicit check, backed by a
  partial unique index in the store);
- active only ever goes from true to false.

The engine holds no state between requests; every call works against the
session it was built with.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.goals.errors import (
    DuplicateActiveGoal,
    InvalidId,
    InvalidReference,
    InvalidTimeRange,
    NotFound,
    ValidationError,
)
from app.goals.ids import is_valid_object_id
from app.goals.models import Goal
from app.goals.repository import GoalRepository
from app.goals.schemas import GoalFilters, GoalPayload, validate_goal_payload

logger = logging.getLogger(__name__)

# Fields an update may overwrite. start, habitId and userId stay fixed.
MUTABLE_FIELDS = ("target", "end", "type", "name", "period")


def _check_payload(data: Any) -> GoalPayload:
    payload, errors = validate_goal_payload(data)
    if payload is None:
        raise ValidationError([e.as_dict() for e in errors])
    if payload.end <= payload.start:
        raise InvalidTimeRange()
    return payload


def _check_id(value: str) -> None:
    if not is_valid_object_id(value):
        raise InvalidId()


class GoalEngine:
    def __init__(self, session: AsyncSession, repository: GoalRepository | None = None):
        self.repo = repository or GoalRepository(session)

    async def create_goal(self, data: Any) -> Goal:
        """Validate and persist a new goal.

        Order: schema, time range, one-active-per-habit, then the habit and
        user references. The new goal starts with pass=false, active=true.
        """
        payload = _check_payload(data)

        existing = await self.repo.find_active_for_habit(payload.habit_id)
        if existing is not None:
            logger.info(
                "Rejected goal for habit %s: goal %s is still active",
                payload.habit_id,
                existing.id,
            )
            raise DuplicateActiveGoal()

        if not await self.repo.habit_exists(payload.habit_id):
            raise InvalidReference("Habit doesn't exist")
        if not await self.repo.user_exists(payload.user_id):
            raise InvalidReference("User doesn't exist")

        goal = Goal(
            user_id=payload.user_id,
            habit_id=payload.habit_id,
            start=payload.start,
            end=payload.end,
            type=payload.type,
            name=payload.name,
            period=payload.period,
            target=payload.target,
            passed=False,
            active=True,
        )
        goal = await self.repo.insert(goal)
        logger.info("Created goal %s for habit %s", goal.id, goal.habit_id)
        return goal

    async def update_goal(self, goal_id: str, data: Any) -> Goal:
        """Overwrite target/end/type/name/period; pass and active are untouched."""
        _check_id(goal_id)
        payload = _check_payload(data)

        goal = await self.repo.get(goal_id)
        if goal is None:
            raise NotFound.entity("Goal")

        # start is immutable, so the new end is checked against the stored one
        if payload.end <= goal.start_utc:
            raise InvalidTimeRange()

        for field in MUTABLE_FIELDS:
            setattr(goal, field, getattr(payload, field))
        goal = await self.repo.save(goal)
        logger.info("Updated goal %s", goal.id)
        return goal

    async def deactivate_goal(self, goal_id: str) -> Goal:
        goal = await self.get_goal(goal_id)
        if goal.active:
            goal.active = False
            goal = await self.repo.save(goal)
            logger.info("Deactivated goal %s", goal.id)
        return goal

    async def delete_goal(self, goal_id: str) -> int:
        """Delete a goal; returns the number of records removed (1)."""
        _check_id(goal_id)
        if await self.repo.get(goal_id) is None:
            raise NotFound.entity("Goal")
        deleted = await self.repo.delete(goal_id)
        logger.info("Deleted goal %s", goal_id)
        return deleted

    async def get_goal(self, goal_id: str) -> Goal:
        # Not scoped to the caller: any authenticated user can read any goal id.
        _check_id(goal_id)
        goal = await self.repo.get(goal_id)
        if goal is None:
            raise NotFound.entity("Goal")
        return goal

    async def list_goals_for_habit(
        self, user_id: str, habit_id: str, filters: GoalFilters
    ) -> Sequence[Goal]:
        _check_id(habit_id)
        if not await self.repo.habit_exists(habit_id):
            raise NotFound.entity("Habit")
        return await self.repo.find(filters, user_id=user_id, habit_id=habit_id)

    async def list_goals_for_user(self, user_id: str, filters: GoalFilters) -> Sequence[Goal]:
        return await self.repo.find(filters, user_id=user_id)
