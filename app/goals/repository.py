"""Async persistence for goals (and the habit/user lookups goals need).

Connectivity failures surface as StoreUnavailable; a violation of the
one-active-goal-per-habit index surfaces as DuplicateActiveGoal.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.goals.errors import DuplicateActiveGoal, StoreUnavailable
from app.goals.models import Goal, Habit, User
from app.goals.schemas import GoalFilters

logger = logging.getLogger(__name__)


@asynccontextmanager
async def store_errors(session: AsyncSession) -> AsyncIterator[None]:
    try:
        yield
    except OSError as exc:
        # Driver could not connect (refused, timed out); nothing to roll back.
        logger.error("Store unreachable: %s", exc)
        raise StoreUnavailable() from exc
    except (OperationalError, InterfaceError) as exc:
        logger.error("Store unavailable: %s", exc)
        await session.rollback()
        raise StoreUnavailable() from exc


class GoalRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    # -- lookups ------------------------------------------------------------

    async def get(self, goal_id: str) -> Goal | None:
        async with store_errors(self.session):
            return await self.session.get(Goal, goal_id)

    async def find_active_for_habit(self, habit_id: str) -> Goal | None:
        stmt = select(Goal).where(Goal.habit_id == habit_id, Goal.active.is_(True)).limit(1)
        async with store_errors(self.session):
            result = await self.session.execute(stmt)
            return result.scalars().first()

    async def habit_exists(self, habit_id: str) -> bool:
        async with store_errors(self.session):
            return await self.session.get(Habit, habit_id) is not None

    async def user_exists(self, user_id: str) -> bool:
        async with store_errors(self.session):
            return await self.session.get(User, user_id) is not None

    async def find(
        self,
        filters: GoalFilters,
        user_id: str | None = None,
        habit_id: str | None = None,
    ) -> Sequence[Goal]:
        """Filtered goal list ordered by id.

        Ids lead with a seconds timestamp and end in a per-process counter, so
        id order matches insertion order only approximately: goals written by
        different worker processes within the same second may interleave, and
        the 24-bit counter can wrap.

        The time window is a containment test: both the goal's start and
        its end must lie within [window_start, window_end].
        """
        stmt = select(Goal)
        if user_id is not None:
            stmt = stmt.where(Goal.user_id == user_id)
        if habit_id is not None:
            stmt = stmt.where(Goal.habit_id == habit_id)

        window = filters.window
        if window is not None:
            lo, hi = window
            stmt = stmt.where(Goal.start >= lo, Goal.start <= hi, Goal.end >= lo, Goal.end <= hi)

        if filters.active is not None:
            stmt = stmt.where(Goal.active.is_(filters.active))
        if filters.passed is not None:
            stmt = stmt.where(Goal.passed.is_(filters.passed))
        if filters.type is not None:
            stmt = stmt.where(Goal.type == filters.type)

        stmt = stmt.order_by(Goal.id)
        async with store_errors(self.session):
            result = await self.session.execute(stmt)
            return result.scalars().all()

    # -- writes -------------------------------------------------------------

    async def insert(self, goal: Goal) -> Goal:
        """Insert and commit; the partial unique index rejects a second active goal."""
        self.session.add(goal)
        async with store_errors(self.session):
            try:
                await self.session.commit()
            except IntegrityError as exc:
                await self.session.rollback()
                logger.warning("Active goal index rejected insert for habit %s", goal.habit_id)
                raise DuplicateActiveGoal() from exc
        return goal

    async def save(self, goal: Goal) -> Goal:
        async with store_errors(self.session):
            await self.session.commit()
        return goal

    async def delete(self, goal_id: str) -> int:
        async with store_errors(self.session):
            result = await self.session.execute(delete(Goal).where(Goal.id == goal_id))
            await self.session.commit()
        return result.rowcount or 0

    async def deactivate_expired(self, now: datetime) -> int:
        """Bulk-set active=false where end <= now. Returns rows modified."""
        stmt = (
            update(Goal)
            .where(Goal.end <= now, Goal.active.is_(True))
            .values(active=False)
            .execution_options(synchronize_session=False)
        )
        async with store_errors(self.session):
            result = await self.session.execute(stmt)
            await self.session.commit()
        return result.rowcount or 0
