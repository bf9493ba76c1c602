"""Goal HTTP router."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import get_current_user_id
from app.db import get_session
from app.goals.engine import GoalEngine
from app.goals.schemas import DeleteResult, GoalFilters, GoalOut

router = APIRouter(prefix="/api", tags=["goals"])


async def get_engine(session: AsyncSession = Depends(get_session)) -> GoalEngine:
    return GoalEngine(session)


def goal_filters(
    start: datetime | None = Query(default=None, description="Window start (needs end)"),
    end: datetime | None = Query(default=None, description="Window end (needs start)"),
    active: bool | None = Query(default=None),
    pass_: bool | None = Query(default=None, alias="pass"),
    type: str | None = Query(default=None),
) -> GoalFilters:
    return GoalFilters(start=start, end=end, active=active, passed=pass_, type=type)


# ---------------------------------------------------------------------------
# Single goal
# ---------------------------------------------------------------------------


@router.post("/habits/{habit_id}/goal", response_model=GoalOut)
async def create_goal(
    habit_id: str,
    body: dict[str, Any] = Body(...),
    engine: GoalEngine = Depends(get_engine),
    _: str = Depends(get_current_user_id),
) -> GoalOut:
    goal = await engine.create_goal({**body, "habitId": habit_id})
    return GoalOut.from_record(goal)


@router.put("/goal/{goal_id}", response_model=GoalOut)
async def update_goal(
    goal_id: str,
    body: dict[str, Any] = Body(...),
    engine: GoalEngine = Depends(get_engine),
    _: str = Depends(get_current_user_id),
) -> GoalOut:
    return GoalOut.from_record(await engine.update_goal(goal_id, body))


@router.post("/goal/{goal_id}/deactivate", response_model=GoalOut)
async def deactivate_goal(
    goal_id: str,
    engine: GoalEngine = Depends(get_engine),
    _: str = Depends(get_current_user_id),
) -> GoalOut:
    return GoalOut.from_record(await engine.deactivate_goal(goal_id))


@router.delete("/goal/{goal_id}", response_model=DeleteResult)
async def delete_goal(
    goal_id: str,
    engine: GoalEngine = Depends(get_engine),
    _: str = Depends(get_current_user_id),
) -> DeleteResult:
    return DeleteResult(deleted_count=await engine.delete_goal(goal_id))


@router.get("/goal/{goal_id}", response_model=GoalOut)
async def get_goal(
    goal_id: str,
    engine: GoalEngine = Depends(get_engine),
    _: str = Depends(get_current_user_id),
) -> GoalOut:
    return GoalOut.from_record(await engine.get_goal(goal_id))


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------


@router.get("/habits/{habit_id}/goals", response_model=list[GoalOut])
async def list_habit_goals(
    habit_id: str,
    filters: GoalFilters = Depends(goal_filters),
    engine: GoalEngine = Depends(get_engine),
    user_id: str = Depends(get_current_user_id),
) -> list[GoalOut]:
    goals = await engine.list_goals_for_habit(user_id, habit_id, filters)
    return [GoalOut.from_record(g) for g in goals]


@router.get("/goals/all", response_model=list[GoalOut])
async def list_user_goals(
    filters: GoalFilters = Depends(goal_filters),
    engine: GoalEngine = Depends(get_engine),
    user_id: str = Depends(get_current_user_id),
) -> list[GoalOut]:
    goals = await engine.list_goals_for_user(user_id, filters)
    return [GoalOut.from_record(g) for g in goals]
