"""Goal payloads and responses — Pydantic v2 models.

Wire format is camelCase (`userId`, `habitId`, `_id`, `pass`); attribute
names are snake_case.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.goals.clock import as_utc
from app.goals.models import Goal


class GoalPayload(BaseModel):
    """Body accepted by create and update."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    id: str | None = Field(default=None, alias="_id")
    user_id: str = Field(alias="userId", strict=True, min_length=1, max_length=25)
    habit_id: str = Field(alias="habitId", strict=True, min_length=1, max_length=25)
    start: datetime
    end: datetime
    type: str = Field(strict=True, min_length=1, max_length=25)
    name: str = Field(strict=True, min_length=1, max_length=25)
    period: str = Field(strict=True, min_length=1, max_length=25)
    target: float = Field(allow_inf_nan=False)
    passed: bool | None = Field(default=None, alias="pass")
    active: bool | None = None

    @field_validator("start", "end")
    @classmethod
    def _to_utc(cls, v: datetime) -> datetime:
        return as_utc(v)


@dataclass(frozen=True, slots=True)
class FieldError:
    field: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


def validate_goal_payload(data: Any) -> tuple[GoalPayload | None, list[FieldError]]:
    """Validate a raw request body.

    Returns (payload, []) on success and (None, errors) otherwise; never
    raises for bad input.
    """
    try:
        return GoalPayload.model_validate(data), []
    except pydantic.ValidationError as exc:
        errors = [
            FieldError(
                field=".".join(str(p) for p in err["loc"]) or "body",
                message=err["msg"],
            )
            for err in exc.errors()
        ]
        return None, errors


class GoalOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    user_id: str = Field(alias="userId")
    habit_id: str = Field(alias="habitId")
    start: datetime
    end: datetime
    type: str
    name: str
    period: str
    target: float
    passed: bool = Field(alias="pass")
    active: bool

    @classmethod
    def from_record(cls, goal: Goal) -> "GoalOut":
        return cls(
            id=goal.id,
            user_id=goal.user_id,
            habit_id=goal.habit_id,
            start=as_utc(goal.start),
            end=as_utc(goal.end),
            type=goal.type,
            name=goal.name,
            period=goal.period,
            target=goal.target,
            passed=goal.passed,
            active=goal.active,
        )


class DeleteResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    acknowledged: bool = True
    deleted_count: int = Field(alias="deletedCount")


@dataclass(frozen=True, slots=True)
class GoalFilters:
    """Optional list filters. The range applies only when both ends are set."""

    start: datetime | None = None
    end: datetime | None = None
    active: bool | None = None
    passed: bool | None = None
    type: str | None = None

    @property
    def window(self) -> tuple[datetime, datetime] | None:
        if self.start is None or self.end is None:
            return None
        return as_utc(self.start), as_utc(self.end)
