"""ORM tables — goals plus the habit/user rows goals reference."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from app.db import Base
from app.goals.clock import as_utc
from app.goals.ids import new_object_id


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_object_id)
    name: Mapped[str] = mapped_column(String(50))
    email: Mapped[str] = mapped_column(String(255), unique=True)


class Habit(Base):
    __tablename__ = "habits"

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_object_id)
    user_id: Mapped[str] = mapped_column(String(25), index=True)
    name: Mapped[str] = mapped_column(String(50))
    budget: Mapped[float] = mapped_column(Float)
    budget_type: Mapped[str] = mapped_column(String(25))
    icon: Mapped[str | None] = mapped_column(String(255), default=None)


class Goal(Base):
    __tablename__ = "goals"
    __table_args__ = (
        # At most one active goal per habit.
        Index(
            "uq_goals_one_active_per_habit",
            "habit_id",
            unique=True,
            postgresql_where=text("active"),
            sqlite_where=text("active"),
        ),
        Index("ix_goals_active_end", "active", "end"),
    )

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_object_id)
    user_id: Mapped[str] = mapped_column(String(25), index=True)
    habit_id: Mapped[str] = mapped_column(String(25), index=True)
    start: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    end: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    type: Mapped[str] = mapped_column(String(25))
    name: Mapped[str] = mapped_column(String(25))
    period: Mapped[str] = mapped_column(String(25))
    target: Mapped[float] = mapped_column(Float)
    passed: Mapped[bool] = mapped_column("pass", Boolean, default=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    @property
    def start_utc(self) -> datetime:
        return as_utc(self.start)
