"""Domain errors raised by the goal engine.

Each carries the HTTP status and message it is surfaced with; the app
registers a single handler for GoalError.
"""

from __future__ import annotations

from typing import Any


class GoalError(Exception):
    status_code: int = 400
    message: str = "Bad request"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    @property
    def detail(self) -> Any:
        return self.message


class ValidationError(GoalError):
    """Payload failed schema validation; carries per-field messages."""

    message = "Invalid goal payload"

    def __init__(self, errors: list[dict[str, str]]):
        self.errors = errors
        super().__init__("; ".join(f"{e['field']}: {e['message']}" for e in errors))

    @property
    def detail(self) -> Any:
        return self.errors


class InvalidTimeRange(GoalError):
    message = "End date must be after Start date!"


class DuplicateActiveGoal(GoalError):
    message = "There is already an active goal for this habit!"


class InvalidReference(GoalError):
    message = "Referenced record doesn't exist"


class NotFound(GoalError):
    status_code = 404
    message = "Not found"

    @classmethod
    def entity(cls, name: str) -> "NotFound":
        return cls(f"{name} not found")


class InvalidId(NotFound):
    """Malformed id — never reaches the store."""

    status_code = 400
    message = "Not found"


class StoreUnavailable(GoalError):
    status_code = 500
    message = "Internal server error"
