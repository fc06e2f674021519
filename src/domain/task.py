"""Task domain model with recurrence and completion bookkeeping."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from src.core.dates import to_day_key, to_month_key
from src.domain.recurrence import DailyRule, RecurrenceRule


class Task(BaseModel):
    """Recurring or one-off task.

    Bookkeeping fields only ever move forward and are written by the completion recorder.
    Fields for periods the current rule does not use are ignored rather than cleared.
    """

    id: str = Field(..., description="Opaque unique task ID")
    title: str = Field(default="", description="Task title")
    created: str | None = Field(default=None, description="Creation timestamp (ISO format)")
    rule: RecurrenceRule = Field(default_factory=DailyRule, description="How often the task recurs")

    done_once: bool = Field(default=False, description="Completed flag for one-off tasks")
    last_completed_day_key: str | None = Field(default=None, description="Day key of the last completion")
    last_completed_week_key: str | None = Field(
        default=None, description="Week-start day key of the week of the last completion"
    )
    last_completed_month_key: str | None = Field(default=None, description="YYYY-MM of the last completion")
    last_completed_year: int | None = Field(default=None, description="Year of the last completion")

    snooze_until_key: str | None = Field(default=None, description="Hidden while the evaluation day is earlier")

    attributes: dict[str, Any] = Field(
        default_factory=dict, description="Host-owned fields (element, difficulty, ...) carried through untouched"
    )

    @property
    def frequency(self) -> str:
        """Frequency tag of the current rule."""
        return self.rule.frequency

    @field_validator("last_completed_day_key", "last_completed_week_key", "snooze_until_key", mode="before")
    @classmethod
    def normalize_day_key(cls, v: object) -> str | None:
        """Collapse timestamps to day keys; unreadable values become None."""
        return to_day_key(v)

    @field_validator("last_completed_month_key", mode="before")
    @classmethod
    def normalize_month_key(cls, v: object) -> str | None:
        """Coerce legacy dates to YYYY-MM; unreadable values become None."""
        return to_month_key(v)

    @field_validator("last_completed_year", mode="before")
    @classmethod
    def normalize_year(cls, v: object) -> int | None:
        """Keep positive integer years only."""
        if isinstance(v, int) and not isinstance(v, bool) and v > 0:
            return v
        return None
