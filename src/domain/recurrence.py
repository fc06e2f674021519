"""Recurrence rule domain models.

A rule is a discriminated union keyed on ``frequency``; each variant carries only the
parameters its frequency reads. Parameters are deliberately loose (optional, unranged)
so that partially migrated records still load; the evaluator decides what is usable.
"""

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator

from src.core.dates import to_day_key


class Frequency(StrEnum):
    """Recurrence tag as stored on persisted tasks."""

    ONCE = "once"
    DAILY = "daily"
    WEEKLY = "weekly"
    DAYS = "days"
    MONTHLY = "monthly"
    MONTHLY_LAST_DAY = "monthly_last_day"
    EVERY_X_DAYS = "everyXDays"
    EVERY_X_WEEKS = "everyXWeeks"
    EVERY_X_MONTHS = "everyXMonths"
    YEARLY = "yearly"


class PeriodKind(StrEnum):
    """Which completion bookkeeping field a frequency reads and stamps."""

    ONCE = "once"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


_PERIOD_KINDS: dict[str, PeriodKind] = {
    Frequency.ONCE: PeriodKind.ONCE,
    Frequency.DAILY: PeriodKind.DAY,
    Frequency.DAYS: PeriodKind.DAY,
    Frequency.EVERY_X_DAYS: PeriodKind.DAY,
    Frequency.WEEKLY: PeriodKind.WEEK,
    Frequency.EVERY_X_WEEKS: PeriodKind.WEEK,
    Frequency.MONTHLY: PeriodKind.MONTH,
    Frequency.MONTHLY_LAST_DAY: PeriodKind.MONTH,
    Frequency.EVERY_X_MONTHS: PeriodKind.MONTH,
    Frequency.YEARLY: PeriodKind.YEAR,
}


def period_kind(frequency: str) -> PeriodKind:
    """Return the bookkeeping period for a frequency tag.

    Anything not week-, month-, year- or once-based falls back to DAY.
    """
    return _PERIOD_KINDS.get(frequency, PeriodKind.DAY)


def is_day_based(frequency: str) -> bool:
    return period_kind(frequency) is PeriodKind.DAY


def is_week_based(frequency: str) -> bool:
    return period_kind(frequency) is PeriodKind.WEEK


def is_month_based(frequency: str) -> bool:
    return period_kind(frequency) is PeriodKind.MONTH


def is_year_based(frequency: str) -> bool:
    return period_kind(frequency) is PeriodKind.YEAR


class OnceRule(BaseModel):
    """One-off task, due until completed."""

    frequency: Literal["once"] = "once"


class DailyRule(BaseModel):
    """Due every day."""

    frequency: Literal["daily"] = "daily"


class WeeklyRule(BaseModel):
    """Due once per week, optionally pinned to a weekday."""

    frequency: Literal["weekly"] = "weekly"
    weekday: int | None = Field(default=None, description="Pinned weekday (0=Sunday); None means any day")


class DaysOfWeekRule(BaseModel):
    """Due on each of a set of weekdays."""

    frequency: Literal["days"] = "days"
    weekdays: list[int] = Field(default_factory=list, description="Weekdays (0=Sunday .. 6=Saturday)")

    @field_validator("weekdays", mode="before")
    @classmethod
    def normalize_weekdays(cls, v: object) -> list[int]:
        """Keep valid weekday integers, deduplicated and sorted."""
        if not isinstance(v, list | tuple | set | frozenset):
            return []
        return sorted({d for d in v if isinstance(d, int) and not isinstance(d, bool) and 0 <= d <= 6})  # noqa: PLR2004


class MonthlyRule(BaseModel):
    """Due on a fixed day of every month, clamped to short months."""

    frequency: Literal["monthly"] = "monthly"
    day: int | None = Field(default=None, description="Day of month (1-31); None means the 1st")


class MonthlyLastDayRule(BaseModel):
    """Due on the last day of every month."""

    frequency: Literal["monthly_last_day"] = "monthly_last_day"


class _IntervalRule(BaseModel):
    every: int | None = Field(default=None, description="Interval count, at least 1")
    anchor_day_key: str | None = Field(default=None, description="Day key the interval is measured from")

    @field_validator("anchor_day_key", mode="before")
    @classmethod
    def normalize_anchor(cls, v: object) -> str | None:
        """Collapse timestamps to a day key; unreadable anchors become None."""
        return to_day_key(v)


class EveryXDaysRule(_IntervalRule):
    """Due every N days counted from the last completion or the anchor."""

    frequency: Literal["everyXDays"] = "everyXDays"


class EveryXWeeksRule(_IntervalRule):
    """Due every N weeks on the anchor's weekday."""

    frequency: Literal["everyXWeeks"] = "everyXWeeks"


class EveryXMonthsRule(_IntervalRule):
    """Due every N months on the anchor's day of month (clamped)."""

    frequency: Literal["everyXMonths"] = "everyXMonths"


class YearlyRule(BaseModel):
    """Due once a year on a fixed month and day (clamped)."""

    frequency: Literal["yearly"] = "yearly"
    month: int | None = Field(default=None, description="Month (1-12); None means January")
    day: int | None = Field(default=None, description="Day of month (1-31); None means the 1st")


class UnrecognizedRule(BaseModel):
    """Placeholder for a stored frequency tag this version does not know. Never due."""

    frequency: Literal["unrecognized"] = "unrecognized"
    tag: str = Field(default="", description="Frequency tag as found in storage")


IntervalRule = EveryXDaysRule | EveryXWeeksRule | EveryXMonthsRule

RecurrenceRule = Annotated[
    OnceRule
    | DailyRule
    | WeeklyRule
    | DaysOfWeekRule
    | MonthlyRule
    | MonthlyLastDayRule
    | EveryXDaysRule
    | EveryXWeeksRule
    | EveryXMonthsRule
    | YearlyRule
    | UnrecognizedRule,
    Field(discriminator="frequency"),
]
