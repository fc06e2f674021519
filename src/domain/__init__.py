"""Domain models and DTOs."""

from src.domain.recurrence import (
    DailyRule,
    DaysOfWeekRule,
    EveryXDaysRule,
    EveryXMonthsRule,
    EveryXWeeksRule,
    Frequency,
    MonthlyLastDayRule,
    MonthlyRule,
    OnceRule,
    PeriodKind,
    RecurrenceRule,
    UnrecognizedRule,
    WeeklyRule,
    YearlyRule,
)
from src.domain.task import Task


__all__ = [
    "DailyRule",
    "DaysOfWeekRule",
    "EveryXDaysRule",
    "EveryXMonthsRule",
    "EveryXWeeksRule",
    "Frequency",
    "MonthlyLastDayRule",
    "MonthlyRule",
    "OnceRule",
    "PeriodKind",
    "RecurrenceRule",
    "Task",
    "UnrecognizedRule",
    "WeeklyRule",
    "YearlyRule",
]
