"""Due-date evaluation for recurring tasks.

Every function here is a pure read of (task, evaluation date, week start). Nothing reads
the clock and nothing mutates the task; snooze cleanup lives in snooze_service.
"""

import logging
from collections.abc import Iterable
from datetime import date, datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from src.core.config import constants
from src.core.dates import (
    add_days,
    as_date,
    clamp_day,
    day_diff,
    day_key,
    last_day_of_month,
    month_diff,
    month_key,
    parse_day_key,
    parse_month_key,
    week_diff,
    week_key,
    weekday_index,
)
from src.core.logging import span
from src.domain.recurrence import (
    DailyRule,
    DaysOfWeekRule,
    EveryXDaysRule,
    EveryXMonthsRule,
    EveryXWeeksRule,
    MonthlyLastDayRule,
    MonthlyRule,
    OnceRule,
    PeriodKind,
    UnrecognizedRule,
    WeeklyRule,
    YearlyRule,
    period_kind,
)
from src.domain.task import Task


logger = logging.getLogger(__name__)


class TaskStatus(StrEnum):
    """Where a task belongs on the evaluated day."""

    SNOOZED = "snoozed"
    DUE = "due"
    COMPLETED = "completed"  # Already done for its current period
    NOT_DUE = "not_due"


class Agenda(BaseModel):
    """Tasks partitioned by status for one evaluation date, in input order."""

    on: date
    due: list[Task] = Field(default_factory=list)
    completed: list[Task] = Field(default_factory=list)
    snoozed: list[Task] = Field(default_factory=list)
    not_due: list[Task] = Field(default_factory=list)


def _key_to_date(key: str | None) -> date | None:
    if not key:
        return None
    try:
        return parse_day_key(key)
    except ValueError:
        return None


def _not_due(task: Task, reason: str) -> bool:
    logger.debug("Task %s (%s) treated as not due: %s", task.id, task.frequency, reason)
    return False


def _valid_interval(every: int | None) -> bool:
    return isinstance(every, int) and every >= 1


def is_snoozed(task: Task, on: date | datetime) -> bool:
    """Return True while the evaluation day is strictly before the snooze day."""
    until = _key_to_date(task.snooze_until_key)
    return until is not None and as_date(on) < until


def _weekly_due(task: Task, rule: WeeklyRule, today: date, week_start: int) -> bool:
    if rule.weekday is not None:
        if not 0 <= rule.weekday <= 6:  # noqa: PLR2004
            return _not_due(task, f"weekday {rule.weekday} out of range")
        if weekday_index(today) != rule.weekday:
            return False
    return task.last_completed_week_key != week_key(today, week_start)


def _monthly_due(task: Task, rule: MonthlyRule, today: date) -> bool:
    wanted = rule.day if rule.day is not None else 1
    if not 1 <= wanted <= constants.MAX_DAY_OF_MONTH:
        return _not_due(task, f"day of month {wanted} out of range")
    if today.day != clamp_day(wanted, today.year, today.month):
        return False
    return task.last_completed_month_key != month_key(today)


def _monthly_last_day_due(task: Task, today: date) -> bool:
    if today.day != last_day_of_month(today.year, today.month):
        return False
    return task.last_completed_month_key != month_key(today)


def _every_x_days_due(task: Task, rule: EveryXDaysRule, today: date) -> bool:
    if not _valid_interval(rule.every):
        return _not_due(task, f"interval {rule.every!r} is not a positive integer")

    base = _key_to_date(task.last_completed_day_key) or _key_to_date(rule.anchor_day_key) or today
    diff = day_diff(today, base)
    if diff < 0:
        return False

    # Day 0 (the anchor or completion day itself) counts
    return diff % rule.every == 0 and task.last_completed_day_key != day_key(today)


def _every_x_weeks_due(task: Task, rule: EveryXWeeksRule, today: date, week_start: int) -> bool:
    if not _valid_interval(rule.every):
        return _not_due(task, f"interval {rule.every!r} is not a positive integer")

    anchor = _key_to_date(rule.anchor_day_key)
    base = _key_to_date(task.last_completed_week_key) or anchor or today
    weeks = week_diff(today, base, week_start)
    if weeks < 0:
        return False

    # Trigger weekday stays pinned to the anchor even after completions move the base
    trigger_weekday = weekday_index(anchor or base)
    if weekday_index(today) != trigger_weekday:
        return False

    return weeks % rule.every == 0 and task.last_completed_week_key != week_key(today, week_start)


def _every_x_months_due(task: Task, rule: EveryXMonthsRule, today: date) -> bool:
    if not _valid_interval(rule.every):
        return _not_due(task, f"interval {rule.every!r} is not a positive integer")

    anchor = _key_to_date(rule.anchor_day_key) or today
    base = anchor
    if task.last_completed_month_key:
        try:
            year, month = parse_month_key(task.last_completed_month_key)
        except ValueError:
            return _not_due(task, f"unreadable month key {task.last_completed_month_key!r}")
        base = date(year, month, clamp_day(anchor.day, year, month))

    months = month_diff(today, base)
    if months < 0:
        return False

    if today.day != clamp_day(anchor.day, today.year, today.month):
        return False

    return months % rule.every == 0 and task.last_completed_month_key != month_key(today)


def _yearly_due(task: Task, rule: YearlyRule, today: date) -> bool:
    month = rule.month if rule.month is not None else 1
    wanted = rule.day if rule.day is not None else 1
    if not 1 <= month <= constants.MONTHS_PER_YEAR:
        return _not_due(task, f"month {month} out of range")
    if not 1 <= wanted <= constants.MAX_DAY_OF_MONTH:
        return _not_due(task, f"day of month {wanted} out of range")

    if today.month != month or today.day != clamp_day(wanted, today.year, month):
        return False
    return task.last_completed_year != today.year


def is_due(task: Task, on: date | datetime, week_start: int = 0) -> bool:  # noqa: PLR0911
    """Decide whether a task is due on the evaluation date.

    Snooze overrides every rule. Malformed parameters (missing interval, out-of-range
    days) make the task not due instead of raising.

    Args:
        task: Task to evaluate (never mutated)
        on: Evaluation date; a datetime is reduced to its calendar day
        week_start: First day of the week (0=Sunday .. 6=Saturday)

    Returns:
        True if the task should be offered as actionable on that day
    """
    today = as_date(on)
    if is_snoozed(task, today):
        return False

    match task.rule:
        case OnceRule():
            return not task.done_once
        case DailyRule():
            return task.last_completed_day_key != day_key(today)
        case WeeklyRule() as rule:
            return _weekly_due(task, rule, today, week_start)
        case DaysOfWeekRule() as rule:
            return weekday_index(today) in rule.weekdays and task.last_completed_day_key != day_key(today)
        case MonthlyRule() as rule:
            return _monthly_due(task, rule, today)
        case MonthlyLastDayRule():
            return _monthly_last_day_due(task, today)
        case EveryXDaysRule() as rule:
            return _every_x_days_due(task, rule, today)
        case EveryXWeeksRule() as rule:
            return _every_x_weeks_due(task, rule, today, week_start)
        case EveryXMonthsRule() as rule:
            return _every_x_months_due(task, rule, today)
        case YearlyRule() as rule:
            return _yearly_due(task, rule, today)
        case UnrecognizedRule() as rule:
            return _not_due(task, f"unrecognized frequency {rule.tag!r}")
        case _:
            return _not_due(task, "unsupported rule")


def can_complete_now(task: Task, on: date | datetime, week_start: int = 0) -> bool:
    """Return True if completing the task is offered; identical to ``is_due``."""
    return is_due(task, on, week_start)


def is_completed_for_period(task: Task, on: date | datetime, week_start: int = 0) -> bool:
    """Return True if the bookkeeping already covers the period containing ``on``."""
    if isinstance(task.rule, UnrecognizedRule):
        return False

    today = as_date(on)
    match period_kind(task.frequency):
        case PeriodKind.ONCE:
            return task.done_once
        case PeriodKind.WEEK:
            return task.last_completed_week_key == week_key(today, week_start)
        case PeriodKind.MONTH:
            return task.last_completed_month_key == month_key(today)
        case PeriodKind.YEAR:
            return task.last_completed_year == today.year
        case _:
            return task.last_completed_day_key == day_key(today)


def classify_task(task: Task, on: date | datetime, week_start: int = 0) -> TaskStatus:
    """Place a task on the evaluated day: snoozed, due, completed for its period, or not due."""
    if is_snoozed(task, on):
        return TaskStatus.SNOOZED
    if is_due(task, on, week_start):
        return TaskStatus.DUE
    if is_completed_for_period(task, on, week_start):
        return TaskStatus.COMPLETED
    return TaskStatus.NOT_DUE


def due_tasks(tasks: Iterable[Task], on: date | datetime, week_start: int = 0) -> list[Task]:
    """Return the tasks due on ``on``, preserving input order."""
    return [task for task in tasks if is_due(task, on, week_start)]


def build_agenda(tasks: Iterable[Task], on: date | datetime, week_start: int = 0) -> Agenda:
    """Partition tasks by status for one evaluation date.

    Args:
        tasks: Tasks to classify
        on: Evaluation date
        week_start: First day of the week (0=Sunday .. 6=Saturday)

    Returns:
        Agenda with due, completed, snoozed and not-due lists
    """
    with span("schedule_service.build_agenda"):
        agenda = Agenda(on=as_date(on))
        buckets = {
            TaskStatus.DUE: agenda.due,
            TaskStatus.COMPLETED: agenda.completed,
            TaskStatus.SNOOZED: agenda.snoozed,
            TaskStatus.NOT_DUE: agenda.not_due,
        }
        for task in tasks:
            buckets[classify_task(task, agenda.on, week_start)].append(task)

        logger.info(
            "Agenda for %s: %d due, %d completed, %d snoozed, %d not due",
            day_key(agenda.on),
            len(agenda.due),
            len(agenda.completed),
            len(agenda.snoozed),
            len(agenda.not_due),
        )
        return agenda


def next_due_date(
    task: Task,
    on: date | datetime,
    week_start: int = 0,
    *,
    horizon_days: int = constants.NEXT_DUE_SEARCH_DAYS,
) -> date | None:
    """Find the first date on or after ``on`` when the task is due.

    Bookkeeping is taken as it stands, so a task still due today returns today.

    Returns:
        The next due date, or None if nothing falls within ``horizon_days``
    """
    start = as_date(on)
    for offset in range(horizon_days + 1):
        candidate = add_days(start, offset)
        if is_due(task, candidate, week_start):
            return candidate
    return None
