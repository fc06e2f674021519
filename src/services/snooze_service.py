"""Snooze (deferral) of tasks.

A snooze hides a task until its day key is reached and never touches recurrence
bookkeeping. Expired snoozes are cleared by an explicit call, never as a side effect
of asking whether a task is due.
"""

import logging
from collections.abc import Iterable
from datetime import date, datetime
from enum import StrEnum

from src.core.dates import add_days, add_months_clamped, add_weeks, as_date, day_key, parse_day_key, to_day_key
from src.core.logging import log_with_task_context, span
from src.domain.task import Task


logger = logging.getLogger(__name__)


class SnoozeOption(StrEnum):
    """Preset snooze targets relative to the evaluation date."""

    TOMORROW = "tomorrow"
    NEXT_WEEK = "next_week"
    NEXT_MONTH = "next_month"


def snooze_target(option: SnoozeOption, on: date | datetime) -> str:
    """Return the day key a preset snooze resumes on."""
    today = as_date(on)
    if option == SnoozeOption.TOMORROW:
        target = add_days(today, 1)
    elif option == SnoozeOption.NEXT_WEEK:
        target = add_weeks(today, 1)
    elif option == SnoozeOption.NEXT_MONTH:
        target = add_months_clamped(today, 1)
    else:
        msg = f"Unknown snooze option: {option}"
        raise ValueError(msg)
    return day_key(target)


def set_snooze(task: Task, until: str | date | datetime) -> Task:
    """Hide ``task`` until the given day.

    Raises:
        ValueError: If ``until`` cannot be read as a day
    """
    until_key = to_day_key(until)
    if until_key is None:
        msg = f"Invalid day key: {until!r}. Expected YYYY-MM-DD"
        raise ValueError(msg)
    log_with_task_context(logger, "info", "Snoozed task", task_id=task.id, until=until_key)
    return task.model_copy(update={"snooze_until_key": until_key})


def snooze_task(task: Task, option: SnoozeOption, on: date | datetime) -> Task:
    """Snooze ``task`` using a preset relative to ``on``."""
    return set_snooze(task, snooze_target(option, on))


def clear_snooze(task: Task) -> Task:
    """Remove any snooze from ``task``."""
    if task.snooze_until_key is None:
        return task
    return task.model_copy(update={"snooze_until_key": None})


def clear_expired_snooze(task: Task, on: date | datetime) -> Task:
    """Clear the snooze once the evaluation day has reached it; otherwise return ``task`` as is."""
    if task.snooze_until_key is None:
        return task
    try:
        until = parse_day_key(task.snooze_until_key)
    except ValueError:
        logger.warning("Dropping unreadable snooze key %r on task %s", task.snooze_until_key, task.id)
        return clear_snooze(task)
    if as_date(on) < until:
        return task
    return clear_snooze(task)


def clear_expired_snoozes(tasks: Iterable[Task], on: date | datetime) -> list[Task]:
    """Apply ``clear_expired_snooze`` to every task, once per refresh before evaluating."""
    with span("snooze_service.clear_expired_snoozes"):
        tasks = list(tasks)
        result = [clear_expired_snooze(task, on) for task in tasks]
        cleared = sum(1 for before, after in zip(tasks, result, strict=True) if before is not after)
        if cleared:
            logger.info("Cleared %d expired snooze(s) on %s", cleared, day_key(on))
        return result
