"""Completion bookkeeping for recurring tasks."""

import logging
from datetime import date, datetime
from typing import Any

from src.core.dates import as_date, day_key, month_key, week_key
from src.core.logging import log_with_task_context, span
from src.domain.recurrence import PeriodKind, period_kind
from src.domain.task import Task
from src.services.schedule_service import is_due


logger = logging.getLogger(__name__)


def completion_update(task: Task, on: date | datetime, week_start: int = 0) -> dict[str, Any]:
    """Build the bookkeeping fields a completion on ``on`` stamps.

    Only the field for the rule's period is written; completing always clears the snooze.
    """
    today = as_date(on)
    update: dict[str, Any] = {"snooze_until_key": None}

    match period_kind(task.frequency):
        case PeriodKind.ONCE:
            update["done_once"] = True
        case PeriodKind.WEEK:
            update["last_completed_week_key"] = week_key(today, week_start)
        case PeriodKind.MONTH:
            update["last_completed_month_key"] = month_key(today)
        case PeriodKind.YEAR:
            update["last_completed_year"] = today.year
        case _:
            update["last_completed_day_key"] = day_key(today)

    return update


def record_completion(task: Task, on: date | datetime, week_start: int = 0) -> Task:
    """Record a completion and return the updated task.

    Completing a task that is not due is a caller error; the task is returned unchanged
    so a due state is never fabricated.

    Args:
        task: Task being completed (not mutated)
        on: Evaluation date the completion belongs to
        week_start: First day of the week (0=Sunday .. 6=Saturday)

    Returns:
        A copy of the task with its period bookkeeping advanced and snooze cleared
    """
    with span("completion_service.record_completion"):
        if not is_due(task, on, week_start):
            log_with_task_context(
                logger, "warning", "Ignoring completion of task that is not due", task_id=task.id, day=day_key(on)
            )
            return task

        updated = task.model_copy(update=completion_update(task, on, week_start))
        log_with_task_context(
            logger,
            "info",
            "Recorded completion",
            task_id=task.id,
            frequency=task.frequency,
            day=day_key(on),
        )
        return updated
