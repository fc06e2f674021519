"""Task construction, recurrence edits and the persisted record codec.

Persisted records use the flat camelCase shape the host stores (``frequency``,
``weeklyDay``, ``everyX``, ``lastCompletedWeekKey``...). Reading a record normalizes it
the way older saves need: integers clamped into range, timestamps collapsed to day keys,
missing anchors defaulted to the creation day.
"""

import logging
import math
import secrets
import string
from datetime import UTC, date, datetime
from typing import Any

from pydantic import TypeAdapter

from src.core.config import constants
from src.core.dates import day_key, to_day_key
from src.core.logging import log_with_task_context, span
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
    RecurrenceRule,
    UnrecognizedRule,
    WeeklyRule,
    YearlyRule,
)
from src.domain.task import Task


logger = logging.getLogger(__name__)

_rule_adapter: TypeAdapter[RecurrenceRule] = TypeAdapter(RecurrenceRule)

_ID_ALPHABET = string.digits + string.ascii_lowercase

# Record keys owned by the scheduling engine; everything else is passed through
_ENGINE_KEYS = frozenset(
    {
        "id",
        "title",
        "createdAtISO",
        "frequency",
        "weeklyDay",
        "daysOfWeek",
        "monthlyDay",
        "everyX",
        "yearlyMonth",
        "yearlyDay",
        "anchorDayKey",
        "doneOnce",
        "lastCompletedDayKey",
        "lastCompletedWeekKey",
        "lastCompletedMonthKey",
        "lastCompletedYear",
        "snoozeUntilKey",
    }
)


def generate_task_id(now: datetime | None = None) -> str:
    """Generate a task ID such as ``task_1704067200000_k3j9xq``."""
    now = now or datetime.now(UTC)
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(constants.TASK_ID_SUFFIX_LENGTH))
    return f"{constants.TASK_ID_PREFIX}_{int(now.timestamp() * 1000)}_{suffix}"


def _with_default_anchor(rule: RecurrenceRule, on: date | datetime) -> RecurrenceRule:
    if isinstance(rule, EveryXDaysRule | EveryXWeeksRule | EveryXMonthsRule) and rule.anchor_day_key is None:
        return rule.model_copy(update={"anchor_day_key": day_key(on)})
    return rule


def create_task(
    *,
    title: str,
    rule: RecurrenceRule,
    on: date | datetime,
    task_id: str | None = None,
    created_at: datetime | None = None,
    attributes: dict[str, Any] | None = None,
) -> Task:
    """Create a new task.

    Interval rules without an anchor are anchored to ``on``, so a task created today is
    due today.

    Args:
        title: Task title (whitespace trimmed)
        rule: Recurrence rule
        on: Creation day as seen by the host (may include a developer offset)
        task_id: Explicit ID; generated when omitted
        created_at: Creation timestamp; defaults to now (UTC)
        attributes: Host-owned fields stored alongside the task

    Returns:
        The new task with empty bookkeeping
    """
    created_at = created_at or datetime.now(UTC)
    task = Task(
        id=task_id or generate_task_id(created_at),
        title=title.strip(),
        created=created_at.isoformat(),
        rule=_with_default_anchor(rule, on),
        attributes=attributes or {},
    )
    log_with_task_context(logger, "info", "Created task", task_id=task.id, frequency=task.frequency)
    return task


def update_recurrence(task: Task, rule: RecurrenceRule, *, on: date | datetime) -> Task:
    """Replace a task's rule.

    Existing bookkeeping stays as it is; the evaluator only reads the fields the new
    rule's period uses. Interval rules without an anchor are anchored to ``on``.
    """
    updated = task.model_copy(update={"rule": _with_default_anchor(rule, on)})
    log_with_task_context(
        logger, "info", "Updated recurrence", task_id=task.id, old=task.frequency, new=updated.frequency
    )
    return updated


# ---------------------------------------------------------------------------
# Record codec
# ---------------------------------------------------------------------------


def _clamp_int(value: object, lo: int, hi: int) -> int | None:
    if not isinstance(value, int) or isinstance(value, bool):
        return None
    return max(lo, min(hi, value))


def _positive_int(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return int(value) or None


def _rule_from_record(record: dict[str, Any], anchor_key: str | None) -> RecurrenceRule:
    raw_frequency = record.get("frequency") or Frequency.DAILY
    try:
        frequency = Frequency(raw_frequency)
    except ValueError:
        logger.warning("Task %s has unrecognized frequency %r", record.get("id"), raw_frequency)
        return UnrecognizedRule(tag=str(raw_frequency))

    every = _positive_int(record.get("everyX"))
    yearly_month = _clamp_int(record.get("yearlyMonth"), 0, 11)

    params: dict[str, dict[str, Any]] = {
        Frequency.WEEKLY: {"weekday": _clamp_int(record.get("weeklyDay"), 0, 6)},
        Frequency.DAYS: {"weekdays": record.get("daysOfWeek") or []},
        Frequency.MONTHLY: {"day": _clamp_int(record.get("monthlyDay"), 1, 31)},
        Frequency.EVERY_X_DAYS: {"every": every, "anchor_day_key": anchor_key},
        Frequency.EVERY_X_WEEKS: {"every": every, "anchor_day_key": anchor_key},
        Frequency.EVERY_X_MONTHS: {"every": every, "anchor_day_key": anchor_key},
        Frequency.YEARLY: {
            "month": yearly_month + 1 if yearly_month is not None else None,
            "day": _clamp_int(record.get("yearlyDay"), 1, 31),
        },
    }

    return _rule_adapter.validate_python({"frequency": str(frequency), **params.get(frequency, {})})


def task_from_record(record: dict[str, Any]) -> Task:
    """Read a persisted task record, normalizing legacy and partially migrated values.

    Args:
        record: Flat camelCase task record as stored by the host

    Returns:
        The normalized task; unknown keys are kept in ``attributes``
    """
    created = record.get("createdAtISO")
    anchor_key = to_day_key(record.get("anchorDayKey")) or to_day_key(created)

    return Task(
        id=str(record["id"]),
        title=(record.get("title") or "").strip(),
        created=created if isinstance(created, str) else None,
        rule=_rule_from_record(record, anchor_key),
        done_once=bool(record.get("doneOnce")),
        last_completed_day_key=record.get("lastCompletedDayKey"),
        last_completed_week_key=record.get("lastCompletedWeekKey"),
        last_completed_month_key=record.get("lastCompletedMonthKey"),
        last_completed_year=record.get("lastCompletedYear"),
        snooze_until_key=record.get("snoozeUntilKey"),
        attributes={k: v for k, v in record.items() if k not in _ENGINE_KEYS},
    )


def task_to_record(task: Task) -> dict[str, Any]:
    """Write a task back to the flat camelCase record shape.

    Parameters of other frequencies are written as null. For non-interval rules the
    anchor falls back to the creation day, so switching to an interval rule later keeps
    a sensible anchor.
    """
    rule = task.rule
    record: dict[str, Any] = {
        **task.attributes,
        "id": task.id,
        "title": task.title,
        "createdAtISO": task.created,
        "frequency": rule.tag if isinstance(rule, UnrecognizedRule) else rule.frequency,
        "weeklyDay": None,
        "daysOfWeek": [],
        "monthlyDay": None,
        "everyX": None,
        "yearlyMonth": None,
        "yearlyDay": None,
        "anchorDayKey": to_day_key(task.created),
        "doneOnce": task.done_once,
        "lastCompletedDayKey": task.last_completed_day_key,
        "lastCompletedWeekKey": task.last_completed_week_key,
        "lastCompletedMonthKey": task.last_completed_month_key,
        "lastCompletedYear": task.last_completed_year,
        "snoozeUntilKey": task.snooze_until_key,
    }

    match rule:
        case WeeklyRule():
            record["weeklyDay"] = rule.weekday
        case DaysOfWeekRule():
            record["daysOfWeek"] = list(rule.weekdays)
        case MonthlyRule():
            record["monthlyDay"] = rule.day
        case EveryXDaysRule() | EveryXWeeksRule() | EveryXMonthsRule():
            record["everyX"] = rule.every
            record["anchorDayKey"] = rule.anchor_day_key or record["anchorDayKey"]
        case YearlyRule():
            record["yearlyMonth"] = rule.month - 1 if rule.month is not None else None
            record["yearlyDay"] = rule.day
        case OnceRule() | DailyRule() | MonthlyLastDayRule() | UnrecognizedRule():
            pass

    return record


def tasks_from_records(records: list[dict[str, Any]]) -> list[Task]:
    """Read a list of persisted records, e.g. a whole saved task list."""
    with span("task_service.tasks_from_records"):
        tasks = [task_from_record(record) for record in records]
        logger.info("Loaded %d task(s)", len(tasks))
        return tasks
