"""Recurrence phrase parsing and human-readable rule descriptions."""

import re
from datetime import date

from src.core.config import constants
from src.core.dates import day_key, parse_day_key, weekday_index
from src.domain.recurrence import (
    DailyRule,
    DaysOfWeekRule,
    EveryXDaysRule,
    EveryXMonthsRule,
    EveryXWeeksRule,
    MonthlyLastDayRule,
    MonthlyRule,
    OnceRule,
    RecurrenceRule,
    UnrecognizedRule,
    WeeklyRule,
    YearlyRule,
)


MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]

_WEEKDAY_LOOKUP: dict[str, int] = {}
for _index, _name in enumerate(constants.WEEKDAY_NAMES):
    _WEEKDAY_LOOKUP[_name.lower()] = _index
    _WEEKDAY_LOOKUP[_name[:3].lower()] = _index

_MONTH_LOOKUP: dict[str, int] = {}
for _index, _name in enumerate(MONTH_NAMES, start=1):
    _MONTH_LOOKUP[_name.lower()] = _index
    _MONTH_LOOKUP[_name[:3].lower()] = _index

_WEEKDAY_RE = "|".join(sorted(_WEEKDAY_LOOKUP, key=len, reverse=True))
_MONTH_RE = "|".join(sorted(_MONTH_LOOKUP, key=len, reverse=True))

_INTERVAL_RULES = {"day": EveryXDaysRule, "week": EveryXWeeksRule, "month": EveryXMonthsRule}

_FORMATS_HINT = (
    "Use 'once', 'daily', 'weekly', 'every [weekday]', 'mon,wed,fri', 'monthly on the 15th', "
    "'last day of month', 'every N days|weeks|months', or 'yearly on mar 3'"
)


def _ordinal(day: int) -> str:
    suffix = "th"
    if day in (1, 21, 31):
        suffix = "st"
    elif day in (2, 22):
        suffix = "nd"
    elif day in (3, 23):
        suffix = "rd"
    return f"{day}{suffix}"


def _invalid(recurrence: str, detail: str = "") -> ValueError:
    msg = f"Invalid recurrence format: {recurrence}. {detail}{_FORMATS_HINT}"
    return ValueError(msg)


def _day_of_month(recurrence: str, raw: str) -> int:
    day = int(raw)
    if not 1 <= day <= constants.MAX_DAY_OF_MONTH:
        raise _invalid(recurrence, f"Day of month must be 1-{constants.MAX_DAY_OF_MONTH}. ")
    return day


def parse_recurrence(recurrence: str, *, anchor: date | None = None) -> RecurrenceRule:  # noqa: C901, PLR0911
    """Parse a recurrence phrase into a rule.

    Supports:
    - "once" / "one time"
    - "daily" / "every day"
    - "weekly" / "every week" (any day of the week)
    - "every monday" → weekly pinned to Monday
    - "mon,wed,fri" / "every mon, wed and fri" → specific weekdays
    - "monthly" (on the anchor's day) / "monthly on the 15th"
    - "last day of month" / "monthly on the last day"
    - "every 3 days" / "every other week" / "every 2 months"
    - "yearly" (on the anchor's date) / "yearly on mar 3" / "every year on 3 march"

    Args:
        recurrence: Recurrence phrase from user input
        anchor: Day the schedule starts from; anchors interval rules and fills in
            "monthly" and "yearly" when no day is given

    Returns:
        The parsed rule

    Raises:
        ValueError: If the phrase is not a supported recurrence format
    """
    text = re.sub(r"\s+", " ", recurrence.lower().strip())

    if text in ("once", "one time", "one-time"):
        return OnceRule()

    if text in ("daily", "every day"):
        return DailyRule()

    if text in ("weekly", "every week"):
        return WeeklyRule()

    # "every monday"
    match = re.match(rf"^every ({_WEEKDAY_RE})$", text)
    if match:
        return WeeklyRule(weekday=_WEEKDAY_LOOKUP[match.group(1)])

    # "mon,wed,fri" / "every mon, wed and fri"
    match = re.match(rf"^(?:every )?((?:{_WEEKDAY_RE})(?:\s*(?:,|and)\s*(?:{_WEEKDAY_RE}))+)$", text)
    if match:
        names = re.split(r"\s*(?:,|and)\s*", match.group(1))
        return DaysOfWeekRule(weekdays=[_WEEKDAY_LOOKUP[name] for name in names])

    if text in ("last day of month", "last day of the month", "monthly on the last day"):
        return MonthlyLastDayRule()

    if text in ("monthly", "every month"):
        return MonthlyRule(day=anchor.day if anchor else 1)

    # "monthly on the 15th"
    match = re.match(r"^monthly on (?:the )?(\d{1,2})(?:st|nd|rd|th)?$", text)
    if match:
        return MonthlyRule(day=_day_of_month(recurrence, match.group(1)))

    # "every 3 days" / "every other week"
    match = re.match(r"^every (\d+|other) (day|week|month)s?$", text)
    if match:
        every = 2 if match.group(1) == "other" else int(match.group(1))
        if every < 1:
            raise _invalid(recurrence, "Interval must be at least 1. ")
        rule_cls = _INTERVAL_RULES[match.group(2)]
        return rule_cls(every=every, anchor_day_key=day_key(anchor) if anchor else None)

    if text in ("yearly", "every year", "annually"):
        if anchor is None:
            raise _invalid(recurrence, "A date is required for a bare yearly schedule. ")
        return YearlyRule(month=anchor.month, day=anchor.day)

    # "yearly on mar 3" / "yearly on 3 march"
    match = re.match(
        rf"^(?:yearly|every year|annually) on (?:({_MONTH_RE}) (\d{{1,2}})|(\d{{1,2}}) ({_MONTH_RE}))$",
        text,
    )
    if match:
        month_name = match.group(1) or match.group(4)
        raw_day = match.group(2) or match.group(3)
        return YearlyRule(month=_MONTH_LOOKUP[month_name], day=_day_of_month(recurrence, raw_day))

    raise _invalid(recurrence)


def describe_rule(rule: RecurrenceRule) -> str:  # noqa: C901, PLR0911
    """Convert a rule to human-readable text.

    Args:
        rule: Recurrence rule

    Returns:
        Human-readable description (e.g., "every 2 weeks on Wednesday")
    """
    weekday_names = constants.WEEKDAY_NAMES

    if isinstance(rule, OnceRule):
        return "once"
    if isinstance(rule, DailyRule):
        return "daily"
    if isinstance(rule, WeeklyRule):
        if rule.weekday is None or not 0 <= rule.weekday <= 6:  # noqa: PLR2004
            return "weekly"
        return f"every {weekday_names[rule.weekday]}"
    if isinstance(rule, DaysOfWeekRule):
        if not rule.weekdays:
            return "no days selected"
        return f"every {', '.join(weekday_names[d] for d in rule.weekdays)}"
    if isinstance(rule, MonthlyRule):
        return f"monthly on the {_ordinal(rule.day or 1)}"
    if isinstance(rule, MonthlyLastDayRule):
        return "monthly on the last day"
    if isinstance(rule, EveryXDaysRule | EveryXWeeksRule | EveryXMonthsRule):
        return _describe_interval(rule)
    if isinstance(rule, YearlyRule):
        month = rule.month or 1
        month_name = MONTH_NAMES[month - 1] if 1 <= month <= constants.MONTHS_PER_YEAR else f"month {month}"
        return f"yearly on {month_name} {rule.day or 1}"
    if isinstance(rule, UnrecognizedRule):
        return f"unrecognized ({rule.tag})"

    # Fallback
    return f"scheduled ({rule.frequency})"


def _describe_interval(rule: EveryXDaysRule | EveryXWeeksRule | EveryXMonthsRule) -> str:
    unit = {EveryXDaysRule: "day", EveryXWeeksRule: "week", EveryXMonthsRule: "month"}[type(rule)]
    if not rule.every or rule.every < 1:
        return f"every ? {unit}s (interval not set)"

    base = f"every {unit}" if rule.every == 1 else f"every {rule.every} {unit}s"
    if not rule.anchor_day_key:
        return base

    anchor = parse_day_key(rule.anchor_day_key)
    if isinstance(rule, EveryXWeeksRule):
        return f"{base} on {constants.WEEKDAY_NAMES[weekday_index(anchor)]}"
    if isinstance(rule, EveryXMonthsRule):
        return f"{base} on the {_ordinal(anchor.day)}"
    return f"{base} starting {rule.anchor_day_key}"
