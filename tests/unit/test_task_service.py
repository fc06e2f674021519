"""Unit tests for task_service (construction, recurrence edits, record codec)."""

import re
from datetime import UTC, date, datetime

import pytest

from src.domain.recurrence import (
    DailyRule,
    DaysOfWeekRule,
    EveryXDaysRule,
    EveryXMonthsRule,
    EveryXWeeksRule,
    MonthlyLastDayRule,
    MonthlyRule,
    OnceRule,
    UnrecognizedRule,
    WeeklyRule,
    YearlyRule,
)
from src.services import task_service
from src.services.schedule_service import is_due


CREATED = datetime(2024, 1, 3, 9, 30)


@pytest.mark.unit
class TestGenerateTaskId:
    """Tests for generate_task_id."""

    def test_format(self):
        task_id = task_service.generate_task_id(datetime(2024, 1, 1, tzinfo=UTC))
        assert re.fullmatch(r"task_\d+_[0-9a-z]{6}", task_id)

    def test_unique(self):
        assert len({task_service.generate_task_id() for _ in range(50)}) == 50


@pytest.mark.unit
class TestCreateTask:
    """Tests for create_task."""

    def test_trims_title_and_sets_created(self):
        task = task_service.create_task(
            title="  Water plants ", rule=DailyRule(), on=date(2024, 1, 3), task_id="t1", created_at=CREATED
        )
        assert task.id == "t1"
        assert task.title == "Water plants"
        assert task.created == "2024-01-03T09:30:00"
        assert task.last_completed_day_key is None

    def test_generates_id(self):
        task = task_service.create_task(title="Walk", rule=DailyRule(), on=date(2024, 1, 3))
        assert task.id.startswith("task_")

    @pytest.mark.parametrize(
        "rule",
        [EveryXDaysRule(every=3), EveryXWeeksRule(every=2), EveryXMonthsRule(every=1)],
        ids=lambda r: r.frequency,
    )
    def test_interval_rule_anchored_and_due_today(self, rule):
        """Test a new interval task is anchored to its creation day and due on it."""
        task = task_service.create_task(title="Stretch", rule=rule, on=date(2024, 1, 3), created_at=CREATED)
        assert task.rule.anchor_day_key == "2024-01-03"
        assert is_due(task, date(2024, 1, 3))

    def test_explicit_anchor_kept(self):
        rule = EveryXDaysRule(every=3, anchor_day_key="2023-12-31")
        task = task_service.create_task(title="Stretch", rule=rule, on=date(2024, 1, 3), created_at=CREATED)
        assert task.rule.anchor_day_key == "2023-12-31"

    def test_attributes_stored(self):
        task = task_service.create_task(
            title="Read", rule=OnceRule(), on=date(2024, 1, 3), created_at=CREATED, attributes={"element": "water"}
        )
        assert task.attributes == {"element": "water"}


@pytest.mark.unit
class TestUpdateRecurrence:
    """Tests for update_recurrence."""

    def test_keeps_bookkeeping(self, make_task):
        task = make_task(DailyRule(), last_completed_day_key="2024-01-02", last_completed_week_key="2023-12-31")
        updated = task_service.update_recurrence(task, WeeklyRule(), on=date(2024, 1, 3))

        assert updated.rule == WeeklyRule()
        assert updated.last_completed_day_key == "2024-01-02"
        assert not is_due(updated, date(2024, 1, 3))

    def test_anchors_interval_rule(self, make_task):
        updated = task_service.update_recurrence(make_task(), EveryXWeeksRule(every=2), on=date(2024, 1, 3))
        assert updated.rule.anchor_day_key == "2024-01-03"


@pytest.mark.unit
class TestTaskFromRecord:
    """Tests for reading persisted records."""

    def test_full_record(self):
        task = task_service.task_from_record(
            {
                "id": "task_1",
                "title": " Feed cat ",
                "createdAtISO": "2024-01-03T09:30:00",
                "frequency": "everyXWeeks",
                "everyX": 2,
                "anchorDayKey": "2024-01-03",
                "lastCompletedWeekKey": "2023-12-31",
                "snoozeUntilKey": None,
                "element": "fire",
                "difficulty": 2,
            }
        )
        assert task.title == "Feed cat"
        assert task.rule == EveryXWeeksRule(every=2, anchor_day_key="2024-01-03")
        assert task.last_completed_week_key == "2023-12-31"
        assert task.attributes == {"element": "fire", "difficulty": 2}

    def test_missing_frequency_defaults_to_daily(self):
        assert task_service.task_from_record({"id": "t"}).rule == DailyRule()

    def test_unknown_frequency_preserved(self):
        task = task_service.task_from_record({"id": "t", "frequency": "hourly"})
        assert task.rule == UnrecognizedRule(tag="hourly")
        assert not is_due(task, date(2024, 1, 3))

    def test_numeric_id_becomes_string(self):
        assert task_service.task_from_record({"id": 17}).id == "17"

    def test_anchor_defaults_to_creation_day(self):
        task = task_service.task_from_record(
            {"id": "t", "frequency": "everyXDays", "everyX": 3, "createdAtISO": "2024-01-03T09:30:00"}
        )
        assert task.rule.anchor_day_key == "2024-01-03"

    @pytest.mark.parametrize(("raw", "expected"), [(3, 3), (2.9, 2), (0, None), (-4, None), ("3", None), (None, None)])
    def test_interval_normalized(self, raw, expected):
        task = task_service.task_from_record({"id": "t", "frequency": "everyXDays", "everyX": raw})
        assert task.rule.every == expected

    @pytest.mark.parametrize(("raw", "expected"), [(3, 3), (9, 6), (-1, 0), ("3", None)])
    def test_weekly_day_clamped(self, raw, expected):
        task = task_service.task_from_record({"id": "t", "frequency": "weekly", "weeklyDay": raw})
        assert task.rule == WeeklyRule(weekday=expected)

    def test_monthly_day_clamped(self):
        task = task_service.task_from_record({"id": "t", "frequency": "monthly", "monthlyDay": 45})
        assert task.rule == MonthlyRule(day=31)

    def test_days_of_week_filtered(self):
        task = task_service.task_from_record({"id": "t", "frequency": "days", "daysOfWeek": [5, 1, 9, 1]})
        assert task.rule == DaysOfWeekRule(weekdays=[1, 5])

    def test_yearly_month_is_zero_based_in_records(self):
        task = task_service.task_from_record({"id": "t", "frequency": "yearly", "yearlyMonth": 1, "yearlyDay": 29})
        assert task.rule == YearlyRule(month=2, day=29)

    def test_legacy_bookkeeping_normalized(self):
        task = task_service.task_from_record(
            {
                "id": "t",
                "frequency": "monthly",
                "monthlyDay": 3,
                "lastCompletedDayKey": "2024-01-03T18:00:00",
                "lastCompletedMonthKey": "2024-01-03",
                "lastCompletedYear": "2024",
                "doneOnce": 1,
            }
        )
        assert task.last_completed_day_key == "2024-01-03"
        assert task.last_completed_month_key == "2024-01"
        assert task.last_completed_year is None
        assert task.done_once is True

    def test_tasks_from_records_preserves_order(self):
        tasks = task_service.tasks_from_records([{"id": "a"}, {"id": "b", "frequency": "once"}])
        assert [t.id for t in tasks] == ["a", "b"]
        assert tasks[1].rule == OnceRule()


@pytest.mark.unit
class TestTaskToRecord:
    """Tests for writing records."""

    def test_unused_parameters_written_as_null(self, make_task):
        record = task_service.task_to_record(make_task(MonthlyLastDayRule(), created="2024-01-03T09:30:00"))
        assert record["frequency"] == "monthly_last_day"
        assert record["weeklyDay"] is None
        assert record["daysOfWeek"] == []
        assert record["monthlyDay"] is None
        assert record["everyX"] is None
        assert record["anchorDayKey"] == "2024-01-03"

    def test_yearly_month_written_zero_based(self, make_task):
        record = task_service.task_to_record(make_task(YearlyRule(month=12, day=25)))
        assert record["yearlyMonth"] == 11
        assert record["yearlyDay"] == 25

    def test_interval_anchor_written(self, make_task):
        record = task_service.task_to_record(
            make_task(EveryXMonthsRule(every=2, anchor_day_key="2024-01-31"), created="2023-06-01T00:00:00")
        )
        assert record["everyX"] == 2
        assert record["anchorDayKey"] == "2024-01-31"

    def test_unrecognized_tag_written_back(self, make_task):
        record = task_service.task_to_record(make_task(UnrecognizedRule(tag="hourly")))
        assert record["frequency"] == "hourly"

    def test_attributes_written_alongside(self, make_task):
        record = task_service.task_to_record(make_task(attributes={"element": "earth"}))
        assert record["element"] == "earth"

    @pytest.mark.parametrize(
        "rule",
        [
            WeeklyRule(weekday=3),
            DaysOfWeekRule(weekdays=[0, 6]),
            MonthlyRule(day=15),
            EveryXWeeksRule(every=2, anchor_day_key="2024-01-03"),
            YearlyRule(month=2, day=29),
        ],
        ids=lambda r: r.frequency,
    )
    def test_reading_a_written_record_restores_the_task(self, make_task, rule):
        task = make_task(
            rule,
            title="Practice",
            created="2024-01-03T09:30:00",
            last_completed_day_key="2024-01-02",
            snooze_until_key="2024-01-09",
            attributes={"difficulty": 2},
        )
        assert task_service.task_from_record(task_service.task_to_record(task)) == task
