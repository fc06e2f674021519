"""Unit tests for snooze_service."""

from datetime import date

import pytest

from src.domain.recurrence import DailyRule, WeeklyRule
from src.services import snooze_service
from src.services.schedule_service import is_due
from src.services.snooze_service import SnoozeOption


@pytest.mark.unit
class TestSnoozeTarget:
    """Tests for preset snooze targets."""

    @pytest.mark.parametrize(
        ("option", "on", "expected"),
        [
            (SnoozeOption.TOMORROW, date(2024, 12, 31), "2025-01-01"),
            (SnoozeOption.NEXT_WEEK, date(2024, 2, 26), "2024-03-04"),
            (SnoozeOption.NEXT_MONTH, date(2024, 1, 31), "2024-02-29"),
            (SnoozeOption.NEXT_MONTH, date(2024, 12, 15), "2025-01-15"),
        ],
    )
    def test_targets(self, option, on, expected):
        assert snooze_service.snooze_target(option, on) == expected


@pytest.mark.unit
class TestSetSnooze:
    """Tests for set_snooze and snooze_task."""

    def test_sets_key(self, make_task):
        task = snooze_service.set_snooze(make_task(), "2024-01-10")
        assert task.snooze_until_key == "2024-01-10"

    def test_accepts_date(self, make_task):
        task = snooze_service.set_snooze(make_task(), date(2024, 1, 10))
        assert task.snooze_until_key == "2024-01-10"

    def test_rejects_unreadable_day(self, make_task):
        with pytest.raises(ValueError, match="Invalid day key"):
            snooze_service.set_snooze(make_task(), "next tuesday")

    def test_does_not_touch_bookkeeping(self, make_task):
        task = make_task(WeeklyRule(), last_completed_week_key="2023-12-31")
        snoozed = snooze_service.set_snooze(task, "2024-01-10")
        assert snoozed.last_completed_week_key == "2023-12-31"
        assert snoozed.rule == task.rule

    def test_snooze_task_hides_until_tomorrow(self, make_task):
        task = snooze_service.snooze_task(make_task(DailyRule()), SnoozeOption.TOMORROW, date(2024, 1, 3))
        assert not is_due(task, date(2024, 1, 3))
        assert is_due(task, date(2024, 1, 4))


@pytest.mark.unit
class TestClearSnooze:
    """Tests for clearing snoozes."""

    def test_clear_snooze(self, make_task):
        assert snooze_service.clear_snooze(make_task(snooze_until_key="2024-01-10")).snooze_until_key is None

    def test_clear_snooze_without_snooze_returns_same_task(self, make_task):
        task = make_task()
        assert snooze_service.clear_snooze(task) is task

    def test_expired_snooze_cleared_on_its_day(self, make_task):
        task = make_task(snooze_until_key="2024-01-10")
        assert snooze_service.clear_expired_snooze(task, date(2024, 1, 10)).snooze_until_key is None

    def test_active_snooze_kept(self, make_task):
        task = make_task(snooze_until_key="2024-01-10")
        assert snooze_service.clear_expired_snooze(task, date(2024, 1, 9)) is task

    def test_clear_expired_snoozes_preserves_order(self, make_task):
        tasks = [
            make_task(id="expired", snooze_until_key="2024-01-01"),
            make_task(id="active", snooze_until_key="2024-02-01"),
            make_task(id="plain"),
        ]

        result = snooze_service.clear_expired_snoozes(iter(tasks), date(2024, 1, 15))

        assert [t.id for t in result] == ["expired", "active", "plain"]
        assert result[0].snooze_until_key is None
        assert result[1] is tasks[1]
        assert result[2] is tasks[2]
