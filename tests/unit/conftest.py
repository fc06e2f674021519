"""Pytest configuration and fixtures for unit tests."""

from collections.abc import Callable
from typing import Any

import pytest

from src.domain.recurrence import DailyRule, RecurrenceRule
from src.domain.task import Task


@pytest.fixture
def make_task() -> Callable[..., Task]:
    """Factory for tasks with a rule and optional bookkeeping overrides."""

    def _make(rule: RecurrenceRule | None = None, **fields: Any) -> Task:
        fields.setdefault("id", "task_test")
        return Task(rule=rule or DailyRule(), **fields)

    return _make
