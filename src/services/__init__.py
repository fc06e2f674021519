from src.services import (
    completion_service,
    schedule_service,
    snooze_service,
    task_service,
)


__all__ = [
    "completion_service",
    "schedule_service",
    "snooze_service",
    "task_service",
]
