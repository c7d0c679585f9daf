"""In-process event bus and task lifecycle events published by ``TaskRunner``."""

from .event_bus import EventBus, Subscription
from .task_events import BatchFinished, TaskFailed, TaskStarted, TaskSucceeded

__all__ = [
    "EventBus",
    "Subscription",
    "TaskStarted",
    "TaskSucceeded",
    "TaskFailed",
    "BatchFinished",
]
