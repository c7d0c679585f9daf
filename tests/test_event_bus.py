from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from jobfiles.config import StoreConfig
from jobfiles.core.events import TaskStarted
from jobfiles.core.events.event_bus import EventBus
from jobfiles.core.jobs import JobStore, TaskRunner


@dataclass(frozen=True)
class _Evt:
    value: int


def test_failing_handler_is_logged_and_others_still_run(caplog) -> None:
    bus = EventBus()
    received: list[int] = []

    def broken(_evt: _Evt) -> None:
        raise RuntimeError("handler down")

    bus.subscribe(_Evt, broken)
    bus.subscribe(_Evt, lambda e: received.append(e.value))

    with caplog.at_level("ERROR"):
        bus.publish(_Evt(7))
        bus.publish(_Evt(8))

    assert received == [7, 8]
    assert "Event handler failed" in caplog.text


def test_unsubscribe_and_clear() -> None:
    bus = EventBus()
    received: list[int] = []
    sub = bus.subscribe(_Evt, lambda e: received.append(e.value))

    bus.publish(_Evt(1))
    bus.unsubscribe(sub)
    bus.unsubscribe(sub)
    bus.publish(_Evt(2))

    bus.subscribe(_Evt, lambda e: received.append(e.value))
    bus.clear()
    bus.publish(_Evt(3))

    assert received == [1]


def test_failing_handler_does_not_reach_the_task_runner(tmp_path: Path) -> None:
    store = JobStore(StoreConfig(root_dir=tmp_path / "jobs", archive_dir=tmp_path / "archive"))
    store.create_job("1", "job")
    bus = EventBus()

    def explode(_evt: TaskStarted) -> None:
        raise RuntimeError("listener down")

    bus.subscribe(TaskStarted, explode)
    assert bus.handler_count(TaskStarted) == 1

    outcome = TaskRunner(store, bus).run(None, lambda s, job, i, jobs: None)

    assert outcome.ok
    assert store.get_job("job", "1").error is None
