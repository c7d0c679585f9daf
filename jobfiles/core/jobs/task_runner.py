from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from jobfiles.core.errors import InfrastructureError
from jobfiles.core.events import EventBus
from jobfiles.core.events.task_events import BatchFinished, TaskFailed, TaskStarted, TaskSucceeded
from jobfiles.core.jobs.filters import JobFilter
from jobfiles.core.jobs.job_record import JobError, JobRecord
from jobfiles.core.jobs.job_store import JobStore
from jobfiles.core.jobs.serialization import describe_error

logger = logging.getLogger(__name__)

Task = Callable[[JobStore, JobRecord, int, list[JobRecord]], Any]


@dataclass(slots=True)
class TaskOutcome:
    """Result of one ``TaskRunner.run`` call, in batch order."""

    jobs: list[JobRecord] = field(default_factory=list)
    succeeded: list[JobRecord] = field(default_factory=list)
    failed: list[tuple[JobRecord, JobError]] = field(default_factory=list)
    duration_sec: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.failed


def _task_name(task: Task) -> str:
    return getattr(task, "__name__", None) or type(task).__name__


class TaskRunner:
    """Applies a task to every job matching a filter, one job at a time.

    A task that raises does not stop the batch: the error is recorded on the
    job whose task call raised it, persisted, and the runner moves on.
    """

    def __init__(self, store: JobStore, event_bus: EventBus | None = None) -> None:
        self._store = store
        self._bus = event_bus

    @property
    def store(self) -> JobStore:
        return self._store

    def _publish(self, event: object) -> None:
        if self._bus is not None:
            self._bus.publish(event)

    def run(
        self,
        job_filter: JobFilter | None,
        task: Task,
        chunk_size: int | None = None,
    ) -> TaskOutcome:
        name = _task_name(task)
        jobs = self._store.query_jobs(job_filter=job_filter or JobFilter(), limit=chunk_size)
        outcome = TaskOutcome(jobs=list(jobs))
        start = time.perf_counter()
        logger.debug("Running %s on %d job(s)", name, len(jobs), extra={"event": "batch"})

        for index, job in enumerate(jobs):
            self._publish(
                TaskStarted(task=name, job_type=job.type, job_id=job.id, index=index, total=len(jobs))
            )
            try:
                task(self._store, job, index, jobs)
            except Exception as e:  # noqa: BLE001
                logger.exception(
                    "Task %s failed for job %s-%s",
                    name,
                    job.type,
                    job.id,
                    extra={"job_type": job.type, "job_id": job.id, "index": index},
                )
                error = self._record_error(job, e)
                outcome.failed.append((job, error))
                self._publish(
                    TaskFailed(task=name, job_type=job.type, job_id=job.id, index=index, error=error)
                )
                continue
            outcome.succeeded.append(job)
            self._publish(TaskSucceeded(task=name, job_type=job.type, job_id=job.id, index=index))

        outcome.duration_sec = time.perf_counter() - start
        self._publish(
            BatchFinished(
                task=name,
                total=len(jobs),
                succeeded=len(outcome.succeeded),
                failed=len(outcome.failed),
                duration_sec=outcome.duration_sec,
            )
        )
        logger.debug(
            "%s finished: %d ok, %d failed in %.1fms",
            name,
            len(outcome.succeeded),
            len(outcome.failed),
            outcome.duration_sec * 1000,
            extra={"event": "batch"},
        )
        return outcome

    def _record_error(self, job: JobRecord, exc: Exception) -> JobError:
        error = describe_error(exc)
        if not self._store.is_live(job):
            # Removed or archived by the task itself; writing would recreate it.
            job.set_error(error.name, error.message, error.stack)
            return error
        try:
            self._store.set_error(job, error.name, error.message, error.stack)
        except InfrastructureError:
            logger.exception("Could not persist error for job %s-%s", job.type, job.id)
        return error
