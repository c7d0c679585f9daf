from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from jobfiles.core.jobs.job_record import JobError


@dataclass(frozen=True, slots=True)
class TaskStarted:
    task: str
    job_type: str
    job_id: str
    index: int  # 0-based position in the matched batch
    total: int


@dataclass(frozen=True, slots=True)
class TaskSucceeded:
    task: str
    job_type: str
    job_id: str
    index: int


@dataclass(frozen=True, slots=True)
class TaskFailed:
    """A task raised; ``error`` is what was recorded on the job."""

    task: str
    job_type: str
    job_id: str
    index: int
    error: JobError


@dataclass(frozen=True, slots=True)
class BatchFinished:
    task: str
    total: int
    succeeded: int
    failed: int
    duration_sec: float
