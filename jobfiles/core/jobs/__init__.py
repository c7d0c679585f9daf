"""Job records, their file-backed store and the batch task runner."""

from .filters import Equals, JobFilter, MatchAny, OneOf, as_filter
from .job_record import JobError, JobRecord, LogEntry
from .job_store import JobStore, WriteResult
from .task_runner import Task, TaskOutcome, TaskRunner

__all__ = [
    "Equals",
    "JobFilter",
    "MatchAny",
    "OneOf",
    "as_filter",
    "JobError",
    "JobRecord",
    "LogEntry",
    "JobStore",
    "WriteResult",
    "Task",
    "TaskOutcome",
    "TaskRunner",
]
