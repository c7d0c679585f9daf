"""File-backed job records with a fault-isolating batch task runner."""

from jobfiles.config import StoreConfig, load_config
from jobfiles.core.jobs import (
    JobError,
    JobFilter,
    JobRecord,
    JobStore,
    LogEntry,
    TaskOutcome,
    TaskRunner,
    WriteResult,
)

__all__ = [
    "StoreConfig",
    "load_config",
    "JobError",
    "JobFilter",
    "JobRecord",
    "JobStore",
    "LogEntry",
    "TaskOutcome",
    "TaskRunner",
    "WriteResult",
]
