from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Any

from jobfiles.config import DEFAULT_JOB_TYPE, INITIAL_STATUS

_id_lock = Lock()
_last_id_ms = 0


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")  # noqa: UP017


def new_job_id() -> str:
    """Millisecond timestamp id, strictly increasing within the process."""
    global _last_id_ms
    with _id_lock:
        now_ms = time.time_ns() // 1_000_000
        if now_ms <= _last_id_ms:
            now_ms = _last_id_ms + 1
        _last_id_ms = now_ms
        return str(now_ms)


@dataclass(frozen=True, slots=True)
class LogEntry:
    ts: str
    message: str


@dataclass(frozen=True, slots=True)
class JobError:
    name: str
    message: str
    stack: str = ""


@dataclass(slots=True)
class JobRecord:
    """A persisted unit of work identified by ``(type, id)``.

    Mutators only change the record and refresh ``updated_at``; persisting is
    the store's job (see ``JobStore.set_status`` and friends).
    """

    id: str
    type: str = DEFAULT_JOB_TYPE
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = ""
    meta: Any = field(default_factory=dict)
    status: str = INITIAL_STATUS
    status_message: str = ""
    log: list[LogEntry] = field(default_factory=list)
    error: JobError | None = None

    def __post_init__(self) -> None:
        if not self.updated_at:
            self.updated_at = self.created_at

    @classmethod
    def create(
        cls,
        id: str | None = None,
        type: str | None = None,
        meta: Any = None,
        *,
        status: str | None = None,
        status_message: str = "",
    ) -> JobRecord:
        ts = utc_now_iso()
        return cls(
            id=str(id) if id is not None and id != "" else new_job_id(),
            type=type or DEFAULT_JOB_TYPE,
            created_at=ts,
            updated_at=ts,
            meta={} if meta is None else meta,
            status=status or INITIAL_STATUS,
            status_message=status_message,
        )

    @property
    def key(self) -> tuple[str, str]:
        return (self.type, self.id)

    def touch(self) -> None:
        self.updated_at = utc_now_iso()

    def set_status(self, status: str, message: str = "") -> JobRecord:
        self.touch()
        self.status = status
        self.status_message = message
        return self

    def set_meta(self, meta: Any) -> JobRecord:
        """Shallow-merge ``meta`` into the current map; a non-map replaces it."""
        self.touch()
        if isinstance(meta, Mapping):
            current = self.meta if isinstance(self.meta, Mapping) else {}
            self.meta = {**current, **meta}
        else:
            self.meta = meta
        return self

    def add_log(self, message: str) -> LogEntry:
        self.touch()
        entry = LogEntry(ts=self.updated_at, message=message)
        self.log.append(entry)
        return entry

    def set_error(self, name: str, message: str, stack: str = "") -> JobRecord:
        self.touch()
        self.error = JobError(name=name, message=message, stack=stack)
        return self

    def clear_error(self) -> JobRecord:
        self.touch()
        self.error = None
        return self

    def update_from(self, other: JobRecord) -> None:
        """Copy every field of ``other`` into this record in place."""
        self.id = other.id
        self.type = other.type
        self.created_at = other.created_at
        self.updated_at = other.updated_at
        self.meta = other.meta
        self.status = other.status
        self.status_message = other.status_message
        self.log = list(other.log)
        self.error = other.error
