"""JSON file format for job records.

Keys are camelCase (``createdAt``, ``statusMessage``...) so files stay readable
by other tools working on the same job directory.
"""

from __future__ import annotations

import json
import traceback
from collections.abc import Mapping
from dataclasses import asdict, is_dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, cast

from jobfiles.config import DEFAULT_JOB_TYPE, INITIAL_STATUS, UNKNOWN_ERROR_NAME
from jobfiles.core.errors import JobDecodeError
from jobfiles.core.jobs.job_record import JobError, JobRecord, LogEntry


_DROP = object()


def _safe_serialize(value: Any, seen: set[int]) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, datetime):
        return value.isoformat()
    if is_dataclass(value) and not isinstance(value, type):
        value = asdict(cast(Any, value))
    if isinstance(value, (dict, list, tuple)):
        if id(value) in seen:
            return _DROP
        seen.add(id(value))
        if isinstance(value, dict):
            out: dict[str, Any] = {}
            for k, v in value.items():
                item = _safe_serialize(v, seen)
                if item is not _DROP:
                    out[str(k)] = item
            return out
        items: list[Any] = []
        for v in value:
            item = _safe_serialize(v, seen)
            items.append(None if item is _DROP else item)
        return items
    # Fallback: short repr
    s = repr(value)
    return s[:1000]


def safe_dumps(value: Any) -> str:
    """``json.dumps`` that tolerates cycles.

    Any container seen before is dropped: omitted inside a dict, ``null``
    inside a list. Unknown objects are rendered with ``repr``.
    """
    data = _safe_serialize(value, set())
    return json.dumps(None if data is _DROP else data, ensure_ascii=False)


def describe_error(value: object) -> JobError:
    """Normalize a failure into ``JobError``."""
    if isinstance(value, BaseException):
        stack = "".join(traceback.format_exception(type(value), value, value.__traceback__))
        return JobError(name=type(value).__name__, message=str(value), stack=stack)
    return JobError(name=UNKNOWN_ERROR_NAME, message=safe_dumps(value), stack="")


def job_to_dict(job: JobRecord) -> dict[str, Any]:
    return {
        "id": job.id,
        "type": job.type,
        "createdAt": job.created_at,
        "updatedAt": job.updated_at,
        "meta": job.meta,
        "status": job.status,
        "statusMessage": job.status_message,
        "log": [{"ts": e.ts, "message": e.message} for e in job.log],
        "error": None if job.error is None else asdict(job.error),
    }


def _status_from(data: Mapping[str, Any]) -> tuple[str, str]:
    status = data.get("status")
    if isinstance(status, str) and status:
        return status, str(data.get("statusMessage") or data.get("message") or "")
    # Older files keep an ordered status history instead of a current pair.
    history = data.get("statuses")
    if isinstance(history, list) and history and isinstance(history[-1], Mapping):
        last = history[-1]
        return str(last.get("status") or INITIAL_STATUS), str(last.get("message") or "")
    return INITIAL_STATUS, ""


def _error_from(value: Any) -> JobError | None:
    if not isinstance(value, Mapping):
        return None
    return JobError(
        name=str(value.get("name", "")),
        message=str(value.get("message", "")),
        stack=str(value.get("stack") or ""),
    )


def job_from_dict(data: Mapping[str, Any], *, path: Path | None = None) -> JobRecord:
    if not isinstance(data, Mapping):
        raise JobDecodeError("Job document must be a JSON object", path=path)
    job_id = data.get("id")
    if job_id is None or job_id == "":
        raise JobDecodeError("Job document has no id", path=path)
    created_at = str(data.get("createdAt") or "")
    status, status_message = _status_from(data)
    log_items = data.get("log") if isinstance(data.get("log"), list) else []
    return JobRecord(
        id=str(job_id),
        type=str(data.get("type") or DEFAULT_JOB_TYPE),
        created_at=created_at,
        updated_at=str(data.get("updatedAt") or created_at),
        meta=data.get("meta", {}),
        status=status,
        status_message=status_message,
        log=[
            LogEntry(ts=str(e.get("ts", "")), message=str(e.get("message", "")))
            for e in log_items
            if isinstance(e, Mapping)
        ],
        error=_error_from(data.get("error")),
    )


def dumps_job(job: JobRecord) -> str:
    return json.dumps(job_to_dict(job), indent=2, ensure_ascii=False)


def loads_job(text: str, *, path: Path | None = None) -> JobRecord:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise JobDecodeError(f"Invalid job JSON: {e.msg}", cause=e, path=path) from e
    return job_from_dict(data, path=path)
