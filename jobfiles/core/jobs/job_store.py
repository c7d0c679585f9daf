from __future__ import annotations

import enum
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any

from jobfiles.config import StoreConfig
from jobfiles.core.errors import InfrastructureError, JobDecodeError
from jobfiles.core.jobs.filters import FilterLike, JobFilter
from jobfiles.core.jobs.job_files import delete_file, move_file, read_text, write_text_atomic
from jobfiles.core.jobs.job_record import JobRecord
from jobfiles.core.jobs.serialization import dumps_job, loads_job
from jobfiles.core.paths import ensure_dir, job_file_name, list_job_files

logger = logging.getLogger(__name__)

JobKey = tuple[str, str]


class WriteResult(enum.Enum):
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"


class JobStore:
    """Cache of job records mirrored to one JSON file per job.

    Files live at ``{root_dir}/{type}-{id}.json``; archived jobs keep the same
    name under ``archive_dir``. The directory is the source of truth; the cache
    may go stale if another process touches the same files (last writer wins).
    """

    def __init__(self, config: StoreConfig | None = None) -> None:
        self._config = config or StoreConfig()
        self._jobs: dict[JobKey, JobRecord] = {}
        # Set only by a full directory scan; single-file loads leave it False.
        self._loaded = False
        ensure_dir(self._config.root_dir)
        ensure_dir(self._config.archive_dir)

    @property
    def config(self) -> StoreConfig:
        return self._config

    def set_root_dir(self, root_dir: Path) -> None:
        """Point the store at another root directory; drops the live cache."""
        self._config = replace(self._config, root_dir=Path(root_dir))
        ensure_dir(self._config.root_dir)
        self._jobs.clear()
        self._loaded = False

    def set_archive_dir(self, archive_dir: Path) -> None:
        self._config = replace(self._config, archive_dir=Path(archive_dir))
        ensure_dir(self._config.archive_dir)

    def is_live(self, job: JobRecord) -> bool:
        """True if ``job`` is the record cached for its identity."""
        return self._jobs.get(job.key) is job

    def job_path(self, job_type: str, job_id: str) -> Path:
        return self._config.root_dir / job_file_name(job_type, job_id)

    def archive_path(self, job_type: str, job_id: str) -> Path:
        return self._config.archive_dir / job_file_name(job_type, job_id)

    # Persistence

    def write_job_to_disk(self, job: JobRecord, overwrite: bool = True) -> WriteResult:
        path = self.job_path(job.type, job.id)
        exists = path.exists()
        if exists and not overwrite:
            return WriteResult.SKIPPED
        if self._config.simulate:
            logger.debug("Simulate mode: not writing %s", path)
            return WriteResult.SKIPPED
        write_text_atomic(path, dumps_job(job))
        return WriteResult.UPDATED if exists else WriteResult.CREATED

    def save(self, job: JobRecord) -> WriteResult:
        return self.write_job_to_disk(job, overwrite=True)

    def _read_job(self, path: Path) -> JobRecord:
        return loads_job(read_text(path), path=path)

    # Creation and lookup

    def create_job(
        self,
        id: str | None = None,
        type: str | None = None,
        meta: Any = None,
        *,
        overwrite: bool = False,
    ) -> JobRecord:
        """Create a job, or return the existing one with the same ``(type, id)``.

        With ``overwrite=True`` a fresh record replaces both the cached one and
        the file on disk.
        """
        job = JobRecord.create(id=id, type=type, meta=meta)
        path = self.job_path(job.type, job.id)
        if not overwrite:
            existing = self.get_job(job.type, job.id)
            if existing is not None:
                return existing
        self._jobs[job.key] = job
        self.write_job_to_disk(job, overwrite=True)
        logger.debug("Created job %s", path.name)
        return job

    def fetch_jobs(self, refresh: bool = False) -> list[JobRecord]:
        """Return all live jobs sorted by id (string order).

        Rescans the root directory on first use or when ``refresh`` is set.
        Records cached by ``get_job``/``create_job`` before that never stand
        in for the full scan. Cached records are updated in place so held references stay
        valid; malformed files are skipped with a warning.
        """
        if self._loaded and not refresh:
            return self._sorted()
        loaded: dict[JobKey, JobRecord] = {}
        for path in list_job_files(self._config.root_dir, self._config.file_pattern):
            try:
                job = self._read_job(path)
            except (JobDecodeError, InfrastructureError):
                logger.warning("Skipping unreadable job file %s", path, exc_info=True)
                continue
            current = self._jobs.get(job.key)
            if current is not None:
                current.update_from(job)
                job = current
            loaded[job.key] = job
        if self._config.simulate:
            # Nothing was written, so unsaved records have no file to be found by.
            for key, job in self._jobs.items():
                loaded.setdefault(key, job)
        self._jobs = loaded
        self._loaded = True
        return self._sorted()

    def _sorted(self) -> list[JobRecord]:
        return sorted(self._jobs.values(), key=lambda j: str(j.id))

    def query_jobs(
        self,
        type: FilterLike = None,
        status: FilterLike = None,
        limit: int | None = None,
        *,
        job_filter: JobFilter | None = None,
        refresh: bool = False,
    ) -> list[JobRecord]:
        """Linear scan over ``fetch_jobs``; ``limit`` keeps the first matches."""
        flt = job_filter or JobFilter.of(type=type, status=status)
        out: list[JobRecord] = []
        for job in self.fetch_jobs(refresh=refresh):
            if not flt.matches(job.type, job.status):
                continue
            out.append(job)
            if limit and len(out) >= limit:
                break
        return out

    def get_job(self, job_type: str, job_id: str) -> JobRecord | None:
        """Cached job, else the job file loaded into the cache, else ``None``."""
        job = self._jobs.get((job_type, job_id))
        if job is not None:
            return job
        path = self.job_path(job_type, job_id)
        if not path.exists():
            return None
        job = self._read_job(path)
        self._jobs[job.key] = job
        return job

    def get_archived_job(self, job_type: str, job_id: str) -> JobRecord | None:
        """Read an archived job without adding it to the live cache."""
        path = self.archive_path(job_type, job_id)
        if not path.exists():
            return None
        return self._read_job(path)

    # Termination

    def remove_job(self, job: JobRecord) -> None:
        """Delete ``job``'s file, then evict it; a missing file raises and keeps the cache."""
        delete_file(self.job_path(job.type, job.id))
        self._jobs.pop(job.key, None)
        logger.debug("Removed job %s-%s", job.type, job.id)

    def archive_job(self, job: JobRecord) -> Path:
        """Move ``job``'s file, as last written, to the archive dir, then evict it.

        In-memory changes that were never saved are not carried over.
        """
        dst = self.archive_path(job.type, job.id)
        move_file(self.job_path(job.type, job.id), dst)
        self._jobs.pop(job.key, None)
        logger.debug("Archived job %s-%s", job.type, job.id)
        return dst

    def restore_job(self, job: JobRecord) -> JobRecord:
        """Move an archived job back into the root dir and cache it."""
        src = self.archive_path(job.type, job.id)
        dst = self.job_path(job.type, job.id)
        move_file(src, dst)
        restored = self._read_job(dst)
        self._jobs[restored.key] = restored
        return restored

    # Mutations (mutate, then persist)

    def set_status(self, job: JobRecord, status: str, message: str = "") -> JobRecord:
        job.set_status(status, message)
        self.save(job)
        return job

    def set_meta(self, job: JobRecord, meta: Any) -> JobRecord:
        job.set_meta(meta)
        self.save(job)
        return job

    def write_to_log(self, job: JobRecord, *messages: Any, silent: bool = False) -> JobRecord:
        message = " ".join(str(m) for m in messages)
        if not silent:
            logger.info("%s", message, extra={"job_type": job.type, "job_id": job.id})
        job.add_log(message)
        self.save(job)
        return job

    def set_error(self, job: JobRecord, name: str, message: str, stack: str = "") -> JobRecord:
        job.set_error(name, message, stack)
        self.save(job)
        return job

    def clear_error(self, job: JobRecord) -> JobRecord:
        job.clear_error()
        self.save(job)
        return job
