"""
Demo pipeline for the job store.

Run: python main.py [--config jobs.yaml]

Creates a ``main`` job that generates ``count`` child jobs, processes them, and
archives the main job once every child is complete.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from jobfiles import JobFilter, JobRecord, JobStore, TaskRunner, load_config
from jobfiles.core.events import EventBus, TaskFailed
from jobfiles.core.observability.logging_config import setup_logging

logger = logging.getLogger(__name__)


def generator(store: JobStore, job: JobRecord, index: int, jobs: list[JobRecord]) -> None:
    count = job.meta.get("count") if isinstance(job.meta, dict) else None
    if not isinstance(count, int):
        return
    store.write_to_log(job, "# Generating child jobs")
    for i in range(count):
        child = store.create_job(f"{i:02d}", "job", {"index": i})
        store.write_to_log(child, f"Created child {child.type}-{child.id} by job {job.type}-{job.id}")


def processor(store: JobStore, job: JobRecord, index: int, jobs: list[JobRecord]) -> None:
    store.write_to_log(job, "# Processing job")
    store.set_meta(job, {"prop": "value"})
    store.set_status(job, "complete", "Job complete")


def checker(store: JobStore, job: JobRecord, index: int, jobs: list[JobRecord]) -> None:
    done = store.query_jobs(type="job", status="complete")
    if job.meta.get("count") != len(done):
        raise RuntimeError("Not all jobs complete")
    store.write_to_log(job, "All jobs complete")
    store.set_status(job, "complete", "All jobs complete")
    store.archive_job(job)


def run_pipeline(store: JobStore, *, count: int = 5, event_bus: EventBus | None = None) -> None:
    runner = TaskRunner(store, event_bus)
    main_job = store.create_job("1", "main", {"count": count})
    store.write_to_log(main_job, "Created main job")
    runner.run(JobFilter.of(type="main", status="initialized"), generator)
    runner.run(JobFilter.of(type="job", status="initialized"), processor)
    runner.run(JobFilter.of(type="main", status="initialized"), checker)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--config", type=Path, default=None, help="YAML store config")
    parser.add_argument("--count", type=int, default=5)
    args = parser.parse_args(argv)

    setup_logging()
    store = JobStore(load_config(args.config))
    bus = EventBus()
    bus.subscribe(
        TaskFailed,
        lambda e: logger.warning("%s-%s failed: %s", e.job_type, e.job_id, e.error.message),
    )
    run_pipeline(store, count=args.count, event_bus=bus)
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(0)
