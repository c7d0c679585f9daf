from __future__ import annotations

import json
from pathlib import Path

from jobfiles.config import StoreConfig
from jobfiles.core.jobs import JobFilter, JobStore, TaskRunner

import main


def test_generate_process_check_pipeline(tmp_path: Path) -> None:
    root = tmp_path / "jobs"
    archive = tmp_path / "archive"
    store = JobStore(StoreConfig(root_dir=root, archive_dir=archive))

    main.run_pipeline(store, count=5)

    children = sorted(root.glob("job-*.json"))
    assert [p.name for p in children] == [f"job-0{i}.json" for i in range(5)]
    for p in children:
        data = json.loads(p.read_text(encoding="utf-8"))
        assert data["status"] == "complete"
        assert data["meta"]["prop"] == "value"
        assert data["error"] is None

    assert not (root / "main-1.json").exists()
    archived = json.loads((archive / "main-1.json").read_text(encoding="utf-8"))
    assert archived["status"] == "complete"
    assert archived["log"][-1]["message"] == "All jobs complete"
    assert store.query_jobs(type="main") == []


def test_checker_records_error_when_children_incomplete(tmp_path: Path) -> None:
    store = JobStore(StoreConfig(root_dir=tmp_path / "jobs", archive_dir=tmp_path / "archive"))
    job = store.create_job("1", "main", {"count": 2})
    outcome = TaskRunner(store).run(JobFilter.of(type="main"), main.checker)

    assert not outcome.ok
    assert job.error is not None
    assert job.error.message == "Not all jobs complete"
    assert (tmp_path / "jobs" / "main-1.json").exists()


def test_main_entry_point(tmp_path: Path, monkeypatch) -> None:
    config = tmp_path / "jobs.yaml"
    config.write_text(
        f"jobs:\n  root_dir: {tmp_path / 'jobs'}\n  archive_dir: {tmp_path / 'archive'}\n",
        encoding="utf-8",
    )
    monkeypatch.delenv("JOBS_ROOT_DIR", raising=False)
    monkeypatch.delenv("JOBS_ARCHIVE_DIR", raising=False)
    monkeypatch.setattr(main, "setup_logging", lambda: None)

    assert main.main(["--config", str(config), "--count", "3"]) == 0

    assert len(list((tmp_path / "jobs").glob("job-*.json"))) == 3
    assert (tmp_path / "archive" / "main-1.json").exists()
