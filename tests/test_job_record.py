from __future__ import annotations

from jobfiles.core.jobs import job_record
from jobfiles.core.jobs.job_record import JobError, JobRecord, LogEntry, new_job_id


def _clock(monkeypatch, *stamps: str) -> None:
    it = iter(stamps)
    monkeypatch.setattr(job_record, "utc_now_iso", lambda: next(it))


def test_create_applies_defaults() -> None:
    job = JobRecord.create()
    assert job.id.isdigit()
    assert job.type == "job"
    assert job.status == "initialized"
    assert job.status_message == ""
    assert job.meta == {}
    assert job.log == []
    assert job.error is None
    assert job.created_at == job.updated_at


def test_generated_ids_are_strictly_increasing() -> None:
    ids = [int(new_job_id()) for _ in range(50)]
    assert ids == sorted(ids)
    assert len(set(ids)) == len(ids)


def test_mutations_refresh_updated_at(monkeypatch) -> None:
    _clock(monkeypatch, "t0", "t1", "t2", "t3", "t4", "t5")
    job = JobRecord.create(id="1", type="x")
    assert (job.created_at, job.updated_at) == ("t0", "t0")

    job.set_status("running", "started")
    assert job.updated_at == "t1"
    job.set_meta({"a": 1})
    assert job.updated_at == "t2"
    job.add_log("hello")
    assert job.updated_at == "t3"
    job.set_error("Boom", "bad", "")
    assert job.updated_at == "t4"
    job.clear_error()
    assert job.updated_at == "t5"
    assert job.created_at == "t0"


def test_set_meta_merges_maps_and_replaces_non_maps() -> None:
    job = JobRecord.create(meta={"a": 1, "b": 2})
    job.set_meta({"b": 3, "c": 4})
    assert job.meta == {"a": 1, "b": 3, "c": 4}

    job.set_meta(["not", "a", "map"])
    assert job.meta == ["not", "a", "map"]

    job.set_meta({"x": 1})
    assert job.meta == {"x": 1}


def test_log_is_append_only_and_ordered() -> None:
    job = JobRecord.create()
    first = job.add_log("one")
    job.add_log("two")
    assert [e.message for e in job.log] == ["one", "two"]
    assert isinstance(first, LogEntry)
    assert first.ts == job.log[0].ts


def test_error_set_and_clear() -> None:
    job = JobRecord.create()
    job.set_error("ValueError", "bad value", "trace")
    assert job.error == JobError(name="ValueError", message="bad value", stack="trace")
    job.clear_error()
    assert job.error is None


def test_update_from_copies_all_fields() -> None:
    a = JobRecord.create(id="1", type="x", meta={"k": 1})
    b = JobRecord.create(id="1", type="x", meta={"k": 2})
    b.set_status("done")
    b.add_log("note")
    a.update_from(b)
    assert a == b
    assert a.log is not b.log


def test_falsy_caller_id_is_kept() -> None:
    assert JobRecord.create(id=0).id == "0"  # type: ignore[arg-type]
    assert JobRecord.create(id="").id.isdigit()
    assert JobRecord.create(id="").id != ""
