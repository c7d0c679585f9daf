from __future__ import annotations

from pathlib import Path

from jobfiles.config import StoreConfig, load_config


def test_defaults_without_file() -> None:
    cfg = load_config(environ={})
    assert cfg == StoreConfig()
    assert cfg.root_dir == Path("jobs")
    assert cfg.archive_dir == Path("jobs/archive")
    assert cfg.simulate is False


def test_load_from_jobs_section(tmp_path: Path) -> None:
    path = tmp_path / "jobs.yaml"
    path.write_text(
        "jobs:\n  root_dir: /data/jobs\n  archive_dir: /data/old\n  simulate: 'yes'\n",
        encoding="utf-8",
    )
    cfg = load_config(path, environ={})
    assert cfg.root_dir == Path("/data/jobs")
    assert cfg.archive_dir == Path("/data/old")
    assert cfg.simulate is True


def test_archive_dir_follows_root_dir(tmp_path: Path) -> None:
    path = tmp_path / "jobs.yaml"
    path.write_text("root_dir: /srv/queue\n", encoding="utf-8")
    cfg = load_config(path, environ={})
    assert cfg.archive_dir == Path("/srv/queue/archive")


def test_invalid_yaml_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "jobs.yaml"
    path.write_text("jobs: [unclosed\n", encoding="utf-8")
    assert load_config(path, environ={}) == StoreConfig()


def test_non_mapping_yaml_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "jobs.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    assert load_config(path, environ={}) == StoreConfig()


def test_environment_overrides_file(tmp_path: Path) -> None:
    path = tmp_path / "jobs.yaml"
    path.write_text("root_dir: /from/file\nsimulate: true\n", encoding="utf-8")
    cfg = load_config(
        path,
        environ={"JOBS_ROOT_DIR": "/from/env", "JOBS_ARCHIVE_DIR": "/env/archive", "JOBS_SIMULATE": "0"},
    )
    assert cfg.root_dir == Path("/from/env")
    assert cfg.archive_dir == Path("/env/archive")
    assert cfg.simulate is False


def test_to_dict_round_trip() -> None:
    cfg = StoreConfig(root_dir=Path("/a"), archive_dir=Path("/b"), simulate=True)
    assert StoreConfig.from_dict(cfg.to_dict()) == cfg
