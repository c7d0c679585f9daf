"""Store configuration and project constants.

``StoreConfig`` is passed explicitly to every ``JobStore``. Values can come from
keyword arguments, an optional YAML file and ``JOBS_*`` environment variables
(environment wins).
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# Base paths
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_ROOT_DIR = Path("./jobs")
DEFAULT_ARCHIVE_DIR = Path("./jobs/archive")
DEFAULT_FILE_PATTERN = "*.json"

# Job defaults
DEFAULT_JOB_TYPE = "job"
INITIAL_STATUS = "initialized"
UNKNOWN_ERROR_NAME = "UnknownError"

ENV_ROOT_DIR = "JOBS_ROOT_DIR"
ENV_ARCHIVE_DIR = "JOBS_ARCHIVE_DIR"
ENV_SIMULATE = "JOBS_SIMULATE"


def _as_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        v = value.strip().lower()
        if v in {"true", "1", "yes", "y", "on"}:
            return True
        if v in {"false", "0", "no", "n", "off"}:
            return False
    if isinstance(value, (int, float)):
        return bool(value)
    return default


def _as_path(value: Any, default: Path) -> Path:
    if isinstance(value, Path):
        return value
    if isinstance(value, str) and value.strip():
        return Path(value.strip()).expanduser()
    return default


def _as_str(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


@dataclass(frozen=True, slots=True)
class StoreConfig:
    root_dir: Path = DEFAULT_ROOT_DIR
    archive_dir: Path = DEFAULT_ARCHIVE_DIR
    simulate: bool = False
    file_pattern: str = DEFAULT_FILE_PATTERN

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StoreConfig:
        m = _mapping(data)
        root_dir = _as_path(m.get("root_dir"), DEFAULT_ROOT_DIR)
        # An unset archive dir follows the root dir.
        archive_default = root_dir / "archive"
        return cls(
            root_dir=root_dir,
            archive_dir=_as_path(m.get("archive_dir"), archive_default),
            simulate=_as_bool(m.get("simulate"), False),
            file_pattern=_as_str(m.get("file_pattern"), DEFAULT_FILE_PATTERN),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "root_dir": str(self.root_dir),
            "archive_dir": str(self.archive_dir),
            "simulate": self.simulate,
            "file_pattern": self.file_pattern,
        }


def _load_yaml(path: Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _apply_env(config: StoreConfig, environ: Mapping[str, str]) -> StoreConfig:
    changes: dict[str, Any] = {}
    if environ.get(ENV_ROOT_DIR):
        changes["root_dir"] = _as_path(environ[ENV_ROOT_DIR], config.root_dir)
    if environ.get(ENV_ARCHIVE_DIR):
        changes["archive_dir"] = _as_path(environ[ENV_ARCHIVE_DIR], config.archive_dir)
    if ENV_SIMULATE in environ:
        changes["simulate"] = _as_bool(environ[ENV_SIMULATE], config.simulate)
    return replace(config, **changes) if changes else config


def load_config(
    path: Path | None = None, *, environ: Mapping[str, str] | None = None
) -> StoreConfig:
    """Load store config from a YAML file, then apply ``JOBS_*`` env overrides.

    The YAML may hold the keys at top level or under a ``jobs:`` section.
    Returns defaults if the file is missing or invalid.
    """
    data: Mapping[str, Any] = {}
    if path is not None and path.exists():
        try:
            raw = _load_yaml(path)
            data = _mapping(raw.get("jobs", raw) if isinstance(raw, Mapping) else raw)
        except (yaml.YAMLError, OSError):
            logger.warning("Invalid jobs config %s; using defaults", path, exc_info=True)
            data = {}
    config = StoreConfig.from_dict(data)
    return _apply_env(config, os.environ if environ is None else environ)
