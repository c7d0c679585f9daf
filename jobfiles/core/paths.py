from __future__ import annotations

from pathlib import Path

from jobfiles.core.errors import InfrastructureError, ValidationError


# Never descend into these when enumerating job files.
EXCLUDED_DIRS = frozenset({"node_modules", "__pycache__", ".git", ".venv", "venv"})


def ensure_dir(path: Path) -> Path:
    """Create ``path`` (and parents) if missing and return it."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise InfrastructureError(f"Cannot create directory {path}", cause=e) from e
    return path


def check_name_part(value: str, field_name: str) -> str:
    """Reject identity parts that cannot be used inside a file name."""
    if not isinstance(value, str) or not value:
        raise ValidationError(f"Job {field_name} must be a non-empty string")
    if "/" in value or "\\" in value or value in {".", ".."}:
        raise ValidationError(f"Job {field_name} {value!r} is not a valid file name part")
    return value


def job_file_name(job_type: str, job_id: str) -> str:
    return f"{check_name_part(job_type, 'type')}-{check_name_part(job_id, 'id')}.json"


def list_job_files(root: Path, pattern: str = "*.json") -> list[Path]:
    """Return files under ``root`` matching ``pattern``, skipping dependency dirs.

    Raises ``InfrastructureError`` if ``root`` is missing or not a directory.
    """
    if not root.is_dir():
        raise InfrastructureError(f"Job directory {root} is not readable")
    try:
        matches = [p for p in root.glob(pattern) if p.is_file()]
    except OSError as e:
        raise InfrastructureError(f"Cannot scan job directory {root}", cause=e) from e
    out: list[Path] = []
    for p in matches:
        rel_parts = p.relative_to(root).parts[:-1]
        if any(part in EXCLUDED_DIRS for part in rel_parts):
            continue
        out.append(p)
    return sorted(out)
