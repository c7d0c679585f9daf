"""Text file primitives used by the job store.

Every OS failure is re-raised as ``InfrastructureError`` with the original
``OSError`` kept as ``cause``.
"""

from __future__ import annotations

import contextlib
from pathlib import Path

from jobfiles.core.errors import InfrastructureError


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise InfrastructureError(f"Cannot read {path}", cause=e) from e


def write_text_atomic(path: Path, text: str) -> None:
    """Write to a sibling temp file, then replace ``path`` with it."""
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        with tmp.open("w", encoding="utf-8") as f:
            f.write(text)
        tmp.replace(path)
    except OSError as e:
        with contextlib.suppress(OSError):
            tmp.unlink(missing_ok=True)
        raise InfrastructureError(f"Cannot write {path}", cause=e) from e


def delete_file(path: Path) -> None:
    try:
        path.unlink()
    except OSError as e:
        raise InfrastructureError(f"Cannot delete {path}", cause=e) from e


def move_file(src: Path, dst: Path) -> None:
    try:
        src.replace(dst)
    except OSError as e:
        raise InfrastructureError(f"Cannot move {src} to {dst}", cause=e) from e
