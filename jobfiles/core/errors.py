"""Shared error types.

Store operations raise these to their immediate caller; task failures inside
the runner are converted to ``JobError`` values instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(eq=False)
class AppError(Exception):
    """Base error for job store failures."""

    message: str
    cause: Exception | None = None

    def __str__(self) -> str:  # pragma: no cover
        if self.cause is None:
            return self.message
        return f"{self.message} (cause: {self.cause})"


class ValidationError(AppError):
    """Invalid job identity or input."""


@dataclass(eq=False)
class JobDecodeError(ValidationError):
    """A job file could not be parsed into a record."""

    path: Path | None = None


class InfrastructureError(AppError):
    """IO/OS/FS failures."""
