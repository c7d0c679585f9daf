"""Query filters for job type and status.

A filter is one of three variants: ``MatchAny`` (no constraint), ``Equals``
(exact value) or ``OneOf`` (membership). ``as_filter`` turns loose caller
values (``None``, a string, a collection) into one of them.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class MatchAny:
    def matches(self, value: str) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Equals:
    value: str

    def matches(self, value: str) -> bool:
        return value == self.value


@dataclass(frozen=True, slots=True)
class OneOf:
    values: frozenset[str]

    def matches(self, value: str) -> bool:
        return value in self.values


Filter = MatchAny | Equals | OneOf
FilterLike = Filter | str | Iterable[str] | None


def as_filter(value: Any) -> Filter:
    if value is None:
        return MatchAny()
    if isinstance(value, (MatchAny, Equals, OneOf)):
        return value
    if isinstance(value, str):
        return Equals(value)
    if isinstance(value, Iterable):
        return OneOf(frozenset(str(v) for v in value))
    raise TypeError(f"Unsupported filter value: {value!r}")


@dataclass(frozen=True, slots=True)
class JobFilter:
    """Type + status filter used by ``JobStore.query_jobs`` and ``TaskRunner.run``."""

    type: Filter = field(default_factory=MatchAny)
    status: Filter = field(default_factory=MatchAny)

    @classmethod
    def of(cls, type: FilterLike = None, status: FilterLike = None) -> JobFilter:
        return cls(type=as_filter(type), status=as_filter(status))

    def matches(self, job_type: str, job_status: str) -> bool:
        return self.type.matches(job_type) and self.status.matches(job_status)
