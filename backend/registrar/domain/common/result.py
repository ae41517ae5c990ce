"""
Result types.

Validation rules return `Result[T]`. Store and service operations return one of
the outcome variants below so every call site has to branch on what happened;
none of the concurrency outcomes are raised as exceptions.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Generic, Optional, Tuple, TypeVar, Union

from registrar.domain.common.concurrency import ConflictReport, DependencyBlock

T = TypeVar("T")


class Result(Generic[T]):
    def __init__(self, is_success: bool, value: Optional[T] = None, errors: Tuple[str, ...] = ()):
        self.is_success = is_success
        self.value = value
        self.errors = errors

    @property
    def error(self) -> Optional[str]:
        return "; ".join(self.errors) if self.errors else None

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        return cls(is_success=True, value=value)

    @classmethod
    def fail(cls, *errors: str) -> "Result[T]":
        return cls(is_success=False, errors=tuple(errors))

    def __repr__(self) -> str:
        if self.is_success:
            return f"Result.ok({self.value!r})"
        return f"Result.fail({', '.join(repr(e) for e in self.errors)})"


# ------------------------------------------------------------------
# Outcome variants
# ------------------------------------------------------------------
@dataclass(frozen=True)
class Created(Generic[T]):
    record: T


@dataclass(frozen=True)
class Updated(Generic[T]):
    record: T


@dataclass(frozen=True)
class Deleted:
    record_id: int


@dataclass(frozen=True)
class Stale:
    """The version moved; `report` carries everything needed for a retry."""
    report: ConflictReport


@dataclass(frozen=True)
class Gone:
    """The record existed but another writer deleted it."""
    record_id: int


@dataclass(frozen=True)
class NotFound:
    record_id: int


@dataclass(frozen=True)
class Allowed:
    record_id: int


@dataclass(frozen=True)
class Blocked:
    block: DependencyBlock


@dataclass(frozen=True)
class Invalid:
    """Rejected before any store interaction."""
    errors: Tuple[str, ...]

    @property
    def error(self) -> str:
        return "; ".join(self.errors)


UpdateOutcome = Union[Updated, Stale, Gone, NotFound, Invalid]
DeleteOutcome = Union[Deleted, Stale, Gone, NotFound, Blocked, Invalid]
GuardOutcome = Union[Allowed, Blocked]
