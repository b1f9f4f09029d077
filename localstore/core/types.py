"""
Shared value types.

`Result` is how every public operation reports its outcome:
`Ok(value)` or `Err(error)`, inspected with `is_ok()` / `is_err()` or a
`match` statement. Records themselves stay plain JSON-compatible dicts;
`ResourceRef` names one by (type, id).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Literal, NoReturn, Optional, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome."""

    value: T

    def is_ok(self) -> Literal[True]:
        return True

    def is_err(self) -> Literal[False]:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: Any) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> Ok[U]:
        return Ok(fn(self.value))


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed outcome; `error` is usually a LocalStoreError."""

    error: E

    def is_ok(self) -> Literal[False]:
        return False

    def is_err(self) -> Literal[True]:
        return True

    def unwrap(self) -> NoReturn:
        """Unwrapping a failure is a bug in the caller."""
        raise RuntimeError(f"unwrap() on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, fn: Callable[[Any], Any]) -> Err[E]:
        return self


Result = Union[Ok[T], Err[E]]

# {"type", "id", "attributes", "relationships"}
RecordData = dict[str, Any]

# "<namespace>-<type>-<id>"
StorageKey = str


@dataclass(frozen=True, slots=True)
class ResourceRef:
    """
    Identity of one resource, or of a whole type when `resource_id` is None.

    Built from request URLs and from write payloads.
    """

    resource_type: str
    resource_id: Optional[str] = None

    @property
    def is_collection(self) -> bool:
        return self.resource_id is None

    @classmethod
    def from_record(cls, record: RecordData) -> ResourceRef:
        """Identity of a record mapping. KeyError when type or id is missing."""
        return cls(record["type"], record["id"])

    def __str__(self) -> str:
        if self.is_collection:
            return self.resource_type
        return f"{self.resource_type}/{self.resource_id}"
