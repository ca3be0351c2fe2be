"""Call record models.

Records are designed to be:
- Immutable once appended to a spy's log.
- Faithful: arguments, results and exceptions are stored by identity, never copied or coerced.
- Tagged by `kind` so callers can filter without isinstance checks.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(tz=timezone.utc)


CallKind = Literal["returned", "thrown"]


class _Record(BaseModel):
    # Values under test are arbitrary objects; pydantic must not validate them.
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    # The binding the spy was invoked under (instance for methods), None when absent.
    receiver: Any = None

    # Positional arguments exactly as supplied, and keyword arguments.
    arguments: tuple[Any, ...] = ()
    keywords: dict[str, Any] = Field(default_factory=dict)


class ReturnedCall(_Record):
    """An invocation whose behavior completed normally."""

    kind: Literal["returned"] = "returned"
    result: Any = None


class ThrownCall(_Record):
    """An invocation whose behavior raised."""

    kind: Literal["thrown"] = "thrown"
    error: BaseException


Call: TypeAlias = ReturnedCall | ThrownCall


class CallRow(BaseModel):
    """A serializable summary of one call record, written to sinks."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    spy_name: str
    index: int
    kind: CallKind

    receiver_repr: str
    arguments_repr: str
    keywords_repr: str

    # Result repr for returned calls, exception repr for thrown calls.
    outcome_repr: str
    error_type: str | None = None

    logged_at: datetime = Field(default_factory=utc_now)
