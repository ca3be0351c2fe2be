"""Spy: a callable that records every invocation of an optional behavior."""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, overload

from .config import MIN_REPR_LIMIT, CallSpyConfig, load_config
from .models import Call, CallRow, ReturnedCall, ThrownCall

if TYPE_CHECKING:
    from .sinks import CallSink

logger = logging.getLogger(__name__)

_EMPTY_FUNCTION = "an empty function"


def _truncate_repr(value: Any, limit: int) -> str:
    """Return `repr(value)` cut down to `limit` characters."""
    try:
        text = repr(value)
    except Exception as exc:  # noqa: BLE001 - a broken __repr__ must not abort an export
        text = f"<unrepresentable {type(value).__name__}: {exc!r}>"
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def _to_row(call: Call, *, spy_name: str, index: int, repr_limit: int) -> CallRow:
    """Build a sink row summarizing one call record."""
    if isinstance(call, ThrownCall):
        outcome = call.error
        error_type: str | None = type(call.error).__name__
    else:
        outcome = call.result
        error_type = None

    return CallRow(
        spy_name=spy_name,
        index=index,
        kind=call.kind,
        receiver_repr=_truncate_repr(call.receiver, repr_limit),
        arguments_repr=_truncate_repr(call.arguments, repr_limit),
        keywords_repr=_truncate_repr(call.keywords, repr_limit),
        outcome_repr=_truncate_repr(outcome, repr_limit),
        error_type=error_type,
    )


class CallLog(Sequence[Call]):
    """Live, read-only view over a spy's records.

    The view is created once per spy, so a reference taken before `Spy.reset()`
    observes the cleared log afterwards.
    """

    __slots__ = ("_records",)

    def __init__(self, records: list[Call]) -> None:
        self._records = records

    @overload
    def __getitem__(self, index: int) -> Call: ...

    @overload
    def __getitem__(self, index: slice) -> list[Call]: ...

    def __getitem__(self, index: int | slice) -> Call | list[Call]:
        return self._records[index]

    def __len__(self) -> int:
        return len(self._records)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Sequence):
            return list(self._records) == list(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"CallLog({self._records!r})"


class BoundSpy:
    """A spy bound to a receiver, produced when a spy is looked up through an instance."""

    __slots__ = ("spy", "receiver")

    def __init__(self, spy: Spy, receiver: Any) -> None:
        self.spy = spy
        self.receiver = receiver

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.spy.call(self.receiver, *args, **kwargs)

    def __getattr__(self, name: str) -> Any:
        # Query surface (calls, reset, ...) lives on the spy.
        return getattr(self.spy, name)

    def __repr__(self) -> str:
        return f"<bound {self.spy.describe()} of {self.receiver!r}>"


class Spy:
    """Records invocations of an optional behavior.

    Every invocation appends exactly one record to the log: a `ReturnedCall`
    when the behavior completes, a `ThrownCall` when it raises. The outcome is
    then delivered to the caller unchanged (same result object, same exception
    object).

    Assigned as a class attribute, a spy acts as a method: lookups through an
    instance return a `BoundSpy` that records the instance as the receiver.
    """

    def __init__(self, behavior: Callable[..., Any] | None = None) -> None:
        """Create a spy.

        Args:
            behavior: Function to delegate to. When omitted the spy accepts any
                arguments, returns None and never raises.
        """
        self._behavior = behavior
        self._records: list[Call] = []
        self._calls = CallLog(self._records)
        if behavior is not None:
            # Metadata only; copying __dict__ would alias state when wrapping another spy.
            functools.update_wrapper(self, behavior, updated=())

    @property
    def behavior(self) -> Callable[..., Any] | None:
        """The wrapped function, or None for the no-op spy."""
        return self._behavior

    def __get__(self, instance: Any, owner: type | None = None) -> Spy | BoundSpy:
        if instance is None:
            return self
        return BoundSpy(self, instance)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        """Invoke the behavior without a receiver and record the outcome."""
        return self._invoke(None, args, kwargs, bind=False)

    def call(self, receiver: Any, /, *args: Any, **kwargs: Any) -> Any:
        """Invoke the behavior with an explicit receiver and record the outcome.

        The behavior is called as `behavior(receiver, *args, **kwargs)`; the
        receiver is recorded separately from `arguments`.
        """
        return self._invoke(receiver, args, kwargs, bind=True)

    def _invoke(self, receiver: Any, args: tuple[Any, ...], kwargs: dict[str, Any], *, bind: bool) -> Any:
        behavior = self._behavior
        try:
            if behavior is None:
                result = None
            elif bind:
                result = behavior(receiver, *args, **kwargs)
            else:
                result = behavior(*args, **kwargs)
        except BaseException as error:
            self._records.append(ThrownCall(receiver=receiver, arguments=args, keywords=kwargs, error=error))
            raise

        self._records.append(ReturnedCall(receiver=receiver, arguments=args, keywords=kwargs, result=result))
        return result

    @property
    def calls(self) -> CallLog:
        """Every recorded call, in invocation order (live view)."""
        return self._calls

    @property
    def returned_calls(self) -> list[ReturnedCall]:
        """Recorded calls whose behavior completed normally."""
        return [call for call in self._records if isinstance(call, ReturnedCall)]

    @property
    def thrown_calls(self) -> list[ThrownCall]:
        """Recorded calls whose behavior raised."""
        return [call for call in self._records if isinstance(call, ThrownCall)]

    @property
    def call_count(self) -> int:
        return len(self._records)

    @property
    def called(self) -> bool:
        return bool(self._records)

    @property
    def first_call(self) -> Call | None:
        return self._records[0] if self._records else None

    @property
    def last_call(self) -> Call | None:
        return self._records[-1] if self._records else None

    @property
    def first_returned_call(self) -> ReturnedCall | None:
        for call in self._records:
            if isinstance(call, ReturnedCall):
                return call
        return None

    @property
    def last_returned_call(self) -> ReturnedCall | None:
        for call in reversed(self._records):
            if isinstance(call, ReturnedCall):
                return call
        return None

    @property
    def first_thrown_call(self) -> ThrownCall | None:
        for call in self._records:
            if isinstance(call, ThrownCall):
                return call
        return None

    @property
    def last_thrown_call(self) -> ThrownCall | None:
        for call in reversed(self._records):
            if isinstance(call, ThrownCall):
                return call
        return None

    def reset(self) -> None:
        """Clear the recorded calls in place."""
        cleared = len(self._records)
        self._records.clear()
        logger.debug("Reset %r (%d recorded calls cleared)", self, cleared)

    def export(
        self,
        sink: CallSink,
        *,
        name: str | None = None,
        repr_limit: int | None = None,
        config: CallSpyConfig | None = None,
    ) -> int:
        """Write a summary row for each recorded call to `sink`, in log order.

        The log is left untouched and the sink stays open.

        Args:
            sink: Destination for the rows.
            name: Label stored with each row; defaults to the behavior's name.
            repr_limit: Max length of each stored repr. Defaults to
                `config.repr_limit` (`CALLSPY_REPR_LIMIT`).
            config: Settings to read defaults from; loaded from the
                environment when omitted and `repr_limit` is not given.

        Returns:
            The number of rows written.

        Raises:
            ValueError: If `repr_limit` is below the minimum.
        """
        if repr_limit is None:
            repr_limit = (config or load_config()).repr_limit
        if repr_limit < MIN_REPR_LIMIT:
            raise ValueError(f"repr_limit must be at least {MIN_REPR_LIMIT}. Got: {repr_limit!r}")

        spy_name = name or getattr(self, "__name__", None) or "spy"
        records = list(self._records)
        for index, call in enumerate(records):
            sink.write(_to_row(call, spy_name=spy_name, index=index, repr_limit=repr_limit))
        logger.debug("Exported %d calls of %s", len(records), spy_name)
        return len(records)

    def describe(self) -> str:
        """Return a human-readable description of what this spy wraps."""
        if self._behavior is None:
            return f"the spy of {_EMPTY_FUNCTION}"
        return f"the spy of {self._behavior!r}"

    def __repr__(self) -> str:
        return f"<{self.describe()}>"


@overload
def spy() -> Spy: ...


@overload
def spy(behavior: Callable[..., Any]) -> Spy: ...


def spy(behavior: Callable[..., Any] | None = None) -> Spy:
    """Create a spy, optionally wrapping `behavior`."""
    return Spy(behavior)
