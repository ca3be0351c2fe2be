from __future__ import annotations

import asyncio

import pytest

from callspy import BoundSpy, ReturnedCall, Spy, ThrownCall, spy


class _Boom(Exception):
    pass


class _Box:
    def __init__(self) -> None:
        self.value = 0

    def set(self, value: int) -> None:
        self.value = value


def test_spy_returns_callable_spy() -> None:
    f = spy()
    f()
    assert isinstance(f, Spy)
    assert callable(f)


def test_spy_calls_the_given_function() -> None:
    called: list[bool] = []
    f = spy(lambda: called.append(True))
    f()
    assert called == [True]


def test_spy_wrapping_bound_method_updates_instance() -> None:
    box = _Box()
    box.set = spy(box.set)  # type: ignore[method-assign]

    box.set(1)

    assert box.value == 1
    assert box.set.calls[0].receiver is None
    assert box.set.calls[0].arguments == (1,)


def test_spy_installed_on_class_records_instance_as_receiver(monkeypatch: pytest.MonkeyPatch) -> None:
    set_spy = spy(_Box.set)
    monkeypatch.setattr(_Box, "set", set_spy)
    box = _Box()

    box.set(5)

    assert box.value == 5
    assert isinstance(box.set, BoundSpy)
    assert _Box.set is set_spy
    assert set_spy.calls[0] == ReturnedCall(receiver=box, arguments=(5,), keywords={}, result=None)
    # The bound form exposes the same query surface.
    assert box.set.last_call is set_spy.last_call


def test_spy_returns_the_behavior_result_unchanged() -> None:
    sentinel = object()
    f = spy(lambda: sentinel)
    assert f() is sentinel
    assert f.calls[0].result is sentinel

    g = spy(lambda: 777)
    assert g() == 777
    assert g.calls[0].result == 777


def test_spy_reraises_the_same_exception_object() -> None:
    error = _Boom("666")

    def behavior() -> None:
        raise error

    f = spy(behavior)
    with pytest.raises(_Boom) as excinfo:
        f()

    assert excinfo.value is error
    assert f.calls[0].error is error


def test_thrown_record_is_appended_before_the_caller_sees_the_exception() -> None:
    def behavior() -> None:
        raise _Boom()

    f = spy(behavior)
    try:
        f()
    except _Boom:
        assert len(f.calls) == 1
        assert isinstance(f.calls[0], ThrownCall)
    else:  # pragma: no cover
        pytest.fail("exception was swallowed")


def test_spy_records_base_exceptions_too() -> None:
    def behavior() -> None:
        raise KeyboardInterrupt

    f = spy(behavior)
    with pytest.raises(KeyboardInterrupt):
        f()
    assert isinstance(f.last_thrown_call.error, KeyboardInterrupt)


def test_noop_spy_records_empty_call() -> None:
    f = spy()
    assert f() is None
    assert len(f.calls) == 1
    assert f.calls[0] == ReturnedCall(receiver=None, arguments=(), keywords={}, result=None)
    assert f.calls[0].kind == "returned"


def test_noop_spy_accepts_any_arguments() -> None:
    f = spy()
    f(1, None, x=2)
    assert f.calls[0].arguments == (1, None)
    assert f.calls[0].keywords == {"x": 2}


def test_explicit_receiver_is_passed_first_and_recorded_separately() -> None:
    f = spy(lambda this, a, b: (this, a, b))

    assert f.call(1, 2, 3) == (1, 2, 3)
    assert f.calls[0] == ReturnedCall(receiver=1, arguments=(2, 3), keywords={}, result=(1, 2, 3))


def test_noop_spy_with_explicit_receiver() -> None:
    f = spy()
    f.call(1, 2, 3)
    f.call(4, 5)
    assert f.calls[0] == ReturnedCall(receiver=1, arguments=(2, 3), keywords={}, result=None)
    assert f.calls[1] == ReturnedCall(receiver=4, arguments=(5,), keywords={}, result=None)


def test_keyword_named_receiver_is_forwarded_to_the_behavior() -> None:
    f = spy(lambda this, receiver: receiver)
    assert f.call("self", receiver="kw") == "kw"
    assert f.calls[0].receiver == "self"
    assert f.calls[0].keywords == {"receiver": "kw"}


def test_returned_and_thrown_calls_are_both_recorded_in_order() -> None:
    error = _Boom(-1)

    def behavior(to_throw: bool) -> int:
        if to_throw:
            raise error
        return 1

    f = spy(behavior)
    f(False)
    with pytest.raises(_Boom):
        f(True)

    assert len(f.calls) == 2
    assert f.calls[0] == ReturnedCall(receiver=None, arguments=(False,), keywords={}, result=1)
    assert f.calls[1] == ThrownCall(receiver=None, arguments=(True,), keywords={}, error=error)
    assert len(f.returned_calls) == 1
    assert len(f.thrown_calls) == 1


def test_arity_mismatch_is_recorded_as_thrown_call() -> None:
    f = spy(lambda a: a)
    with pytest.raises(TypeError):
        f(1, 2)
    assert f.calls[0].kind == "thrown"
    assert isinstance(f.calls[0].error, TypeError)
    assert f.calls[0].arguments == (1, 2)


def test_coroutine_function_records_the_coroutine_without_awaiting() -> None:
    async def behavior() -> int:
        return 3

    f = spy(behavior)
    coro = f()
    try:
        assert asyncio.iscoroutine(coro)
        assert f.calls[0].result is coro
    finally:
        coro.close()


def test_spy_copies_behavior_metadata() -> None:
    def greet(name: str) -> str:
        """Say hello."""
        return f"hello {name}"

    f = spy(greet)
    assert f.__name__ == "greet"
    assert f.__doc__ == "Say hello."
    assert f.__wrapped__ is greet
    assert f.behavior is greet


def test_spy_of_a_spy_keeps_separate_logs() -> None:
    inner = spy(lambda: 1)
    outer = spy(inner)

    outer()

    assert len(outer.calls) == 1
    assert len(inner.calls) == 1
    assert outer.calls is not inner.calls
    outer.reset()
    assert len(inner.calls) == 1
