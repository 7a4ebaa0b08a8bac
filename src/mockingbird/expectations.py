"""Assertions over a double's recorded history.

Each helper checks eagerly and raises :class:`ExpectationNotMetError`
(an ``AssertionError``) with the actual invocations in the message, so
they read naturally in plain pytest tests::

    told(user_class, "find").times(4)
    told(user, "address", times=0)
    told(user_class, "find").with_args(11).before(22)
    told(user_class, "find").with_args(22).and_with(33)
    not_told(user_class, "find", 123123123)

    asked_for(user, "id")
    assert_initialized_with(user, 123)
    assert_substitutable(user_class, RealUser)
"""

from __future__ import annotations

from typing import Any

from mockingbird.config import MockingbirdConfig
from mockingbird.double import initialized_with, invocations, times_told
from mockingbird.errors import ExpectationNotMetError
from mockingbird.ledger import Invocation
from mockingbird.substitutability import substitutability_diffs


def _describe_call(name: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> str:
    parts = [repr(a) for a in args] + [f"{k}={v!r}" for k, v in kwargs.items()]
    return f"{name}({', '.join(parts)})"


def _history(calls: list[Invocation]) -> str:
    if not calls:
        return "no invocations recorded"
    return "actual: " + ", ".join(c.describe() for c in calls)


class ToldExpectation:
    """Fluent checks on one operation of one subject.  Every step verifies immediately."""

    def __init__(self, subject: Any, name: str, *, times: int | None = None) -> None:
        self.subject = subject
        self.name = name
        self._last: tuple[str, tuple[Any, ...], dict[str, Any]] | None = None
        if times is not None:
            # exact count given up front, zero included
            self.times(times)
        elif times_told(subject, name) == 0:
            self._fail(f"expected {subject!r} to have been told to {name}, but it never was")

    def _calls(self) -> list[Invocation]:
        return invocations(self.subject, self.name)

    def _fail(self, message: str) -> None:
        calls = invocations(self.subject, self.name)
        raise ExpectationNotMetError(f"{message}\n  {_history(calls)}", actual=calls)

    def times(self, count: int) -> "ToldExpectation":
        """Expect exactly *count* calls (with the last ``with_args`` arguments, if any)."""
        if self._last is None:
            actual = len(self._calls())
            what = self.name
        else:
            actual = sum(1 for c in self._calls() if c.matches(*self._last))
            what = _describe_call(*self._last)
        if actual != count:
            self._fail(f"expected {what} to have been told {count} time(s), but it was told {actual} time(s)")
        return self

    def with_args(self, *args: Any, **kwargs: Any) -> "ToldExpectation":
        expected = (self.name, args, kwargs)
        if not any(c.matches(*expected) for c in self._calls()):
            self._fail(f"expected {self.subject!r} to have been told {_describe_call(*expected)}")
        self._last = expected
        return self

    and_with = with_args

    def before(self, *args: Any, **kwargs: Any) -> "ToldExpectation":
        """Expect the last ``with_args`` call to precede a call with *args* / *kwargs*."""
        if self._last is None:
            raise ValueError("before() needs a preceding with_args()")
        later = (self.name, args, kwargs)
        first = [c for c in self._calls() if c.matches(*self._last)]
        second = [c for c in self._calls() if c.matches(*later)]
        if not second or first[0].sequence >= second[-1].sequence:
            self._fail(
                f"expected {_describe_call(*self._last)} to have been told before "
                f"{_describe_call(*later)}"
            )
        return self


def told(subject: Any, name: str, *, times: int | None = None) -> ToldExpectation:
    """Expect *name* to have been told at least once, or exactly *times* times."""
    return ToldExpectation(subject, name, times=times)


asked_for = told


def not_told(subject: Any, name: str, *args: Any, **kwargs: Any) -> None:
    """Expect *name* never to have been told, or never with the given arguments."""
    calls = invocations(subject, name)
    if args or kwargs:
        offending = [c for c in calls if c.matches(name, args, kwargs)]
        what = _describe_call(name, args, kwargs)
    else:
        offending = calls
        what = name
    if offending:
        raise ExpectationNotMetError(
            f"expected {subject!r} not to have been told {what}, "
            f"but it was told {len(offending)} time(s)\n  {_history(calls)}",
            actual=calls,
        )


def not_asked_for(subject: Any, name: str) -> None:
    not_told(subject, name)


def assert_initialized_with(subject: Any, *args: Any, **kwargs: Any) -> None:
    recorded = initialized_with(subject)
    expected = _describe_call("__init__", args, kwargs)
    if recorded is None or not recorded.matches(recorded.name, args, kwargs):
        actual = recorded.describe() if recorded is not None else "nothing recorded"
        raise ExpectationNotMetError(
            f"expected {subject!r} to have been initialized with {expected}, actual: {actual}",
            actual=recorded,
        )


def assert_substitutable(double_type: Any, candidate: Any, *, config: MockingbirdConfig | None = None) -> None:
    diffs = substitutability_diffs(double_type, candidate, config=config)
    if diffs:
        raise ExpectationNotMetError(
            f"expected {candidate!r} to be substitutable for {double_type!r}:\n  " + "\n  ".join(diffs),
            actual=diffs,
        )


def assert_not_substitutable(double_type: Any, candidate: Any, *, config: MockingbirdConfig | None = None) -> None:
    if not substitutability_diffs(double_type, candidate, config=config):
        raise ExpectationNotMetError(
            f"expected {candidate!r} not to be substitutable for {double_type!r}, but the surfaces match",
            actual=[],
        )
