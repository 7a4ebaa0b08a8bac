"""Append-only invocation ledger.

Every call routed through a double lands here as an :class:`Invocation`
before its value is resolved.  The ledger is queried by name, arguments,
count and order; it is never rewritten.  Sequence numbers are the only
source of truth for ordering questions (``before``).
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Invocation:
    """Record of a single call made to a declared operation."""

    name: str
    args: tuple[Any, ...]
    kwargs: Mapping[str, Any]
    sequence: int
    timestamp: int = field(default_factory=time.monotonic_ns)

    def matches(self, name: str, args: tuple[Any, ...], kwargs: Mapping[str, Any]) -> bool:
        """Return True if this invocation was *name* called with exactly *args* / *kwargs*.

        Expected values sit on the left of ``==`` so matcher sentinels such
        as ``unittest.mock.ANY`` work.
        """
        return name == self.name and args == self.args and dict(kwargs) == dict(self.kwargs)

    def describe(self) -> str:
        parts = [repr(a) for a in self.args]
        parts += [f"{k}={v!r}" for k, v in self.kwargs.items()]
        return f"{self.name}({', '.join(parts)})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "args": list(self.args),
            "kwargs": dict(self.kwargs),
            "sequence": self.sequence,
            "timestamp": self.timestamp,
        }


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------

class Ledger:
    """Ordered record of invocations for one subject surface."""

    def __init__(self) -> None:
        self._invocations: list[Invocation] = []

    def __len__(self) -> int:
        return len(self._invocations)

    def __iter__(self) -> Iterator[Invocation]:
        return iter(self._invocations)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def record(self, name: str, args: tuple[Any, ...] = (), kwargs: Mapping[str, Any] | None = None) -> Invocation:
        """Append an invocation and return it.  Sequence numbers start at 0."""
        invocation = Invocation(
            name=name,
            args=tuple(args),
            kwargs=MappingProxyType(dict(kwargs or {})),
            sequence=len(self._invocations),
        )
        self._invocations.append(invocation)
        return invocation

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def invocations(self, name: str | None = None) -> list[Invocation]:
        """Return recorded invocations in call order, optionally only those of *name*."""
        if name is None:
            return list(self._invocations)
        return [i for i in self._invocations if i.name == name]

    def matching(self, name: str, args: tuple[Any, ...] = (), kwargs: Mapping[str, Any] | None = None) -> list[Invocation]:
        """Return invocations of *name* made with exactly *args* / *kwargs*."""
        kwargs = kwargs or {}
        return [i for i in self._invocations if i.matches(name, args, kwargs)]

    def times(self, name: str) -> int:
        return sum(1 for i in self._invocations if i.name == name)

    def times_with(self, name: str, args: tuple[Any, ...] = (), kwargs: Mapping[str, Any] | None = None) -> int:
        return len(self.matching(name, args, kwargs))

    def told_with(self, name: str, args: tuple[Any, ...] = (), kwargs: Mapping[str, Any] | None = None) -> bool:
        return self.times_with(name, args, kwargs) > 0

    def told_before(
        self,
        first: tuple[str, tuple[Any, ...], Mapping[str, Any]],
        second: tuple[str, tuple[Any, ...], Mapping[str, Any]],
    ) -> bool:
        """Return True if some call matching *first* precedes some call matching *second*.

        Each argument is a ``(name, args, kwargs)`` triple.  False when
        either side was never recorded.
        """
        earlier = self.matching(*first)
        later = self.matching(*second)
        if not earlier or not later:
            return False
        return earlier[0].sequence < later[-1].sequence

    def last(self, name: str | None = None) -> Invocation | None:
        found = self.invocations(name)
        return found[-1] if found else None
