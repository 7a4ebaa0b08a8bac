"""Per-surface override store.

Each declared operation can carry two independent overrides:

  - **single**: one value, returned on every call until replaced
  - **queue**: FIFO of values, each call consumes the head

The queue wins while it has values.  Once drained it stays drained and
resolution falls back to the single override (if any).  Setting one kind
never clears the other.
"""

from __future__ import annotations

from collections import deque
from enum import Enum
from typing import Any, Iterable


class ResolutionKind(Enum):
    """Which override layer answered a :meth:`OverrideStore.next` call."""

    QUEUED = "queued"
    SINGLE = "single"
    NONE = "none"


class Raise:
    """Override value that makes the operation raise *exception* instead of returning.

    Example::

        user_class.will_find(Raise(LookupError("no such user")))
    """

    def __init__(self, exception: BaseException) -> None:
        self.exception = exception

    def __repr__(self) -> str:
        return f"Raise({self.exception!r})"


_UNSET = object()


class OverrideStore:
    """Single and queued overrides keyed by operation name."""

    def __init__(self) -> None:
        self._singles: dict[str, Any] = {}
        self._queues: dict[str, deque[Any]] = {}

    def set_single(self, name: str, value: Any) -> None:
        """Replace the single override for *name*.  The queue is untouched."""
        self._singles[name] = value

    def set_queue(self, name: str, values: Iterable[Any]) -> None:
        """Replace the whole queue for *name*.  The single override is untouched."""
        self._queues[name] = deque(values)

    def next(self, name: str) -> tuple[ResolutionKind, Any]:
        """Return ``(kind, value)`` for the next call of *name*.

        Dequeuing is destructive.  ``(ResolutionKind.NONE, None)`` means no
        override applies and the declared default should be used.
        """
        queue = self._queues.get(name)
        if queue:
            return ResolutionKind.QUEUED, queue.popleft()
        single = self._singles.get(name, _UNSET)
        if single is not _UNSET:
            return ResolutionKind.SINGLE, single
        return ResolutionKind.NONE, None

    def has_override(self, name: str) -> bool:
        return bool(self._queues.get(name)) or name in self._singles

    def pending(self, name: str) -> list[Any]:
        """Return the values still queued for *name* (oldest first)."""
        return list(self._queues.get(name, ()))

    def stats(self) -> dict[str, Any]:
        """Return diagnostic counts about the stored overrides."""
        return {
            "singles": sorted(self._singles),
            "queued": {k: len(v) for k, v in self._queues.items() if v},
        }
