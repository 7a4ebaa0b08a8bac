"""Exception hierarchy for mockingbird doubles."""

from __future__ import annotations

from typing import Any


class MockingbirdError(Exception):
    """Base exception for mockingbird."""


class DeclarationError(MockingbirdError, ValueError):
    """Raised when an operation declaration is malformed or uses a reserved name."""


class UndeclaredOperationError(MockingbirdError, AttributeError):
    """Raised when an operation that was never declared is invoked or overridden."""

    def __init__(self, operation: str, subject: Any) -> None:
        self.operation = operation
        self.subject = subject
        super().__init__(f"{subject!r} has no declared operation {operation!r}")


class UnpreparedOperationError(MockingbirdError):
    """Raised when an operation has no override, no default and no stored state.

    This is how a double forces a test to be explicit about the values it
    depends on.
    """

    def __init__(self, operation: str, subject: Any) -> None:
        self.operation = operation
        self.subject = subject
        super().__init__(
            f"{operation!r} was invoked on {subject!r} without a value: "
            f"declare a default or prepare it with will_{operation}() / "
            f"will_have({operation!r}, ...)"
        )


class ExpectationNotMetError(MockingbirdError, AssertionError):
    """Raised by :mod:`mockingbird.expectations` when a recorded history
    does not satisfy an expectation.

    ``actual`` carries the structured data the message was built from
    (invocations, counts or surface diffs).
    """

    def __init__(self, message: str, *, actual: Any = None) -> None:
        self.actual = actual
        super().__init__(message)


class ManifestError(MockingbirdError, ValueError):
    """Raised when a surface manifest cannot be read or validated."""
