"""Stub registry: the declaration table of a double.

A registry maps ``(surface, name)`` to an immutable
:class:`OperationDeclaration`.  Each declaration carries an
:class:`OperationSignature` computed once, at declaration time, which is
what the substitutability checker compares.

Reprises get their own registry via :meth:`StubRegistry.fork`: the table
is copied, the (frozen) declarations are shared by reference, so later
declarations on either side stay invisible to the other.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable

from mockingbird.errors import DeclarationError, UndeclaredOperationError

logger = logging.getLogger(__name__)

INITIALIZER = "__init__"

RESERVED_NAMES = frozenset({"will_have", "reprise"})


class Surface(Enum):
    """Where an operation is invoked: on the class itself or on its instances."""

    SINGLETON = "singleton"
    INSTANCE = "instance"


class _Sentinel:
    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return self._name


NO_DEFAULT: Any = _Sentinel("NO_DEFAULT")
NO_STATE: Any = _Sentinel("NO_STATE")


# =============================================================================
# Signatures
# =============================================================================

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


@dataclass(frozen=True)
class OperationSignature:
    """Arity of an operation, excluding the receiver (``self`` / ``cls``).

    Attributes
    ----------
    required:
        Positional parameters without a default.
    optional:
        Positional parameters with a default.
    variadic:
        Whether the operation accepts ``*args``.
    keyword_only:
        Sorted names of keyword-only parameters.
    variadic_keywords:
        Whether the operation accepts ``**kwargs``.
    positional_names:
        Names of the positional parameters, compared only in strict mode.
    """

    required: int = 0
    optional: int = 0
    variadic: bool = False
    keyword_only: tuple[str, ...] = ()
    variadic_keywords: bool = False
    positional_names: tuple[str, ...] = ()

    @classmethod
    def from_callable(cls, fn: Callable[..., Any], *, skip_receiver: bool = True) -> "OperationSignature":
        """Build a signature from *fn*, dropping its first positional parameter
        when *skip_receiver* is set."""
        try:
            params = list(inspect.signature(fn).parameters.values())
        except (TypeError, ValueError) as exc:
            raise DeclarationError(f"cannot read the signature of {fn!r}: {exc}") from exc
        if skip_receiver and params and params[0].kind in _POSITIONAL:
            params = params[1:]

        positional = [p for p in params if p.kind in _POSITIONAL]
        return cls(
            required=sum(1 for p in positional if p.default is inspect.Parameter.empty),
            optional=sum(1 for p in positional if p.default is not inspect.Parameter.empty),
            variadic=any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in params),
            keyword_only=tuple(sorted(p.name for p in params if p.kind is inspect.Parameter.KEYWORD_ONLY)),
            variadic_keywords=any(p.kind is inspect.Parameter.VAR_KEYWORD for p in params),
            positional_names=tuple(p.name for p in positional),
        )

    def matches(self, other: "OperationSignature", *, strict: bool = False) -> bool:
        same_arity = (
            self.required == other.required
            and self.optional == other.optional
            and self.variadic == other.variadic
            and self.keyword_only == other.keyword_only
            and self.variadic_keywords == other.variadic_keywords
        )
        if not strict:
            return same_arity
        return same_arity and self.positional_names == other.positional_names

    def describe(self) -> str:
        parts = list(self.positional_names) or [f"<{i}>" for i in range(self.required + self.optional)]
        parts = [p if i < self.required else f"{p}=..." for i, p in enumerate(parts)]
        if self.variadic:
            parts.append("*args")
        elif self.keyword_only:
            parts.append("*")
        parts += list(self.keyword_only)
        if self.variadic_keywords:
            parts.append("**kwargs")
        return f"({', '.join(parts)})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "required": self.required,
            "optional": self.optional,
            "variadic": self.variadic,
            "keyword_only": list(self.keyword_only),
            "variadic_keywords": self.variadic_keywords,
            "positional_names": list(self.positional_names),
        }


# =============================================================================
# Declarations
# =============================================================================

@dataclass(frozen=True)
class OperationDeclaration:
    """One stubbable operation on one surface."""

    surface: Surface
    name: str
    default: Any = NO_DEFAULT
    body: Callable[..., Any] | None = None
    hook: Callable[..., Any] | None = None
    initial_state: Any = NO_STATE
    signature: OperationSignature = field(default_factory=OperationSignature)

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT

    @property
    def has_initial_state(self) -> bool:
        return self.initial_state is not NO_STATE


def validate_name(name: str) -> None:
    """Reject names the front end needs for itself."""
    if not isinstance(name, str) or not name.isidentifier():
        raise DeclarationError(f"operation name must be an identifier, got {name!r}")
    if name in RESERVED_NAMES or name.startswith("will_"):
        raise DeclarationError(f"{name!r} is reserved for overrides and cannot be declared")
    if name.startswith("_") and name != INITIALIZER:
        raise DeclarationError(f"private operation {name!r} cannot be declared")


# =============================================================================
# Registry
# =============================================================================

class StubRegistry:
    """Declaration table keyed by ``(surface, name)``."""

    def __init__(self, owner: str = "<double>") -> None:
        self.owner = owner
        self._declarations: dict[tuple[Surface, str], OperationDeclaration] = {}

    def declare(
        self,
        surface: Surface,
        name: str,
        *,
        default: Any = NO_DEFAULT,
        body: Callable[..., Any] | None = None,
        hook: Callable[..., Any] | None = None,
        initial_state: Any = NO_STATE,
        signature: OperationSignature | None = None,
    ) -> OperationDeclaration:
        """Register (or entirely replace) the declaration for ``(surface, name)``.

        The signature defaults to that of *body*, then *hook*, then a
        zero-argument accessor.
        """
        validate_name(name)
        if body is not None and default is not NO_DEFAULT:
            raise DeclarationError(f"{name!r} cannot have both a body and a fixed default")
        if name == INITIALIZER and surface is not Surface.INSTANCE:
            raise DeclarationError("the initializer belongs to the instance surface")
        if signature is None:
            source = body or hook
            signature = OperationSignature.from_callable(source) if source else OperationSignature()

        declaration = OperationDeclaration(
            surface=surface,
            name=name,
            default=default,
            body=body,
            hook=hook,
            initial_state=initial_state,
            signature=signature,
        )
        replaced = (surface, name) in self._declarations
        self._declarations[(surface, name)] = declaration
        logger.debug(
            "%s %s.%s %s on %s surface",
            "Redeclared" if replaced else "Declared",
            self.owner, name, signature.describe(), surface.value,
        )
        return declaration

    def lookup(self, surface: Surface, name: str, subject: Any = None) -> OperationDeclaration:
        """Return the declaration or raise :class:`UndeclaredOperationError`."""
        try:
            return self._declarations[(surface, name)]
        except KeyError:
            raise UndeclaredOperationError(name, subject if subject is not None else self.owner) from None

    def is_declared(self, surface: Surface, name: str) -> bool:
        return (surface, name) in self._declarations

    def names(self, surface: Surface) -> set[str]:
        return {n for (s, n) in self._declarations if s is surface}

    def declarations(self, surface: Surface | None = None) -> list[OperationDeclaration]:
        return [
            d for (s, _), d in self._declarations.items()
            if surface is None or s is surface
        ]

    def with_initial_state(self, surface: Surface) -> Iterable[OperationDeclaration]:
        return (d for d in self.declarations(surface) if d.has_initial_state)

    def fork(self, owner: str | None = None) -> "StubRegistry":
        """Return an independent registry starting from this one's declarations."""
        forked = StubRegistry(owner or self.owner)
        forked._declarations = dict(self._declarations)
        return forked
