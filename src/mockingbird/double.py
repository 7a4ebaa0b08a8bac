"""Declaring doubles on Python classes.

Subclass :class:`Double` and declare operations in the class body::

    class User(Double):
        @sing.singleton
        def find(cls, id):
            return cls(id)

        @sing
        def __init__(self, id):
            self.id = id            # stored state for the ``id`` operation

        id = sing()
        name = sing(default="Josh")
        address = sing()
        phone_numbers = sing(initial=[])

        @sing
        def add_phone_number(self, area_code, number):
            state_of(self)["phone_numbers"].append((area_code, number))

Every declared name becomes an :class:`Operation` entry point that routes
calls through :func:`mockingbird.engine.resolve`, and gets override
setters ``will_<name>(value)`` (also spelled ``will_have_<name>``) and
``will_<name>_queue(*values)``.

Tests should work on ``User.reprise()`` rather than ``User`` so the
shared prototype never accumulates overrides or history.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Sequence

from mockingbird import engine
from mockingbird.engine import SurfaceState
from mockingbird.errors import DeclarationError, UndeclaredOperationError
from mockingbird.ledger import Invocation, Ledger
from mockingbird.registry import (
    INITIALIZER,
    NO_DEFAULT,
    NO_STATE,
    OperationDeclaration,
    StubRegistry,
    Surface,
)

logger = logging.getLogger(__name__)

_REGISTRY_ATTR = "_mockingbird_registry"
_SURFACE_ATTR = "_mockingbird_surface"


# =============================================================================
# Declaration syntax
# =============================================================================

class Song:
    """A declaration written in a class body, consumed when the class is created."""

    def __init__(
        self,
        surface: Surface,
        body: Callable[..., Any] | None = None,
        *,
        default: Any = NO_DEFAULT,
        hook: Callable[..., Any] | None = None,
        initial: Any = NO_STATE,
    ) -> None:
        self.surface = surface
        self.body = body
        self.default = default
        self.hook = hook
        self.initial = initial

    def __call__(self, body: Callable[..., Any]) -> "Song":
        # decorator form: @sing(hook=...) applied to a function
        if self.body is not None:
            raise DeclarationError("a declaration can only have one body")
        self.body = body
        return self


class _Sing:
    """Entry point for declarations: ``sing(...)`` and ``sing.singleton(...)``."""

    def __call__(
        self,
        body: Callable[..., Any] | None = None,
        *,
        default: Any = NO_DEFAULT,
        hook: Callable[..., Any] | None = None,
        initial: Any = NO_STATE,
    ) -> Song:
        return Song(Surface.INSTANCE, body, default=default, hook=hook, initial=initial)

    def singleton(
        self,
        body: Callable[..., Any] | None = None,
        *,
        default: Any = NO_DEFAULT,
        hook: Callable[..., Any] | None = None,
        initial: Any = NO_STATE,
    ) -> Song:
        return Song(Surface.SINGLETON, body, default=default, hook=hook, initial=initial)


sing = _Sing()


# =============================================================================
# Subject plumbing
# =============================================================================

def is_double(obj: Any) -> bool:
    """Return True if *obj* is a double class or an instance of one."""
    cls = obj if isinstance(obj, type) else type(obj)
    return _REGISTRY_ATTR in vars(cls)


def registry_of(subject: Any) -> StubRegistry:
    cls = subject if isinstance(subject, type) else type(subject)
    try:
        return vars(cls)[_REGISTRY_ATTR]
    except KeyError:
        raise TypeError(f"{subject!r} is not a mockingbird double") from None


def surface_of(subject: Any) -> Surface:
    return Surface.SINGLETON if isinstance(subject, type) else Surface.INSTANCE


def surface_state(subject: Any) -> SurfaceState:
    try:
        return vars(subject)[_SURFACE_ATTR]
    except (KeyError, TypeError):
        raise TypeError(f"{subject!r} is not a constructed mockingbird double") from None


def state_of(subject: Any) -> dict[str, Any]:
    """Return the mutable stored state of *subject*, keyed by operation name."""
    return surface_state(subject).values


def ledger_of(subject: Any) -> Ledger:
    return surface_state(subject).ledger


def invoke(subject: Any, name: str, *args: Any, **kwargs: Any) -> Any:
    """Invoke *name* on *subject* through the resolution engine."""
    return engine.resolve(subject, registry_of(subject), surface_state(subject), name, args, kwargs)


def _route(instance: Any, owner: type, name: str) -> Any:
    """Pick the subject an attribute access on *instance* / *owner* addresses.

    Instance access to an operation only the class declares goes to the
    class, the way classmethods behave.
    """
    if instance is None:
        return owner
    registry = registry_of(owner)
    if not registry.is_declared(Surface.INSTANCE, name) and registry.is_declared(Surface.SINGLETON, name):
        return owner
    return instance


def _bind(subject: Any, name: str) -> Callable[..., Any]:
    def operation(*args: Any, **kwargs: Any) -> Any:
        return invoke(subject, name, *args, **kwargs)

    cls = subject if isinstance(subject, type) else type(subject)
    operation.__name__ = name
    operation.__qualname__ = f"{cls.__qualname__}.{name}"
    return operation


# =============================================================================
# Descriptors
# =============================================================================

class Operation:
    """Entry point installed on a double class for one declared name."""

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"<Operation {self.name!r}>"

    def __get__(self, instance: Any, owner: type | None = None) -> Callable[..., Any]:
        owner = owner if owner is not None else type(instance)
        registry = registry_of(owner)
        if (
            instance is None
            and registry.is_declared(Surface.INSTANCE, self.name)
            and not registry.is_declared(Surface.SINGLETON, self.name)
        ):
            # Class access to an instance operation, like an unbound method
            name = self.name

            def unbound(subject: Any, *args: Any, **kwargs: Any) -> Any:
                return invoke(subject, name, *args, **kwargs)

            unbound.__name__ = name
            unbound.__qualname__ = f"{owner.__qualname__}.{name}"
            return unbound
        return _bind(_route(instance, owner, self.name), self.name)

    def __set__(self, instance: Any, value: Any) -> None:
        """Store *value* as the instance's state for this operation."""
        registry_of(instance).lookup(Surface.INSTANCE, self.name, instance)
        state_of(instance)[self.name] = value


class OverrideSetter:
    """``will_<name>`` / ``will_have_<name>`` / ``will_<name>_queue`` bound to
    whichever subject is addressed."""

    def __init__(self, name: str, attr: str, *, queued: bool) -> None:
        self.name = name
        self.attr = attr
        self.queued = queued

    def __get__(self, instance: Any, owner: type | None = None) -> Callable[..., Any]:
        owner = owner if owner is not None else type(instance)
        subject = _route(instance, owner, self.name)
        name = self.name

        if self.queued:
            def setter(*values: Any) -> Any:
                return will_queue(subject, name, *values)
        else:
            def setter(value: Any) -> Any:
                return will(subject, name, value)
        setter.__name__ = self.attr
        return setter


class _hybridmethod:
    """Method that binds to the instance when there is one, else to the class."""

    def __init__(self, method: Callable[..., Any]) -> None:
        self.method = method

    def __get__(self, instance: Any, owner: type | None = None) -> Callable[..., Any]:
        subject = owner if instance is None else instance
        method = self.method

        def bound(*args: Any, **kwargs: Any) -> Any:
            return method(subject, *args, **kwargs)

        bound.__name__ = method.__name__
        bound.__doc__ = method.__doc__
        return bound


# =============================================================================
# Overrides
# =============================================================================

def will(subject: Any, name: str, value: Any) -> Any:
    """Set the single override for *name* on *subject*.  Returns *subject*."""
    registry_of(subject).lookup(surface_of(subject), name, subject)
    surface_state(subject).overrides.set_single(name, value)
    return subject


def will_queue(subject: Any, name: str, *values: Any) -> Any:
    """Replace the override queue for *name* on *subject*.  Returns *subject*."""
    registry_of(subject).lookup(surface_of(subject), name, subject)
    surface_state(subject).overrides.set_queue(name, values)
    return subject


# =============================================================================
# Declaring
# =============================================================================

def declare(
    double_type: type,
    name: str,
    surface: Surface = Surface.INSTANCE,
    *,
    default: Any = NO_DEFAULT,
    body: Callable[..., Any] | None = None,
    hook: Callable[..., Any] | None = None,
    initial_state: Any = NO_STATE,
) -> OperationDeclaration:
    """Declare (or redeclare) an operation on *double_type* after class creation.

    This is also the only way to declare the same name on both surfaces.
    """
    registry = registry_of(double_type)
    declaration = registry.declare(
        surface, name, default=default, body=body, hook=hook, initial_state=initial_state,
    )
    if name == INITIALIZER:
        if INITIALIZER in vars(double_type):
            delattr(double_type, INITIALIZER)
    else:
        if not isinstance(inspect.getattr_static(double_type, name, None), Operation):
            setattr(double_type, name, Operation(name))
        for setter_name, queued in (
            (f"will_{name}", False),
            (f"will_have_{name}", False),
            (f"will_{name}_queue", True),
        ):
            if not isinstance(inspect.getattr_static(double_type, setter_name, None), OverrideSetter):
                setattr(double_type, setter_name, OverrideSetter(name, setter_name, queued=queued))

    if surface is Surface.SINGLETON and declaration.has_initial_state:
        engine.install_initial_state(surface_state(double_type), [declaration])
    return declaration


def _nearest_registry(cls: type) -> StubRegistry | None:
    for base in cls.__mro__[1:]:
        registry = vars(base).get(_REGISTRY_ATTR)
        if registry is not None:
            return registry
    return None


# =============================================================================
# Base class
# =============================================================================

class Double:
    """Base class for classes whose operations are under test-double control."""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        parent = _nearest_registry(cls)
        registry = parent.fork(cls.__qualname__) if parent is not None else StubRegistry(cls.__qualname__)
        setattr(cls, _REGISTRY_ATTR, registry)
        setattr(cls, _SURFACE_ATTR, SurfaceState(Surface.SINGLETON))

        for name, member in list(vars(cls).items()):
            if isinstance(member, Song):
                declare(
                    cls, name, member.surface,
                    default=member.default,
                    body=member.body,
                    hook=member.hook,
                    initial_state=member.initial,
                )
            elif name == INITIALIZER:
                raise DeclarationError(
                    f"{cls.__qualname__}.__init__ must be declared with @sing so it is recorded"
                )

        # inherited singleton directives need installing into the fresh state too
        engine.install_initial_state(
            vars(cls)[_SURFACE_ATTR], registry.with_initial_state(Surface.SINGLETON),
        )

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        state = SurfaceState(Surface.INSTANCE)
        self.__dict__[_SURFACE_ATTR] = state
        engine.construct(self, registry_of(type(self)), state, args, kwargs)

    @classmethod
    def reprise(cls) -> type:
        """Return an isolated copy of this double.

        The copy is a subclass, so its instances are still instances of
        this class, but it owns a forked registry and starts with empty
        ledgers and no overrides.
        """
        copy = type(cls.__name__, (cls,), {
            "__module__": cls.__module__,
            "__qualname__": cls.__qualname__,
            "__doc__": cls.__doc__,
        })
        logger.debug("Reprised %s", cls.__qualname__)
        return copy

    @_hybridmethod
    def will_have(subject: Any, name: str, value: Any) -> Any:
        """Set the single override for *name*; works on classes and instances."""
        owner = subject if isinstance(subject, type) else type(subject)
        instance = None if isinstance(subject, type) else subject
        return will(_route(instance, owner, name), name, value)


def reprise(double_type: type) -> type:
    """Functional spelling of :meth:`Double.reprise`."""
    if not is_double(double_type) or not isinstance(double_type, type):
        raise TypeError(f"{double_type!r} is not a mockingbird double class")
    return double_type.reprise()


# =============================================================================
# Queries
# =============================================================================

def _checked_ledger(subject: Any, name: str) -> Ledger:
    if name != INITIALIZER:
        registry_of(subject).lookup(surface_of(subject), name, subject)
    return ledger_of(subject)


def _call_spec(spec: Sequence[Any]) -> tuple[str, tuple[Any, ...], dict[str, Any]]:
    """Normalise ``(name,)``, ``(name, args)`` or ``(name, args, kwargs)``."""
    name, *rest = spec
    args = tuple(rest[0]) if rest else ()
    kwargs = dict(rest[1]) if len(rest) > 1 else {}
    return name, args, kwargs


def invocations(subject: Any, name: str | None = None) -> list[Invocation]:
    if name is None:
        return ledger_of(subject).invocations()
    return _checked_ledger(subject, name).invocations(name)


def times_told(subject: Any, name: str) -> int:
    return _checked_ledger(subject, name).times(name)


def told_with(subject: Any, name: str, *args: Any, **kwargs: Any) -> bool:
    return _checked_ledger(subject, name).told_with(name, args, kwargs)


def times_told_with(subject: Any, name: str, *args: Any, **kwargs: Any) -> int:
    return _checked_ledger(subject, name).times_with(name, args, kwargs)


def told_before(subject: Any, first: Sequence[Any], second: Sequence[Any]) -> bool:
    """Return True if a call matching *first* happened before one matching *second*.

    Both are ``(name, args)`` or ``(name, args, kwargs)`` sequences.
    """
    first_call, second_call = _call_spec(first), _call_spec(second)
    _checked_ledger(subject, first_call[0])
    return _checked_ledger(subject, second_call[0]).told_before(first_call, second_call)


def was_asked_for(subject: Any, name: str) -> bool:
    return times_told(subject, name) > 0


def initialized_with(subject: Any) -> Invocation | None:
    """Return the recorded constructor call of an instance subject."""
    if isinstance(subject, type):
        return None
    return ledger_of(subject).last(INITIALIZER)
