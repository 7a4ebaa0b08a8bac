"""Resolution engine: turns an invocation into a value.

Resolution order for a declared operation:

  1. record the invocation in the surface's ledger
  2. override store (queued head, then single override)
  3. declaration: body, then stored state, then fixed default
  4. hook, after a value was resolved

Overrides replace the returned value outright; bodies and defaults are
not consulted while one applies.  Hooks run regardless, since they are
side effects and never contribute the value.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from mockingbird.errors import UnpreparedOperationError
from mockingbird.ledger import Ledger
from mockingbird.overrides import OverrideStore, Raise, ResolutionKind
from mockingbird.registry import INITIALIZER, OperationDeclaration, StubRegistry, Surface

logger = logging.getLogger(__name__)


@dataclass
class SurfaceState:
    """Everything one surface of one subject owns exclusively."""

    surface: Surface
    ledger: Ledger = field(default_factory=Ledger)
    overrides: OverrideStore = field(default_factory=OverrideStore)
    # operation name -> stored value (initial-state directives, attribute writes)
    values: dict[str, Any] = field(default_factory=dict)


def install_initial_state(state: SurfaceState, declarations: Iterable[OperationDeclaration]) -> None:
    """Copy each declaration's initial-state directive into *state*.

    Values are deep-copied so subjects never share a mutable default.
    """
    for declaration in declarations:
        state.values[declaration.name] = copy.deepcopy(declaration.initial_state)


def resolve(
    subject: Any,
    registry: StubRegistry,
    state: SurfaceState,
    name: str,
    args: tuple[Any, ...] = (),
    kwargs: Mapping[str, Any] | None = None,
) -> Any:
    """Resolve one call of *name* on *subject* and return its value."""
    kwargs = dict(kwargs or {})
    declaration = registry.lookup(state.surface, name, subject)
    invocation = state.ledger.record(name, args, kwargs)

    kind, value = state.overrides.next(name)
    if kind is ResolutionKind.NONE:
        value = _evaluate(subject, declaration, state, args, kwargs)
    elif isinstance(value, Raise):
        logger.debug("%s raised by %s override (call #%d)", invocation.describe(), kind.value, invocation.sequence)
        raise value.exception
    else:
        logger.debug("%s answered by %s override (call #%d)", invocation.describe(), kind.value, invocation.sequence)

    if declaration.hook is not None:
        logger.debug("Running hook for %s", invocation.describe())
        declaration.hook(subject, *args, **kwargs)
    return value


def construct(
    subject: Any,
    registry: StubRegistry,
    state: SurfaceState,
    args: tuple[Any, ...] = (),
    kwargs: Mapping[str, Any] | None = None,
) -> None:
    """Initialise a freshly created instance subject.

    Initial-state directives are installed first, then the constructor
    arguments are recorded under :data:`INITIALIZER`, then the declared
    initializer (if any) runs.  A double without a declared initializer
    accepts any arguments.
    """
    kwargs = dict(kwargs or {})
    install_initial_state(state, registry.with_initial_state(Surface.INSTANCE))
    invocation = state.ledger.record(INITIALIZER, args, kwargs)
    logger.debug("Constructed %s with %s", type(subject).__qualname__, invocation.describe())

    if not registry.is_declared(Surface.INSTANCE, INITIALIZER):
        return
    declaration = registry.lookup(Surface.INSTANCE, INITIALIZER, subject)
    if declaration.body is not None:
        declaration.body(subject, *args, **kwargs)
    if declaration.hook is not None:
        declaration.hook(subject, *args, **kwargs)


def _evaluate(
    subject: Any,
    declaration: OperationDeclaration,
    state: SurfaceState,
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> Any:
    name = declaration.name
    if declaration.body is not None:
        logger.debug("%s answered by declared body", name)
        return declaration.body(subject, *args, **kwargs)
    if name in state.values:
        logger.debug("%s answered by stored state", name)
        return state.values[name]
    if declaration.has_default:
        logger.debug("%s answered by declared default", name)
        return declaration.default
    raise UnpreparedOperationError(name, subject)
