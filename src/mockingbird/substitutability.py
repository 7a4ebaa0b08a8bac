"""Structural substitutability between a double and a real class.

Both sides are reduced to a :class:`SurfaceDescriptor` (operation name to
:class:`OperationSignature`, per surface) and compared exactly:

  - singleton names must be equal: nothing missing, nothing extra
  - instance names must be equal
  - every shared name must have the same arity

A double's descriptor comes from its registry.  A plain class is
introspected once with :mod:`inspect`.  A descriptor loaded from a
manifest can stand in for a class that is not importable.
"""

from __future__ import annotations

import functools
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from mockingbird.config import MockingbirdConfig
from mockingbird.double import is_double, registry_of
from mockingbird.registry import INITIALIZER, OperationSignature, Surface

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SurfaceDescriptor:
    """The declared surface of a type, independent of any live object."""

    name: str
    singleton: Mapping[str, OperationSignature] = field(default_factory=dict)
    instance: Mapping[str, OperationSignature] = field(default_factory=dict)

    def operations(self, surface: Surface) -> Mapping[str, OperationSignature]:
        return self.singleton if surface is Surface.SINGLETON else self.instance

    def names(self, surface: Surface) -> set[str]:
        return set(self.operations(surface))

    @classmethod
    def from_double(cls, double_type: type) -> "SurfaceDescriptor":
        registry = registry_of(double_type)
        return cls(
            name=double_type.__qualname__,
            singleton={d.name: d.signature for d in registry.declarations(Surface.SINGLETON)},
            instance={d.name: d.signature for d in registry.declarations(Surface.INSTANCE)},
        )

    @classmethod
    def from_class(cls, klass: type, *, include_private: bool = False) -> "SurfaceDescriptor":
        """Introspect *klass* and every base except :class:`object`.

        Classmethods and staticmethods form the singleton surface.  Plain
        functions, properties and a custom ``__init__`` form the instance
        surface.  Dunder names other than ``__init__`` are never included.
        """
        members: dict[str, Any] = {}
        for base in reversed(klass.__mro__):
            if base is object:
                continue
            members.update(vars(base))

        singleton: dict[str, OperationSignature] = {}
        instance: dict[str, OperationSignature] = {}
        for name, member in members.items():
            if not _is_public(name, include_private):
                continue
            if isinstance(member, classmethod):
                singleton[name] = OperationSignature.from_callable(member.__func__)
            elif isinstance(member, staticmethod):
                singleton[name] = OperationSignature.from_callable(member.__func__, skip_receiver=False)
            elif isinstance(member, (property, functools.cached_property)):
                instance[name] = OperationSignature()
            elif inspect.isfunction(member):
                instance[name] = OperationSignature.from_callable(member)
        return cls(name=klass.__qualname__, singleton=singleton, instance=instance)


def _is_public(name: str, include_private: bool) -> bool:
    if name == INITIALIZER:
        return True
    if name.startswith("__"):
        return False
    return include_private or not name.startswith("_")


def describe(subject: Any, config: MockingbirdConfig | None = None) -> SurfaceDescriptor:
    """Return the :class:`SurfaceDescriptor` of a double, a class or a descriptor."""
    if isinstance(subject, SurfaceDescriptor):
        return subject
    if isinstance(subject, type) and is_double(subject):
        return SurfaceDescriptor.from_double(subject)
    if isinstance(subject, type):
        config = config or MockingbirdConfig.from_env()
        return SurfaceDescriptor.from_class(subject, include_private=config.include_private)
    raise TypeError(f"cannot describe the surface of {subject!r}; pass a class or a SurfaceDescriptor")


def substitutability_diffs(
    double_type: Any,
    candidate: Any,
    *,
    config: MockingbirdConfig | None = None,
) -> list[str]:
    """Compare surfaces, returning a list of diff descriptions.

    Returns an empty list when *candidate* can stand in for *double_type*.
    """
    config = config or MockingbirdConfig.from_env()
    double_surface = describe(double_type, config)
    candidate_surface = describe(candidate, config)

    diffs: list[str] = []
    for surface in (Surface.SINGLETON, Surface.INSTANCE):
        ours = double_surface.operations(surface)
        theirs = candidate_surface.operations(surface)
        for name in sorted(set(ours) | set(theirs)):
            path = f"{surface.value}.{name}"
            if name not in theirs:
                diffs.append(f"{path}: missing in {candidate_surface.name} (declared on the double)")
            elif name not in ours:
                diffs.append(f"{path}: extra in {candidate_surface.name} (not declared on the double)")
            elif not ours[name].matches(theirs[name], strict=config.strict_signatures):
                diffs.append(
                    f"{path}: signature differs "
                    f"(double={ours[name].describe()}, {candidate_surface.name}={theirs[name].describe()})"
                )

    if diffs:
        logger.debug(
            "%s is not substitutable by %s: %d difference(s)",
            double_surface.name, candidate_surface.name, len(diffs),
        )
    return diffs


def is_substitutable_for(
    double_type: Any,
    candidate: Any,
    *,
    config: MockingbirdConfig | None = None,
) -> bool:
    """Return True only if *candidate*'s surface exactly matches *double_type*'s."""
    return not substitutability_diffs(double_type, candidate, config=config)
