"""Mockingbird: declared test doubles with spying and substitutability checks."""

from mockingbird.config import MockingbirdConfig
from mockingbird.double import (
    Double,
    Operation,
    declare,
    initialized_with,
    invocations,
    reprise,
    sing,
    state_of,
    times_told,
    times_told_with,
    told_before,
    told_with,
    was_asked_for,
    will,
    will_queue,
)
from mockingbird.errors import (
    DeclarationError,
    ExpectationNotMetError,
    ManifestError,
    MockingbirdError,
    UndeclaredOperationError,
    UnpreparedOperationError,
)
from mockingbird.ledger import Invocation, Ledger
from mockingbird.manifest import load_manifest, save_manifest
from mockingbird.overrides import OverrideStore, Raise, ResolutionKind
from mockingbird.registry import INITIALIZER, OperationDeclaration, OperationSignature, StubRegistry, Surface
from mockingbird.substitutability import (
    SurfaceDescriptor,
    describe,
    is_substitutable_for,
    substitutability_diffs,
)

__all__ = [
    "INITIALIZER",
    "DeclarationError",
    "Double",
    "ExpectationNotMetError",
    "Invocation",
    "Ledger",
    "ManifestError",
    "MockingbirdConfig",
    "MockingbirdError",
    "Operation",
    "OperationDeclaration",
    "OperationSignature",
    "OverrideStore",
    "Raise",
    "ResolutionKind",
    "StubRegistry",
    "Surface",
    "SurfaceDescriptor",
    "UndeclaredOperationError",
    "UnpreparedOperationError",
    "declare",
    "describe",
    "initialized_with",
    "invocations",
    "is_substitutable_for",
    "load_manifest",
    "reprise",
    "save_manifest",
    "sing",
    "state_of",
    "substitutability_diffs",
    "times_told",
    "times_told_with",
    "told_before",
    "told_with",
    "was_asked_for",
    "will",
    "will_queue",
]
__version__ = "0.1.0"
