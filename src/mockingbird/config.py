"""Configuration for the substitutability checker.

Controlled from the environment so a CI run can tighten the checks
without touching test code:

  - ``MOCKINGBIRD_STRICT_SIGNATURES=1`` also compares positional parameter names
  - ``MOCKINGBIRD_INCLUDE_PRIVATE=1`` counts ``_private`` methods of real classes
"""

from __future__ import annotations

import os
from dataclasses import dataclass

STRICT_SIGNATURES_ENV = "MOCKINGBIRD_STRICT_SIGNATURES"
INCLUDE_PRIVATE_ENV = "MOCKINGBIRD_INCLUDE_PRIVATE"

_TRUTHY = {"1", "true", "yes", "on"}


def _flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY


@dataclass(frozen=True)
class MockingbirdConfig:
    """
    Attributes:
        strict_signatures: compare parameter names as well as arity
        include_private: treat single-underscore methods of a real class
            as part of its surface
    """

    strict_signatures: bool = False
    include_private: bool = False

    @classmethod
    def from_env(cls) -> "MockingbirdConfig":
        return cls(
            strict_signatures=_flag(STRICT_SIGNATURES_ENV),
            include_private=_flag(INCLUDE_PRIVATE_ENV),
        )
