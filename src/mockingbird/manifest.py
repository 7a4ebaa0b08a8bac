"""Surface manifests: a class's surface recorded as YAML.

Record the real class once, where it is importable, and check doubles
against the recorded manifest anywhere else::

    save_manifest(RealUser, "tests/manifests/user.yaml")
    ...
    assert is_substitutable_for(UserDouble, load_manifest("tests/manifests/user.yaml"))

File layout::

    name: RealUser
    version: 1
    singleton:
      find: {required: 1}
    instance:
      __init__: {required: 1, positional_names: [id]}
      name: {}
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError

from mockingbird.config import MockingbirdConfig
from mockingbird.errors import ManifestError
from mockingbird.registry import OperationSignature
from mockingbird.substitutability import SurfaceDescriptor, describe

logger = logging.getLogger(__name__)

MANIFEST_VERSION = 1


# =============================================================================
# Schema
# =============================================================================

class SignatureModel(BaseModel):
    required: int = 0
    optional: int = 0
    variadic: bool = False
    keyword_only: list[str] = []
    variadic_keywords: bool = False
    positional_names: list[str] = []

    def to_signature(self) -> OperationSignature:
        return OperationSignature(
            required=self.required,
            optional=self.optional,
            variadic=self.variadic,
            keyword_only=tuple(sorted(self.keyword_only)),
            variadic_keywords=self.variadic_keywords,
            positional_names=tuple(self.positional_names),
        )


class ManifestModel(BaseModel):
    name: str
    version: int = MANIFEST_VERSION
    singleton: dict[str, SignatureModel] = {}
    instance: dict[str, SignatureModel] = {}


# =============================================================================
# Save / load
# =============================================================================

def manifest_dict(descriptor: SurfaceDescriptor) -> dict[str, Any]:
    """Return the YAML-ready mapping for *descriptor*."""
    return {
        "name": descriptor.name,
        "version": MANIFEST_VERSION,
        "singleton": {n: s.to_dict() for n, s in sorted(descriptor.singleton.items())},
        "instance": {n: s.to_dict() for n, s in sorted(descriptor.instance.items())},
    }


def save_manifest(
    subject: Any,
    path: str | Path,
    *,
    config: MockingbirdConfig | None = None,
) -> Path:
    """Write the surface of *subject* (class, double or descriptor) to *path*."""
    descriptor = describe(subject, config)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(manifest_dict(descriptor), sort_keys=False))
    logger.info(
        "Surface manifest for %s saved to %s (%d singleton, %d instance operations)",
        descriptor.name, path, len(descriptor.singleton), len(descriptor.instance),
    )
    return path


def load_manifest(path: str | Path) -> SurfaceDescriptor:
    """Read a manifest written by :func:`save_manifest`.

    Raises ``FileNotFoundError`` for a missing file and
    :class:`ManifestError` for unreadable or invalid content.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Surface manifest not found at: {path}")

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:
        raise ManifestError(f"{path}: not valid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestError(f"{path}: expected a mapping at the top level")

    try:
        model = ManifestModel.model_validate(data)
    except ValidationError as exc:
        raise ManifestError(f"{path}: invalid manifest: {exc}") from exc
    if model.version != MANIFEST_VERSION:
        raise ManifestError(f"{path}: unsupported manifest version {model.version}")

    for section in ("singleton", "instance"):
        if section not in data:
            logger.warning("Manifest %s has no %s section; treating it as empty", path, section)

    return SurfaceDescriptor(
        name=model.name,
        singleton={n: s.to_signature() for n, s in model.singleton.items()},
        instance={n: s.to_signature() for n, s in model.instance.items()},
    )
