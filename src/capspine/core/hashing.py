"""
Deterministic hashing for generated object names.

Generated trait object names embed a short hash of the trait manifest so
the same manifest always produces the same name and a changed manifest
produces a new one.

Architecture:
    ::

        compute_hash("a", 1)           → sha256("a|1")[:32]
        compute_object_hash({...})     → safe_encode(sha256(canonical json))[:10]
        gen_trait_name("web", {...}, "Scaler")
                                       → "web-scaler-<object hash>"

Examples:
    >>> compute_hash("worker", "v1.2.0") == compute_hash("worker", "v1.2.0")
    True
    >>> gen_trait_name("web", {"kind": "Ingress"}, "dummy").startswith("web-trait-")
    True

Tags:
    hashing, naming, idempotency, capspine
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from typing import Any

TRAIT_PREFIX_KEY = "trait"
DUMMY = "dummy"

# Consonants and digits only, so encoded hashes never spell words.
_SAFE_ALPHABET = "bcdfghjklmnpqrstvwxz2456789"


def compute_hash(*values: Any, length: int = 32) -> str:
    """
    Compute deterministic hash from values.

    Values are joined with ``|`` (``None`` becomes the empty string) and
    hashed with SHA-256.

    Args:
        *values: Values to hash.
        length: Number of hex characters to return (max 64).

    Returns:
        Hex digest prefix of ``length`` characters.
    """
    content = "|".join("" if v is None else str(v) for v in values)
    return hashlib.sha256(content.encode("utf-8")).hexdigest()[:length]


def safe_encode(value: str) -> str:
    """Map every character onto the consonant/digit alphabet."""
    return "".join(_SAFE_ALPHABET[ord(ch) % len(_SAFE_ALPHABET)] for ch in value)


def compute_object_hash(obj: Mapping[str, Any] | Any, length: int = 10) -> str:
    """Hash a manifest independently of key order.

    Pydantic models are dumped by alias first so a model and its YAML source
    hash identically.
    """
    if hasattr(obj, "model_dump"):
        obj = obj.model_dump(by_alias=True, exclude_none=True)
    canonical = json.dumps(obj, sort_keys=True, separators=(",", ":"), default=str)
    return safe_encode(hashlib.sha256(canonical.encode("utf-8")).hexdigest())[:length]


def gen_trait_name(component_name: str, trait: Mapping[str, Any] | Any, trait_type: str = "") -> str:
    """Generate the object name for a trait attached to a component.

    Format: ``<component>-<trait type lowercased>-<hash>``. An empty or
    ``dummy`` trait type uses ``trait`` as the middle part.
    """
    middle = TRAIT_PREFIX_KEY
    if trait_type and trait_type != DUMMY:
        middle = trait_type.lower()
    return f"{component_name}-{middle}-{compute_object_hash(trait)}"


__all__ = [
    "TRAIT_PREFIX_KEY",
    "DUMMY",
    "compute_hash",
    "safe_encode",
    "compute_object_hash",
    "gen_trait_name",
]
