"""
Canonical JSON serialization and hashing helpers for column identities.

Provides a single canonical JSON policy and SHA-256 helpers so that column
identifiers are stable across runs, processes, and parameter ordering. This
module is zero-IO and uses only the Python standard library.

Notes:
    - Canonical JSON:
        - sort_keys=True
        - separators=(",", ":")
        - ensure_ascii=False
    - Hashing is performed over the UTF-8 encoded canonical JSON string.
    - Floats are serialized with their shortest round-trip repr, so 0.1 and
      0.10000000000000002 hash differently.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from typing import Any

__all__ = [
    "json_dumps_canonical",
    "hash_params",
]


def json_dumps_canonical(obj: Any) -> str:
    """
    Serialize an object to a canonical JSON string.

    Args:
        obj (Any): JSON-serializable object.

    Returns:
        str: Canonical JSON string with sort_keys=True, compact separators,
        and ensure_ascii=False.

    Notes:
        This function assumes the input is JSON-serializable and does not perform
        coercion of unsupported types.
    """
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _sha256_hexdigest(s: str) -> str:
    """Compute SHA-256 hex digest of a UTF-8 string."""
    h = hashlib.sha256()
    h.update(s.encode("utf-8"))
    return h.hexdigest()


def hash_params(params: Mapping[str, Any]) -> str:
    """
    Compute a stable identifier for a derivation parameter mapping.

    Args:
        params (Mapping[str, Any]): Parameter mapping (e.g., metric, per_capita, daily, smoothing).

    Returns:
        str: SHA-256 hex digest over the canonical JSON serialization.

    Examples:
        >>> from covex.core.hashing import hash_params
        >>> hash_params({"a": 1, "b": 2}) == hash_params({"b": 2, "a": 1})
        True
    """
    return _sha256_hexdigest(json_dumps_canonical(dict(params)))
