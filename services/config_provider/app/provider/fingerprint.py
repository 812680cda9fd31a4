"""Content fingerprint of a bundle, used for change detection and as the ETag."""

from __future__ import annotations

import hashlib
import json
from typing import Any

from .models import ConfigBundle


def _normalize(value: Any) -> Any:
    # YAML allows non-string mapping keys; sort_keys needs them comparable.
    if isinstance(value, dict):
        return {str(k): _normalize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]
    return value


def canonical_bytes(bundle: ConfigBundle) -> bytes:
    """Serialize the fingerprinted fields with sorted keys and compact separators."""
    return json.dumps(
        _normalize(bundle.content()),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    ).encode("utf-8")


def compute_fingerprint(bundle: ConfigBundle) -> str:
    """Return the SHA-256 hex digest of ``bundle``'s content.

    ``fingerprint`` and ``loaded_at`` never participate, so re-hashing an
    unchanged bundle yields the same value.
    """
    return hashlib.sha256(canonical_bytes(bundle)).hexdigest()
