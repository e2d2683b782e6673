"""
Deterministic hashing for the lock event chain.

Payloads are hashed over canonical JSON (sorted keys, no whitespace).
Token amounts enter payloads as decimal strings, so uint256 values hash
identically on every backend and JSON implementation.
"""

import hashlib
import json
from typing import Any

GENESIS = "GENESIS"


def _sha256(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def canonicalize_json(data: Any) -> str:
    """
    Canonical JSON text of a payload.

    Raises:
        TypeError: for values JSON cannot represent.  Callers stringify
            amounts and timestamps before they reach a payload.
    """
    return json.dumps(data, sort_keys=True, separators=(",", ":"), allow_nan=False)


def hash_payload(payload: dict) -> str:
    """Hex SHA-256 of the canonical payload."""
    return _sha256(canonicalize_json(payload))


def hash_lock_event(
    position_id: int,
    action: str,
    payload_hash: str,
    prev_hash: str | None,
) -> str:
    """
    Chain hash of one lock event.

    H(position_id | action | payload_hash | prev_hash), with the GENESIS
    marker standing in for the first event's missing predecessor.
    """
    return _sha256("|".join((str(position_id), action, payload_hash, prev_hash or GENESIS)))
