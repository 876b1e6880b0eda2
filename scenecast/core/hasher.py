"""Canonical hashing helpers for manifests and content addressing.

Content identifiers are CIDv1 strings: the ``raw`` multicodec over a
sha2-256 multihash, rendered in lowercase base32 multibase.  Servers look
files up by exact string equality, so this encoding must never drift.
"""

from __future__ import annotations

import base64
import hashlib
import json
from typing import Any

# CIDv1 header: version, raw codec, sha2-256 multihash code, digest length
_CID_VERSION = 0x01
_RAW_CODEC = 0x55
_SHA2_256 = 0x12
_SHA2_256_LENGTH = 0x20
_BASE32_PREFIX = "b"

ContentId = str  # CIDv1 text, e.g. "bafkrei..."


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce deterministic, compact JSON bytes.

    - sorted keys
    - no whitespace separators (",", ":")
    - ensure_ascii=True
    - UTF-8 encoding
    """
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


def identify(data: bytes) -> ContentId:
    """Compute the content identifier of *data*.

    Total over all byte strings, including the empty one.
    """
    digest = hashlib.sha256(data).digest()
    cid_bytes = bytes([_CID_VERSION, _RAW_CODEC, _SHA2_256, _SHA2_256_LENGTH]) + digest
    encoded = base64.b32encode(cid_bytes).decode("ascii").lower().rstrip("=")
    return f"{_BASE32_PREFIX}{encoded}"
