# FILE: medvanta/backend/core/hashing.py

"""
CONTENT HASHING

Stable SHA-256 fingerprints of JSON-like payloads, used to dedupe
schedules, groups and exercise templates with identical content.
"""

import hashlib
import json


def canonical_json(payload) -> str:
    """Serialize with sorted keys and no whitespace so equal content hashes equal."""
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)


def content_hash(payload) -> str:
    return hashlib.sha256(canonical_json(payload).encode("utf-8")).hexdigest()
