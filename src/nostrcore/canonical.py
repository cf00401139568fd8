"""
Canonical event serialization.

The event id is the SHA-256 of the UTF-8 encoding of the compact JSON array

    [0,<pubkey hex>,<created_at>,<kind>,<tags>,<content>]

with no whitespace between tokens, non-ASCII characters written literally,
and string escaping limited to the quote, the backslash and control
characters. Signing and verification both go through ``serialize_event`` so
the two paths can never hash different bytes.
"""

import hashlib
import json
from typing import List, Sequence

_HEX_DIGITS = frozenset("0123456789abcdef")


def _check_pubkey_hex(pubkey_hex: str) -> None:
    if not isinstance(pubkey_hex, str) or len(pubkey_hex) != 64:
        raise ValueError("pubkey must be 64 lowercase hex characters")
    if not set(pubkey_hex) <= _HEX_DIGITS:
        raise ValueError("pubkey must be 64 lowercase hex characters")


def _check_uint(name: str, value: int) -> None:
    # bool is an int subclass and would serialize as true/false
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {value!r}")


def _normalize_tags(tags: Sequence[Sequence[str]]) -> List[List[str]]:
    normalized = []
    for tag in tags:
        if isinstance(tag, (str, bytes)):
            raise ValueError("each tag must be a sequence of strings")
        items = list(tag)
        for item in items:
            if not isinstance(item, str):
                raise ValueError(f"tag values must be strings, got {item!r}")
        normalized.append(items)
    return normalized


def serialize_event(
    pubkey_hex: str,
    created_at: int,
    kind: int,
    tags: Sequence[Sequence[str]],
    content: str,
) -> bytes:
    """
    Produce the canonical bytes that are hashed into the event id.

    Args:
        pubkey_hex: Author public key, 64 lowercase hex characters
        created_at: Unix timestamp in seconds
        kind: Event kind
        tags: Ordered list of tags, each an ordered list of strings
        content: Event content

    Returns:
        UTF-8 bytes of the canonical JSON array

    Raises:
        ValueError: If any field has the wrong type or shape
    """
    _check_pubkey_hex(pubkey_hex)
    _check_uint("created_at", created_at)
    _check_uint("kind", kind)
    if not isinstance(content, str):
        raise ValueError("content must be a string")

    payload = [0, pubkey_hex, created_at, kind, _normalize_tags(tags), content]
    text = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    return text.encode("utf-8")


def compute_event_id(
    pubkey_hex: str,
    created_at: int,
    kind: int,
    tags: Sequence[Sequence[str]],
    content: str,
) -> bytes:
    """Return the 32-byte event id for the given signable fields."""
    serialized = serialize_event(pubkey_hex, created_at, kind, tags, content)
    return hashlib.sha256(serialized).digest()
