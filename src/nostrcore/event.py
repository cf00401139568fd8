"""Signing and verification of events."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .canonical import compute_event_id
from .keys import public_key_from_secret, sign_hash, verify_hash
from .secret import SecretKey
from .types import (
    EVENT_ID_SIZE,
    PUBLIC_KEY_SIZE,
    SIGNATURE_SIZE,
    BadSignatureError,
    EventError,
    EventInFutureError,
    IdMismatchError,
)

logger = logging.getLogger(__name__)


@dataclass
class UnsignedEvent:
    """Fields of an event before it has an id and signature.

    ``pubkey`` is filled in from the signing key when left empty.
    """
    created_at: int
    kind: int
    tags: List[List[str]] = field(default_factory=list)
    content: str = ""
    pubkey: Optional[str] = None


@dataclass(frozen=True)
class Event:
    """A signed event.

    Tags are stored as tuples so a signed event cannot be mutated in place.
    """
    id: str  # 64 hex chars
    pubkey: str  # 64 hex chars
    created_at: int
    kind: int
    tags: Tuple[Tuple[str, ...], ...]
    content: str
    sig: str  # 128 hex chars
    ots: Optional[str] = None

    def to_dict(self) -> dict:
        """Return the wire representation of the event."""
        data = {
            "id": self.id,
            "pubkey": self.pubkey,
            "created_at": self.created_at,
            "kind": self.kind,
            "tags": [list(tag) for tag in self.tags],
            "content": self.content,
            "sig": self.sig,
        }
        if self.ots is not None:
            data["ots"] = self.ots
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Event":
        """
        Build an event from its wire representation.

        The result is not verified; call ``verify_event`` before trusting it.

        Raises:
            ValueError: If a required field is missing
        """
        try:
            return cls(
                id=data["id"],
                pubkey=data["pubkey"],
                created_at=data["created_at"],
                kind=data["kind"],
                tags=tuple(tuple(tag) for tag in data["tags"]),
                content=data["content"],
                sig=data["sig"],
                ots=data.get("ots"),
            )
        except KeyError as e:
            raise ValueError(f"Missing event field: {e.args[0]}") from e

    @property
    def id_bytes(self) -> bytes:
        return bytes.fromhex(self.id)

    def tags_named(self, name: str) -> List[Tuple[str, ...]]:
        """Return the tags whose first element is ``name``."""
        return [tag for tag in self.tags if tag and tag[0] == name]


def event_id_for(unsigned: UnsignedEvent) -> bytes:
    """Compute the id an unsigned event will have once signed."""
    if unsigned.pubkey is None:
        raise ValueError("Unsigned event has no pubkey")
    return compute_event_id(
        unsigned.pubkey,
        unsigned.created_at,
        unsigned.kind,
        unsigned.tags,
        unsigned.content,
    )


def sign_event(
    secret: SecretKey,
    unsigned: UnsignedEvent,
    aux_randomness: Optional[bytes] = None,
) -> Event:
    """
    Compute the id of an event and sign it.

    Args:
        secret: Author's secret key
        unsigned: Event fields to sign
        aux_randomness: Optional fixed aux randomness for reproducible output

    Returns:
        The signed Event

    Raises:
        ValueError: If the unsigned event names a pubkey that does not
            belong to the secret key, or a field is malformed
    """
    pubkey_hex = public_key_from_secret(secret).hex()
    if unsigned.pubkey is not None and unsigned.pubkey != pubkey_hex:
        raise ValueError("Unsigned event pubkey does not match the signing key")

    tags = [list(tag) for tag in unsigned.tags]
    event_id = compute_event_id(
        pubkey_hex, unsigned.created_at, unsigned.kind, tags, unsigned.content
    )
    signature = sign_hash(secret, event_id, aux_randomness)

    return Event(
        id=event_id.hex(),
        pubkey=pubkey_hex,
        created_at=unsigned.created_at,
        kind=unsigned.kind,
        tags=tuple(tuple(tag) for tag in tags),
        content=unsigned.content,
        sig=signature.hex(),
    )


def _decode_hex_field(name: str, value: str, size: int) -> bytes:
    try:
        raw = bytes.fromhex(value)
    except (ValueError, TypeError):
        raw = b""
    if len(raw) != size:
        raise BadSignatureError(f"Malformed {name}")
    return raw


def verify_event(event: Event, max_time: Optional[int] = None) -> None:
    """
    Check an event's id and signature.

    The id is recomputed from the event's fields first; only when it matches
    is the signature checked against it.

    Args:
        event: The event to check
        max_time: Optional latest acceptable created_at

    Raises:
        IdMismatchError: If the id is not the hash of the fields
        BadSignatureError: If the signature does not verify
        EventInFutureError: If created_at is later than max_time
    """
    try:
        computed = compute_event_id(
            event.pubkey, event.created_at, event.kind, event.tags, event.content
        )
    except ValueError as e:
        raise IdMismatchError(f"Event fields cannot be canonicalized: {e}") from e

    try:
        stored = bytes.fromhex(event.id)
    except (ValueError, TypeError):
        stored = b""
    if len(stored) != EVENT_ID_SIZE or stored != computed:
        logger.debug("Rejected event %s: id mismatch", event.id)
        raise IdMismatchError(f"Event id {event.id} does not match {computed.hex()}")

    pubkey = _decode_hex_field("pubkey", event.pubkey, PUBLIC_KEY_SIZE)
    signature = _decode_hex_field("signature", event.sig, SIGNATURE_SIZE)
    if not verify_hash(pubkey, computed, signature):
        logger.debug("Rejected event %s: bad signature", event.id)
        raise BadSignatureError(f"Invalid signature on event {event.id}")

    if max_time is not None and event.created_at > max_time:
        raise EventInFutureError(
            f"Event created_at {event.created_at} is after {max_time}"
        )


def is_valid_event(event: Event, max_time: Optional[int] = None) -> bool:
    """Return True if the event passes ``verify_event``."""
    try:
        verify_event(event, max_time)
    except EventError:
        return False
    return True
