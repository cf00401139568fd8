"""
Bech32-encoded entities (NIP-19).

Bare entities carry a fixed-width value:

    npub       32-byte public key
    nsec       32-byte secret key
    note       32-byte event id

Composite entities carry a sequence of TLV records, each
``[type (1 byte)][length (1 byte)][value]``:

    nprofile   0: public key, 1: relay (repeatable)
    nevent     0: event id, 1: relay, 2: author, 3: kind (u32 big-endian)
    naddr      0: identifier, 1: relay, 2: author, 3: kind
    nrelay     0: relay URL

Unknown TLV types are skipped so that newer encoders stay readable.
``ncryptsec`` (password-encrypted secret keys) shares the prefix registry
but its payload is handled by ``key_export``.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from . import bech32
from .key_export import EncryptedKeyPackage
from .secret import SecretKey
from .types import (
    EVENT_ID_SIZE,
    PUBLIC_KEY_SIZE,
    InvalidEntityError,
    TruncatedEntityError,
    UnknownPrefixError,
)

logger = logging.getLogger(__name__)

URI_SCHEME = "nostr:"

TLV_SPECIAL = 0
TLV_RELAY = 1
TLV_AUTHOR = 2
TLV_KIND = 3


class EntityKind(Enum):
    """Recognized human-readable prefixes."""
    NPUB = "npub"
    NSEC = "nsec"
    NOTE = "note"
    NPROFILE = "nprofile"
    NEVENT = "nevent"
    NADDR = "naddr"
    NRELAY = "nrelay"
    NCRYPTSEC = "ncryptsec"


@dataclass
class Profile:
    """A public key with relays where the profile may be found."""
    pubkey: bytes
    relays: List[str] = field(default_factory=list)


@dataclass
class EventPointer:
    """An event id with optional relay hints, author and kind."""
    id: bytes
    relays: List[str] = field(default_factory=list)
    author: Optional[bytes] = None
    kind: Optional[int] = None


@dataclass
class AddressPointer:
    """A parameterized replaceable event address."""
    identifier: str
    pubkey: bytes
    kind: int
    relays: List[str] = field(default_factory=list)


EntityValue = Union[bytes, SecretKey, Profile, EventPointer, AddressPointer, str, EncryptedKeyPackage]


@dataclass
class DecodedEntity:
    """Result of ``decode_entity``."""
    kind: EntityKind
    value: EntityValue


def encode_tlv(records: List[Tuple[int, bytes]]) -> bytes:
    """
    Serialize TLV records.

    Raises:
        ValueError: If a type or value length does not fit in one byte
    """
    out = bytearray()
    for tlv_type, value in records:
        if not 0 <= tlv_type <= 255:
            raise ValueError(f"TLV type out of range: {tlv_type}")
        if len(value) > 255:
            raise ValueError(f"TLV value too long: {len(value)} bytes (max 255)")
        out.append(tlv_type)
        out.append(len(value))
        out += value
    return bytes(out)


def decode_tlv(data: bytes) -> Dict[int, List[bytes]]:
    """
    Parse TLV records into a map of type to values, in order of appearance.

    Raises:
        TruncatedEntityError: If a header or value runs past the end
    """
    records: Dict[int, List[bytes]] = {}
    offset = 0
    while offset < len(data):
        if offset + 2 > len(data):
            raise TruncatedEntityError(f"TLV header truncated at offset {offset}")
        tlv_type = data[offset]
        length = data[offset + 1]
        offset += 2
        if offset + length > len(data):
            raise TruncatedEntityError(
                f"TLV type {tlv_type} declares {length} bytes, "
                f"{len(data) - offset} remain"
            )
        records.setdefault(tlv_type, []).append(bytes(data[offset:offset + length]))
        offset += length
    return records


def _relay_records(relays: List[str]) -> List[Tuple[int, bytes]]:
    return [(TLV_RELAY, relay.encode("utf-8")) for relay in relays]


def _check_size(name: str, value: bytes, size: int) -> bytes:
    if len(value) != size:
        raise InvalidEntityError(f"{name} must be {size} bytes, got {len(value)}")
    return bytes(value)


def _decode_text(value: bytes) -> str:
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidEntityError(f"TLV string is not UTF-8: {e}") from e


def _required(records: Dict[int, List[bytes]], tlv_type: int, name: str) -> bytes:
    values = records.get(tlv_type)
    if not values:
        raise InvalidEntityError(f"Missing required TLV record: {name}")
    return values[0]


def _optional_author(records: Dict[int, List[bytes]]) -> Optional[bytes]:
    values = records.get(TLV_AUTHOR)
    if not values:
        return None
    return _check_size("author", values[0], PUBLIC_KEY_SIZE)


def _optional_kind(records: Dict[int, List[bytes]]) -> Optional[int]:
    values = records.get(TLV_KIND)
    if not values:
        return None
    return int.from_bytes(_check_size("kind", values[0], 4), byteorder="big")


def _relays(records: Dict[int, List[bytes]]) -> List[str]:
    return [_decode_text(value) for value in records.get(TLV_RELAY, [])]


def encode_npub(pubkey: bytes) -> str:
    return bech32.encode(EntityKind.NPUB.value, _check_size("pubkey", pubkey, PUBLIC_KEY_SIZE))


def encode_nsec(secret: SecretKey) -> str:
    return bech32.encode(EntityKind.NSEC.value, secret.reveal())


def encode_note(event_id: bytes) -> str:
    return bech32.encode(EntityKind.NOTE.value, _check_size("event id", event_id, EVENT_ID_SIZE))


def encode_nprofile(profile: Profile) -> str:
    records = [(TLV_SPECIAL, _check_size("pubkey", profile.pubkey, PUBLIC_KEY_SIZE))]
    records += _relay_records(profile.relays)
    return bech32.encode(EntityKind.NPROFILE.value, encode_tlv(records))


def encode_nevent(pointer: EventPointer) -> str:
    records = [(TLV_SPECIAL, _check_size("event id", pointer.id, EVENT_ID_SIZE))]
    records += _relay_records(pointer.relays)
    if pointer.author is not None:
        records.append((TLV_AUTHOR, _check_size("author", pointer.author, PUBLIC_KEY_SIZE)))
    if pointer.kind is not None:
        records.append((TLV_KIND, pointer.kind.to_bytes(4, byteorder="big")))
    return bech32.encode(EntityKind.NEVENT.value, encode_tlv(records))


def encode_naddr(pointer: AddressPointer) -> str:
    records = [(TLV_SPECIAL, pointer.identifier.encode("utf-8"))]
    records += _relay_records(pointer.relays)
    records.append((TLV_AUTHOR, _check_size("pubkey", pointer.pubkey, PUBLIC_KEY_SIZE)))
    records.append((TLV_KIND, pointer.kind.to_bytes(4, byteorder="big")))
    return bech32.encode(EntityKind.NADDR.value, encode_tlv(records))


def encode_nrelay(url: str) -> str:
    return bech32.encode(EntityKind.NRELAY.value, encode_tlv([(TLV_SPECIAL, url.encode("utf-8"))]))


def encode_entity(kind: EntityKind, value: EntityValue) -> str:
    """Encode any supported entity by kind."""
    encoders = {
        EntityKind.NPUB: encode_npub,
        EntityKind.NSEC: encode_nsec,
        EntityKind.NOTE: encode_note,
        EntityKind.NPROFILE: encode_nprofile,
        EntityKind.NEVENT: encode_nevent,
        EntityKind.NADDR: encode_naddr,
        EntityKind.NRELAY: encode_nrelay,
        EntityKind.NCRYPTSEC: lambda package: package.encode(),
    }
    return encoders[kind](value)


def parse_prefix(prefix: str) -> EntityKind:
    """
    Map a human-readable prefix to its entity kind.

    Raises:
        UnknownPrefixError: If the prefix is not recognized
    """
    try:
        return EntityKind(prefix)
    except ValueError:
        raise UnknownPrefixError(prefix) from None


def decode_entity(text: str) -> DecodedEntity:
    """
    Decode any supported entity, with or without a ``nostr:`` scheme.

    Raises:
        ChecksumMismatchError: If the checksum does not verify
        UnknownPrefixError: If the prefix is not a known entity kind
        TruncatedEntityError: If a TLV record overruns the payload
        InvalidEntityError: For any other malformed payload
    """
    text = text.strip()
    if text.lower().startswith(URI_SCHEME):
        text = text[len(URI_SCHEME):]

    prefix, data = bech32.decode(text)
    kind = parse_prefix(prefix)

    if kind is EntityKind.NPUB:
        value: EntityValue = _check_size("pubkey", data, PUBLIC_KEY_SIZE)
    elif kind is EntityKind.NSEC:
        value = SecretKey(_check_size("secret key", data, 32))
    elif kind is EntityKind.NOTE:
        value = _check_size("event id", data, EVENT_ID_SIZE)
    elif kind is EntityKind.NCRYPTSEC:
        value = EncryptedKeyPackage.from_bytes(data)
    else:
        records = decode_tlv(data)
        special = _required(records, TLV_SPECIAL, "special")
        if kind is EntityKind.NPROFILE:
            value = Profile(
                pubkey=_check_size("pubkey", special, PUBLIC_KEY_SIZE),
                relays=_relays(records),
            )
        elif kind is EntityKind.NEVENT:
            value = EventPointer(
                id=_check_size("event id", special, EVENT_ID_SIZE),
                relays=_relays(records),
                author=_optional_author(records),
                kind=_optional_kind(records),
            )
        elif kind is EntityKind.NADDR:
            author = _optional_author(records)
            event_kind = _optional_kind(records)
            if author is None or event_kind is None:
                raise InvalidEntityError("naddr requires author and kind records")
            value = AddressPointer(
                identifier=_decode_text(special),
                pubkey=author,
                kind=event_kind,
                relays=_relays(records),
            )
        else:
            value = _decode_text(special)

    return DecodedEntity(kind=kind, value=value)


def decode_npub(text: str) -> bytes:
    """Decode an ``npub`` string, rejecting any other kind."""
    return _expect(text, EntityKind.NPUB)


def decode_nsec(text: str) -> SecretKey:
    """Decode an ``nsec`` string, rejecting any other kind."""
    return _expect(text, EntityKind.NSEC)


def decode_note(text: str) -> bytes:
    """Decode a ``note`` string, rejecting any other kind."""
    return _expect(text, EntityKind.NOTE)


def _expect(text: str, kind: EntityKind):
    decoded = decode_entity(text)
    if decoded.kind is not kind:
        logger.debug("Expected %s entity, got %s", kind.value, decoded.kind.value)
        raise InvalidEntityError(f"Expected {kind.value}, got {decoded.kind.value}")
    return decoded.value
