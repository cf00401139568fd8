"""
nostr-core - Cryptographic core for the nostr protocol

Python implementation of event signing (BIP-340 Schnorr over secp256k1),
legacy and modern direct-message encryption, password-protected key export,
and bech32 text entities.
"""

import logging

from .secret import SecretBytes, SecretKey, SharedSecret
from .keys import (
    KeyPair,
    generate_secret_key,
    public_key_from_secret,
    sign_hash,
    verify_hash,
    validate_public_key,
)
from .canonical import serialize_event, compute_event_id
from .event import (
    Event,
    UnsignedEvent,
    sign_event,
    verify_event,
    is_valid_event,
)
from .pow import leading_zero_bits, event_pow, mine_event
from .delegation import (
    DelegationConditions,
    DelegationResult,
    DelegationStatus,
    check_delegation,
    create_delegation_tag,
    delegation_token,
)
from .ecdh import derive_shared_secret, derive_conversation_key
from .legacy_crypto import LegacyEnvelope, legacy_encrypt, legacy_decrypt
from .modern_crypto import (
    ModernEnvelope,
    calc_padded_len,
    modern_encrypt,
    modern_decrypt,
)
from .direct_message import encrypt_legacy_dm, decrypt_dm, encrypt_for, decrypt_from
from .key_export import (
    EncryptedKeyPackage,
    KeyExportConfig,
    KeySecurity,
    encrypt_secret_key,
    decrypt_secret_key,
)
from .entities import (
    AddressPointer,
    DecodedEntity,
    EntityKind,
    EventPointer,
    Profile,
    decode_entity,
    encode_entity,
    encode_npub,
    encode_nsec,
    encode_note,
    encode_nprofile,
    encode_nevent,
    encode_naddr,
    encode_nrelay,
    decode_npub,
    decode_nsec,
    decode_note,
)
from .types import (
    NostrError,
    InvalidKeyMaterialError,
    EventError,
    IdMismatchError,
    BadSignatureError,
    EventInFutureError,
    WrongEventKindError,
    PowExhaustedError,
    DecodeError,
    PaddingError,
    AuthenticationFailedError,
    WrongPassphraseError,
    UnsupportedVersionError,
    InvalidPaddingError,
    MessageLengthError,
    EntityError,
    InvalidEntityError,
    ChecksumMismatchError,
    UnknownPrefixError,
    TruncatedEntityError,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Secrets
    "SecretBytes",
    "SecretKey",
    "SharedSecret",
    # Keys
    "KeyPair",
    "generate_secret_key",
    "public_key_from_secret",
    "sign_hash",
    "verify_hash",
    "validate_public_key",
    # Events
    "serialize_event",
    "compute_event_id",
    "Event",
    "UnsignedEvent",
    "sign_event",
    "verify_event",
    "is_valid_event",
    # Proof of work
    "leading_zero_bits",
    "event_pow",
    "mine_event",
    # Delegation
    "DelegationConditions",
    "DelegationResult",
    "DelegationStatus",
    "check_delegation",
    "create_delegation_tag",
    "delegation_token",
    # Shared secrets
    "derive_shared_secret",
    "derive_conversation_key",
    # Legacy cipher
    "LegacyEnvelope",
    "legacy_encrypt",
    "legacy_decrypt",
    # Modern cipher
    "ModernEnvelope",
    "calc_padded_len",
    "modern_encrypt",
    "modern_decrypt",
    # Direct messages
    "encrypt_legacy_dm",
    "decrypt_dm",
    "encrypt_for",
    "decrypt_from",
    # Key export
    "EncryptedKeyPackage",
    "KeyExportConfig",
    "KeySecurity",
    "encrypt_secret_key",
    "decrypt_secret_key",
    # Entities
    "AddressPointer",
    "DecodedEntity",
    "EntityKind",
    "EventPointer",
    "Profile",
    "decode_entity",
    "encode_entity",
    "encode_npub",
    "encode_nsec",
    "encode_note",
    "encode_nprofile",
    "encode_nevent",
    "encode_naddr",
    "encode_nrelay",
    "decode_npub",
    "decode_nsec",
    "decode_note",
    # Errors
    "NostrError",
    "InvalidKeyMaterialError",
    "EventError",
    "IdMismatchError",
    "BadSignatureError",
    "EventInFutureError",
    "WrongEventKindError",
    "PowExhaustedError",
    "DecodeError",
    "PaddingError",
    "AuthenticationFailedError",
    "WrongPassphraseError",
    "UnsupportedVersionError",
    "InvalidPaddingError",
    "MessageLengthError",
    "EntityError",
    "InvalidEntityError",
    "ChecksumMismatchError",
    "UnknownPrefixError",
    "TruncatedEntityError",
]
