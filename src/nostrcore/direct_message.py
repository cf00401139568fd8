"""Encrypted direct messages between two keypairs."""

import time
from typing import Optional, Union

from .ecdh import derive_conversation_key, derive_shared_secret
from .event import Event, UnsignedEvent
from .keys import public_key_from_secret
from .legacy_crypto import legacy_decrypt, legacy_encrypt
from .modern_crypto import modern_decrypt, modern_encrypt
from .secret import SecretKey
from .types import (
    KIND_ENCRYPTED_DIRECT_MESSAGE,
    DecodeError,
    InvalidKeyMaterialError,
    WrongEventKindError,
)


def _decode_text(plaintext: bytes) -> str:
    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"Decrypted message is not UTF-8: {e}") from e


def encrypt_legacy_dm(
    secret: SecretKey,
    recipient_pubkey: bytes,
    message: str,
    created_at: Optional[int] = None,
) -> UnsignedEvent:
    """
    Build an unsigned kind-4 direct message using the legacy cipher.

    The event carries a ``p`` tag naming the recipient but no relay hint;
    callers that know one should add it before signing.

    Args:
        secret: Sender's secret key
        recipient_pubkey: Recipient's 32-byte public key
        message: Message text
        created_at: Optional timestamp; defaults to now

    Returns:
        The UnsignedEvent, ready for ``sign_event``
    """
    with derive_shared_secret(secret, recipient_pubkey) as shared:
        content = legacy_encrypt(shared, message)

    return UnsignedEvent(
        created_at=int(time.time()) if created_at is None else created_at,
        kind=KIND_ENCRYPTED_DIRECT_MESSAGE,
        tags=[["p", recipient_pubkey.hex()]],
        content=content,
        pubkey=public_key_from_secret(secret).hex(),
    )


def _pubkey_from_hex(name: str, value: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except (ValueError, TypeError) as e:
        raise InvalidKeyMaterialError(f"Invalid {name} hex: {e}") from e


def _counterparty(secret: SecretKey, event: Event) -> bytes:
    """Return the public key on the other end of a direct message."""
    my_pubkey = public_key_from_secret(secret).hex()
    if event.pubkey != my_pubkey:
        return _pubkey_from_hex("author pubkey", event.pubkey)

    # We sent it, so the other party is the first p tag
    for tag in event.tags_named("p"):
        if len(tag) >= 2:
            return _pubkey_from_hex("p tag", tag[1])
    raise InvalidKeyMaterialError("Direct message has no recipient p tag")


def decrypt_dm(secret: SecretKey, event: Event) -> str:
    """
    Decrypt a kind-4 direct message, as either recipient or sender.

    Raises:
        WrongEventKindError: If the event is not kind 4
        InvalidKeyMaterialError: If the counterpart key is malformed
        DecodeError: If the content is not a legacy envelope
        PaddingError: If decryption produces invalid padding
    """
    if event.kind != KIND_ENCRYPTED_DIRECT_MESSAGE:
        raise WrongEventKindError(f"Expected kind {KIND_ENCRYPTED_DIRECT_MESSAGE}, got {event.kind}")

    with derive_shared_secret(secret, _counterparty(secret, event)) as shared:
        return _decode_text(legacy_decrypt(shared, event.content))


def encrypt_for(
    secret: SecretKey,
    their_pubkey: bytes,
    plaintext: Union[bytes, str],
) -> str:
    """Encrypt with the modern cipher for a counterpart's public key."""
    with derive_conversation_key(secret, their_pubkey) as conversation_key:
        return modern_encrypt(conversation_key, plaintext)


def decrypt_from(secret: SecretKey, their_pubkey: bytes, payload: str) -> str:
    """
    Decrypt a modern payload exchanged with a counterpart.

    Raises:
        AuthenticationFailedError: If the payload was tampered with or was
            not encrypted for this pair of keys
    """
    with derive_conversation_key(secret, their_pubkey) as conversation_key:
        return _decode_text(modern_decrypt(conversation_key, payload))
