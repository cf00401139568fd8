"""
Versioned authenticated encryption (NIP-44).

Version 2 payload, base64-encoded as a single string:

    [0]       version (0x02)
    [1..32]   nonce (32 bytes)
    [33..-33] ChaCha20 ciphertext of the padded plaintext
    [-32..]   HMAC-SHA256 over nonce || ciphertext

Per-message keys are expanded from the conversation key with the nonce as
HKDF info, giving separate ChaCha20 and HMAC keys. Decryption checks the MAC
before any decryption or unpadding takes place.

The plaintext is prefixed with its length as a big-endian u16 and padded
with zeros to a bucket size: 32 bytes for anything up to 32, then steps of
32 up to 256, then steps of one eighth of the next power of two.
"""

import base64
import binascii
import logging
import os
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms
from cryptography.hazmat.primitives.kdf.hkdf import HKDFExpand

from .secret import SecretBytes, SharedSecret
from .types import (
    MODERN_MAC_SIZE,
    MODERN_MAX_PLAINTEXT_SIZE,
    MODERN_MIN_PADDED_LEN,
    MODERN_NONCE_SIZE,
    MODERN_VERSION,
    AuthenticationFailedError,
    DecodeError,
    InvalidPaddingError,
    MessageLengthError,
    UnsupportedVersionError,
)

logger = logging.getLogger(__name__)

LENGTH_PREFIX_SIZE = 2


def calc_padded_len(unpadded_len: int) -> int:
    """Return the padded size (without length prefix) for a plaintext length."""
    if unpadded_len <= MODERN_MIN_PADDED_LEN:
        return MODERN_MIN_PADDED_LEN
    next_power = 1 << (unpadded_len - 1).bit_length()
    chunk = 32 if next_power <= 256 else next_power // 8
    return chunk * ((unpadded_len - 1) // chunk + 1)


def pad(plaintext: bytes) -> bytes:
    """
    Length-prefix and zero-pad a plaintext.

    Raises:
        MessageLengthError: If the plaintext exceeds 65535 bytes
    """
    length = len(plaintext)
    if length > MODERN_MAX_PLAINTEXT_SIZE:
        raise MessageLengthError(
            f"Plaintext too large: {length} bytes (max {MODERN_MAX_PLAINTEXT_SIZE})"
        )
    prefix = length.to_bytes(LENGTH_PREFIX_SIZE, byteorder="big")
    return prefix + plaintext + bytes(calc_padded_len(length) - length)


def unpad(padded: bytes) -> bytes:
    """
    Strip the length prefix and padding.

    Raises:
        InvalidPaddingError: If the declared length does not fit the buffer
            or the buffer is not the bucket size for that length
    """
    if len(padded) < LENGTH_PREFIX_SIZE:
        raise InvalidPaddingError("Padded buffer too short")

    unpadded_len = int.from_bytes(padded[:LENGTH_PREFIX_SIZE], byteorder="big")
    if unpadded_len > len(padded) - LENGTH_PREFIX_SIZE:
        raise InvalidPaddingError(
            f"Declared length {unpadded_len} exceeds padded buffer"
        )
    if len(padded) != LENGTH_PREFIX_SIZE + calc_padded_len(unpadded_len):
        raise InvalidPaddingError("Padded buffer size does not match declared length")

    return padded[LENGTH_PREFIX_SIZE:LENGTH_PREFIX_SIZE + unpadded_len]


class MessageKeys:
    """Per-message ChaCha20 key, ChaCha20 nonce and HMAC key."""

    __slots__ = ("chacha_key", "chacha_nonce", "hmac_key")

    def __init__(self, material: bytes) -> None:
        self.chacha_key = SecretBytes(material[0:32])
        self.chacha_nonce = SecretBytes(material[32:44])
        self.hmac_key = SecretBytes(material[44:76])

    def wipe(self) -> None:
        self.chacha_key.wipe()
        self.chacha_nonce.wipe()
        self.hmac_key.wipe()

    def __enter__(self) -> "MessageKeys":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()


def get_message_keys(conversation_key: SharedSecret, nonce: bytes) -> MessageKeys:
    """Expand the conversation key into the keys for one message."""
    if len(conversation_key) != 32:
        raise ValueError("Conversation key must be 32 bytes")
    if len(nonce) != MODERN_NONCE_SIZE:
        raise ValueError(f"Nonce must be {MODERN_NONCE_SIZE} bytes, got {len(nonce)}")

    hkdf = HKDFExpand(algorithm=hashes.SHA256(), length=76, info=bytes(nonce))
    return MessageKeys(hkdf.derive(conversation_key.reveal()))


def _chacha20(keys: MessageKeys, data: bytes) -> bytes:
    # 4-byte little-endian block counter (0) followed by the 12-byte nonce
    full_nonce = b"\x00\x00\x00\x00" + keys.chacha_nonce.reveal()
    cipher = Cipher(algorithms.ChaCha20(keys.chacha_key.reveal(), full_nonce), mode=None)
    encryptor = cipher.encryptor()
    return encryptor.update(data) + encryptor.finalize()


def _hmac_aad(keys: MessageKeys, nonce: bytes, ciphertext: bytes) -> hmac.HMAC:
    h = hmac.HMAC(keys.hmac_key.reveal(), hashes.SHA256())
    h.update(nonce)
    h.update(ciphertext)
    return h


@dataclass(frozen=True)
class CipherVersion:
    """Algorithm parameters selected by an envelope's version byte."""
    version: int
    nonce_size: int
    mac_size: int
    seal: Callable[[SharedSecret, bytes, bytes], "ModernEnvelope"]
    open: Callable[[SharedSecret, "ModernEnvelope"], bytes]

    @property
    def min_payload_size(self) -> int:
        return 1 + self.nonce_size + LENGTH_PREFIX_SIZE + MODERN_MIN_PADDED_LEN + self.mac_size

    @property
    def max_payload_size(self) -> int:
        padded = LENGTH_PREFIX_SIZE + calc_padded_len(MODERN_MAX_PLAINTEXT_SIZE)
        return 1 + self.nonce_size + padded + self.mac_size


def _seal_v2(conversation_key: SharedSecret, plaintext: bytes, nonce: bytes) -> "ModernEnvelope":
    padded = pad(plaintext)
    with get_message_keys(conversation_key, nonce) as keys:
        ciphertext = _chacha20(keys, padded)
        mac = _hmac_aad(keys, nonce, ciphertext).finalize()
    return ModernEnvelope(version=0x02, nonce=nonce, ciphertext=ciphertext, mac=mac)


def _open_v2(conversation_key: SharedSecret, envelope: "ModernEnvelope") -> bytes:
    with get_message_keys(conversation_key, envelope.nonce) as keys:
        try:
            _hmac_aad(keys, envelope.nonce, envelope.ciphertext).verify(envelope.mac)
        except InvalidSignature as e:
            logger.debug("Rejected payload: MAC check failed")
            raise AuthenticationFailedError("Message authentication failed") from e
        padded = _chacha20(keys, envelope.ciphertext)
    return unpad(padded)


VERSIONS: Dict[int, CipherVersion] = {
    0x02: CipherVersion(
        version=0x02,
        nonce_size=MODERN_NONCE_SIZE,
        mac_size=MODERN_MAC_SIZE,
        seal=_seal_v2,
        open=_open_v2,
    ),
}


def _lookup_version(version: int) -> CipherVersion:
    try:
        return VERSIONS[version]
    except KeyError:
        raise UnsupportedVersionError(version) from None


@dataclass
class ModernEnvelope:
    """Decoded modern cipher payload."""
    version: int
    nonce: bytes
    ciphertext: bytes
    mac: bytes

    def encode(self) -> str:
        raw = bytes([self.version]) + self.nonce + self.ciphertext + self.mac
        return base64.b64encode(raw).decode("ascii")

    @classmethod
    def decode(cls, payload: str) -> "ModernEnvelope":
        """
        Split a base64 payload into its fields.

        Raises:
            UnsupportedVersionError: For a leading ``#`` or unknown version byte
            DecodeError: For bad base64 or a payload of impossible size
        """
        if not payload:
            raise DecodeError("Empty payload")
        if payload[0] == "#":
            raise UnsupportedVersionError("#")

        try:
            raw = base64.b64decode(payload.encode("ascii"), validate=True)
        except (binascii.Error, UnicodeEncodeError) as e:
            raise DecodeError(f"Invalid base64 payload: {e}") from e
        if not raw:
            raise DecodeError("Empty payload")

        params = _lookup_version(raw[0])
        if not params.min_payload_size <= len(raw) <= params.max_payload_size:
            raise DecodeError(f"Invalid payload size: {len(raw)} bytes")

        nonce_end = 1 + params.nonce_size
        return cls(
            version=raw[0],
            nonce=raw[1:nonce_end],
            ciphertext=raw[nonce_end:-params.mac_size],
            mac=raw[-params.mac_size:],
        )


def modern_encrypt(
    conversation_key: SharedSecret,
    plaintext: Union[bytes, str],
    nonce: Optional[bytes] = None,
    version: int = MODERN_VERSION,
) -> str:
    """
    Encrypt with the modern scheme.

    Args:
        conversation_key: Key from ``ecdh.derive_conversation_key``
        plaintext: Message bytes, or text encoded as UTF-8 (0-65535 bytes)
        nonce: Optional fixed nonce; a random one is drawn when omitted.
            Reusing a nonce under the same conversation key breaks secrecy.
        version: Envelope version to produce

    Returns:
        The base64 payload

    Raises:
        MessageLengthError: If the plaintext is too large
        UnsupportedVersionError: If the version is not known
    """
    if isinstance(plaintext, str):
        plaintext = plaintext.encode("utf-8")
    params = _lookup_version(version)
    if nonce is None:
        nonce = os.urandom(params.nonce_size)
    elif len(nonce) != params.nonce_size:
        raise ValueError(f"Nonce must be {params.nonce_size} bytes, got {len(nonce)}")

    return params.seal(conversation_key, plaintext, bytes(nonce)).encode()


def modern_decrypt(conversation_key: SharedSecret, payload: str) -> bytes:
    """
    Verify and decrypt a modern payload.

    Raises:
        UnsupportedVersionError: If the version is not known
        DecodeError: If the payload is malformed
        AuthenticationFailedError: If the MAC does not verify
        InvalidPaddingError: If the authenticated plaintext is badly padded
    """
    envelope = ModernEnvelope.decode(payload)
    return _lookup_version(envelope.version).open(conversation_key, envelope)
