"""
Legacy direct-message encryption (NIP-04).

AES-256-CBC with PKCS#7 padding, keyed directly by the raw ECDH
x-coordinate. The wire form is::

    <base64 ciphertext>?iv=<base64 iv>

THIS SCHEME IS NOT AUTHENTICATED. A modified ciphertext can decrypt to
garbage without any error, and nothing binds the message to its sender.
It is kept so older peers can still be read and written; new messages
should use ``modern_crypto``.
"""

import base64
import binascii
import logging
import os
from dataclasses import dataclass
from typing import Optional, Union

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .secret import SharedSecret
from .types import (
    LEGACY_BLOCK_SIZE,
    LEGACY_IV_SEPARATOR,
    LEGACY_IV_SIZE,
    DecodeError,
    PaddingError,
)

logger = logging.getLogger(__name__)


def _b64decode(name: str, value: str) -> bytes:
    try:
        return base64.b64decode(value.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise DecodeError(f"Invalid base64 in {name}: {e}") from e


@dataclass
class LegacyEnvelope:
    """Legacy cipher envelope: IV plus block-padded ciphertext."""
    ciphertext: bytes
    iv: bytes  # 16 bytes

    def encode(self) -> str:
        """Render the ``<ct>?iv=<iv>`` wire form."""
        return (
            base64.b64encode(self.ciphertext).decode("ascii")
            + LEGACY_IV_SEPARATOR
            + base64.b64encode(self.iv).decode("ascii")
        )

    @classmethod
    def decode(cls, content: str) -> "LegacyEnvelope":
        """
        Parse the wire form.

        Raises:
            DecodeError: On missing separator, bad base64, wrong IV size, or
                a ciphertext that is not a whole number of blocks
        """
        parts = content.split(LEGACY_IV_SEPARATOR)
        if len(parts) != 2:
            raise DecodeError("Envelope must contain exactly one '?iv=' separator")

        ciphertext = _b64decode("ciphertext", parts[0])
        iv = _b64decode("iv", parts[1])

        if len(iv) != LEGACY_IV_SIZE:
            raise DecodeError(f"IV must be {LEGACY_IV_SIZE} bytes, got {len(iv)}")
        if not ciphertext or len(ciphertext) % LEGACY_BLOCK_SIZE:
            raise DecodeError(
                f"Ciphertext length {len(ciphertext)} is not a positive multiple "
                f"of {LEGACY_BLOCK_SIZE}"
            )
        return cls(ciphertext=ciphertext, iv=iv)


def legacy_encrypt(
    shared_secret: SharedSecret,
    plaintext: Union[bytes, str],
    iv: Optional[bytes] = None,
) -> str:
    """
    Encrypt with the legacy scheme.

    Args:
        shared_secret: Raw ECDH x-coordinate (see ``ecdh.derive_shared_secret``)
        plaintext: Message bytes, or text encoded as UTF-8
        iv: Optional fixed 16-byte IV; a random one is drawn when omitted

    Returns:
        The envelope string
    """
    if isinstance(plaintext, str):
        plaintext = plaintext.encode("utf-8")
    if iv is None:
        iv = os.urandom(LEGACY_IV_SIZE)
    elif len(iv) != LEGACY_IV_SIZE:
        raise ValueError(f"IV must be {LEGACY_IV_SIZE} bytes, got {len(iv)}")

    padder = padding.PKCS7(LEGACY_BLOCK_SIZE * 8).padder()
    padded = padder.update(plaintext) + padder.finalize()

    encryptor = Cipher(algorithms.AES(shared_secret.reveal()), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()

    return LegacyEnvelope(ciphertext=ciphertext, iv=iv).encode()


def legacy_decrypt(shared_secret: SharedSecret, content: str) -> bytes:
    """
    Decrypt a legacy envelope.

    A successful return does not mean the message is authentic.

    Raises:
        DecodeError: If the envelope is malformed
        PaddingError: If the decrypted padding is invalid
    """
    envelope = LegacyEnvelope.decode(content)

    decryptor = Cipher(
        algorithms.AES(shared_secret.reveal()), modes.CBC(envelope.iv)
    ).decryptor()
    padded = decryptor.update(envelope.ciphertext) + decryptor.finalize()

    unpadder = padding.PKCS7(LEGACY_BLOCK_SIZE * 8).unpadder()
    try:
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as e:
        logger.debug("Legacy decryption produced invalid padding")
        raise PaddingError("Invalid padding after decryption") from e
