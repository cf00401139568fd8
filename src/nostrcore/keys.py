"""Key generation, Schnorr signing and verification over secp256k1 (BIP-340)."""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from coincurve import PrivateKey
from coincurve.keys import PublicKeyXOnly

from .secret import SecretKey
from .types import (
    PUBLIC_KEY_SIZE,
    SIGNATURE_SIZE,
    InvalidKeyMaterialError,
)

logger = logging.getLogger(__name__)


def generate_secret_key() -> SecretKey:
    """
    Generate a random secret key from the OS CSPRNG.

    Candidates equal to zero or not below the curve order are rejected and
    redrawn.

    Returns:
        A fresh SecretKey
    """
    while True:
        candidate = bytearray(os.urandom(32))
        try:
            return SecretKey(candidate)
        except InvalidKeyMaterialError:
            continue
        finally:
            for i in range(len(candidate)):
                candidate[i] = 0


def public_key_from_secret(secret: SecretKey) -> bytes:
    """
    Derive the x-only public key for a secret key.

    Args:
        secret: The secret key

    Returns:
        32-byte x-only public key (even-Y convention)
    """
    return PublicKeyXOnly.from_secret(secret.reveal()).format()


def validate_public_key(public_key: bytes) -> None:
    """
    Check that 32 bytes encode the x-coordinate of a curve point.

    Raises:
        InvalidKeyMaterialError: If the key is malformed or not on the curve
    """
    if len(public_key) != PUBLIC_KEY_SIZE:
        raise InvalidKeyMaterialError(
            f"Public key must be {PUBLIC_KEY_SIZE} bytes, got {len(public_key)}"
        )
    try:
        PublicKeyXOnly(bytes(public_key))
    except (ValueError, TypeError) as e:
        raise InvalidKeyMaterialError(f"Public key is not on the curve: {e}") from e


def sign_hash(
    secret: SecretKey,
    message_hash: bytes,
    aux_randomness: Optional[bytes] = None,
) -> bytes:
    """
    Produce a BIP-340 Schnorr signature over a 32-byte message hash.

    The nonce is derived from the secret key, the message and 32 bytes of
    auxiliary randomness. Passing fixed aux randomness makes the signature
    reproducible, which is only useful for test vectors.

    Args:
        secret: The signing key
        message_hash: 32-byte digest to sign
        aux_randomness: Optional 32 bytes mixed into the nonce

    Returns:
        64-byte signature (R.x || s)

    Raises:
        InvalidKeyMaterialError: If the key cannot sign
        ValueError: If the message or aux randomness are not 32 bytes
    """
    if len(message_hash) != 32:
        raise ValueError(f"Message hash must be 32 bytes, got {len(message_hash)}")

    if aux_randomness is None:
        aux_randomness = os.urandom(32)
    elif len(aux_randomness) != 32:
        raise ValueError(f"Aux randomness must be 32 bytes, got {len(aux_randomness)}")

    try:
        private_key = PrivateKey(secret.reveal())
    except ValueError as e:
        raise InvalidKeyMaterialError(f"Invalid secret key: {e}") from e

    return private_key.sign_schnorr(bytes(message_hash), aux_randomness)


def verify_hash(public_key: bytes, message_hash: bytes, signature: bytes) -> bool:
    """
    Verify a BIP-340 signature.

    Never raises: malformed keys, signatures or hashes verify as False.

    Args:
        public_key: 32-byte x-only public key
        message_hash: 32-byte digest that was signed
        signature: 64-byte signature

    Returns:
        True if the signature is valid, False otherwise
    """
    if len(public_key) != PUBLIC_KEY_SIZE or len(signature) != SIGNATURE_SIZE:
        return False
    if len(message_hash) != 32:
        return False

    try:
        verifying_key = PublicKeyXOnly(bytes(public_key))
        return bool(verifying_key.verify(bytes(signature), bytes(message_hash)))
    except (ValueError, TypeError) as e:
        logger.debug("Signature verification rejected malformed input: %s", e)
        return False


@dataclass
class KeyPair:
    """A secret key together with its derived public key."""

    secret: SecretKey
    public_key: bytes

    @classmethod
    def generate(cls) -> "KeyPair":
        secret = generate_secret_key()
        return cls(secret=secret, public_key=public_key_from_secret(secret))

    @classmethod
    def from_secret(cls, secret: SecretKey) -> "KeyPair":
        return cls(secret=secret, public_key=public_key_from_secret(secret))

    @property
    def public_key_hex(self) -> str:
        return self.public_key.hex()

    def sign(self, message_hash: bytes, aux_randomness: Optional[bytes] = None) -> bytes:
        return sign_hash(self.secret, message_hash, aux_randomness)

    def verify(self, message_hash: bytes, signature: bytes) -> bool:
        return verify_hash(self.public_key, message_hash, signature)

    def wipe(self) -> None:
        self.secret.wipe()

    def __enter__(self) -> "KeyPair":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __repr__(self) -> str:
        return f"KeyPair(public_key={self.public_key.hex()})"
