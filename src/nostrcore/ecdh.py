"""Diffie-Hellman shared secrets between two secp256k1 keypairs."""

from coincurve import PublicKey
from cryptography.hazmat.primitives import hashes, hmac

from .keys import validate_public_key
from .secret import SecretKey, SharedSecret
from .types import CONVERSATION_KEY_SALT, InvalidKeyMaterialError


def derive_shared_secret(secret: SecretKey, their_public_key: bytes) -> SharedSecret:
    """
    Multiply the counterpart's point by our scalar and keep the x-coordinate.

    The x-only public key is lifted to the even-Y point; the x-coordinate of
    the product does not depend on that choice, so both directions agree.

    Args:
        secret: Our secret key
        their_public_key: Counterpart's 32-byte x-only public key

    Returns:
        The unhashed 32-byte x-coordinate

    Raises:
        InvalidKeyMaterialError: If the public key is not on the curve
    """
    validate_public_key(their_public_key)
    try:
        point = PublicKey(b"\x02" + bytes(their_public_key))
        product = point.multiply(secret.reveal())
    except ValueError as e:
        raise InvalidKeyMaterialError(f"ECDH failed: {e}") from e

    # Compressed SEC1 is the parity byte followed by x
    return SharedSecret(product.format(compressed=True)[1:])


def derive_conversation_key(secret: SecretKey, their_public_key: bytes) -> SharedSecret:
    """
    Derive the conversation key used by the modern cipher.

    This is HKDF-Extract with salt ``nip44-v2`` over the raw ECDH output.
    Both parties obtain the same key.
    """
    with derive_shared_secret(secret, their_public_key) as shared:
        h = hmac.HMAC(CONVERSATION_KEY_SALT, hashes.SHA256())
        h.update(shared.reveal())
        return SharedSecret(h.finalize())
