"""
Guarded containers for secret material.

Secret keys, shared secrets and derived wrapping keys live in a private
``bytearray`` that is overwritten with zeros when the owner releases it.
Use the containers as context managers so the wipe happens on every exit
path, including exceptions::

    with generate_secret_key() as secret:
        public_key = public_key_from_secret(secret)

``reveal()`` hands an immutable copy to primitives that only accept
``bytes``; such copies cannot be wiped, so keep them local to the call.
"""

from typing import Union

from cryptography.hazmat.primitives import constant_time

from .types import CURVE_ORDER, SECRET_KEY_SIZE, InvalidKeyMaterialError


class SecretBytes:
    """Owned secret buffer that zeroizes itself on release."""

    __slots__ = ("_buffer", "_wiped")

    def __init__(self, data: Union[bytes, bytearray]) -> None:
        self._buffer = bytearray(data)
        self._wiped = False

    def reveal(self) -> bytes:
        """Return an immutable copy of the secret bytes."""
        if self._wiped:
            raise ValueError("Secret has been wiped")
        return bytes(self._buffer)

    def wipe(self) -> None:
        """Overwrite the buffer with zeros."""
        for i in range(len(self._buffer)):
            self._buffer[i] = 0
        self._wiped = True

    @property
    def wiped(self) -> bool:
        return self._wiped

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __del__(self) -> None:
        # __init__ may have raised before the buffer existed
        if hasattr(self, "_buffer"):
            self.wipe()

    def __len__(self) -> int:
        return len(self._buffer)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SecretBytes):
            return NotImplemented
        return constant_time.bytes_eq(bytes(self._buffer), bytes(other._buffer))

    __hash__ = None

    def __repr__(self) -> str:
        state = "wiped" if self._wiped else "redacted"
        return f"<{type(self).__name__} {state}>"


class SecretKey(SecretBytes):
    """A secp256k1 secret scalar, ``0 < k < n``."""

    __slots__ = ()

    def __init__(self, data: Union[bytes, bytearray]) -> None:
        if len(data) != SECRET_KEY_SIZE:
            raise InvalidKeyMaterialError(
                f"Secret key must be {SECRET_KEY_SIZE} bytes, got {len(data)}"
            )
        scalar = int.from_bytes(data, "big")
        if scalar == 0 or scalar >= CURVE_ORDER:
            raise InvalidKeyMaterialError("Secret key scalar out of range")
        super().__init__(data)

    @classmethod
    def from_hex(cls, value: str) -> "SecretKey":
        try:
            data = bytes.fromhex(value)
        except ValueError as e:
            raise InvalidKeyMaterialError(f"Invalid secret key hex: {e}") from e
        return cls(data)

    def hex(self) -> str:
        return self.reveal().hex()


class SharedSecret(SecretBytes):
    """A 32-byte ECDH output or derived conversation key."""

    __slots__ = ()
