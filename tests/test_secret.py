"""Tests for guarded secret containers."""

import pytest
from nostrcore.secret import SecretBytes, SecretKey, SharedSecret
from .test_vectors import ALICE_SECRET_HEX


class TestSecretBytes:
    """Test zeroization and redaction."""

    def test_wipe_zeroes_buffer(self) -> None:
        secret = SecretBytes(b"\xaa" * 32)
        buffer = secret._buffer
        secret.wipe()

        assert bytes(buffer) == bytes(32)
        assert secret.wiped

    def test_context_manager_wipes_on_exit(self) -> None:
        with SharedSecret(b"\x55" * 32) as secret:
            buffer = secret._buffer
            assert secret.reveal() == b"\x55" * 32
        assert bytes(buffer) == bytes(32)

    def test_context_manager_wipes_on_error(self) -> None:
        """The wipe also happens when the block raises."""
        with pytest.raises(RuntimeError):
            with SecretKey.from_hex(ALICE_SECRET_HEX) as secret:
                buffer = secret._buffer
                raise RuntimeError("boom")
        assert bytes(buffer) == bytes(32)

    def test_reveal_after_wipe_fails(self) -> None:
        secret = SecretBytes(b"\x01" * 32)
        secret.wipe()
        with pytest.raises(ValueError, match="wiped"):
            secret.reveal()

    def test_repr_is_redacted(self) -> None:
        secret = SecretKey.from_hex(ALICE_SECRET_HEX)
        assert ALICE_SECRET_HEX not in repr(secret)
        assert "01" not in repr(secret)
        assert "redacted" in repr(secret)

    def test_equality(self) -> None:
        assert SecretBytes(b"abc") == SecretBytes(b"abc")
        assert SecretBytes(b"abc") != SecretBytes(b"abd")

    def test_not_hashable(self) -> None:
        with pytest.raises(TypeError):
            hash(SecretBytes(b"abc"))

    def test_secret_key_hex_round_trip(self) -> None:
        assert SecretKey.from_hex(ALICE_SECRET_HEX).hex() == ALICE_SECRET_HEX
