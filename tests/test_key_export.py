"""Tests for password-protected secret key export."""

import pytest
from nostrcore.key_export import (
    EncryptedKeyPackage,
    KeyExportConfig,
    KeySecurity,
    decrypt_secret_key,
    encrypt_secret_key,
)
from nostrcore.secret import SecretKey
from nostrcore.types import (
    InvalidEntityError,
    UnknownPrefixError,
    UnsupportedVersionError,
    WrongPassphraseError,
)
from .test_vectors import NSEC_HEX

# Cheap scrypt cost for tests
TEST_LOG_N = 4


@pytest.fixture
def secret():
    return SecretKey.from_hex(NSEC_HEX)


@pytest.fixture
def exported(secret):
    return encrypt_secret_key(secret, "correct horse", log_n=TEST_LOG_N)


class TestKeyExportConfig:
    """Test KeyExportConfig validation."""

    def test_defaults(self) -> None:
        config = KeyExportConfig()
        assert config.log_n == 16
        assert config.key_security is KeySecurity.UNKNOWN

    @pytest.mark.parametrize("log_n", [0, 23, -1])
    def test_rejects_bad_cost(self, log_n: int) -> None:
        with pytest.raises(ValueError, match="log_n"):
            KeyExportConfig(log_n=log_n)

    def test_coerces_flag(self) -> None:
        assert KeyExportConfig(key_security=1).key_security is KeySecurity.SECURE


class TestExportRoundTrip:
    """Test encrypting and recovering secret keys."""

    def test_round_trip(self, secret, exported) -> None:
        recovered = decrypt_secret_key(exported, "correct horse")
        assert recovered == secret

    def test_format(self, exported) -> None:
        assert exported.startswith("ncryptsec1")

        package = EncryptedKeyPackage.decode(exported)
        assert package.version == 2
        assert package.log_n == TEST_LOG_N
        assert len(package.to_bytes()) == 91

    def test_fresh_salt_and_nonce(self, secret, exported) -> None:
        again = encrypt_secret_key(secret, "correct horse", log_n=TEST_LOG_N)
        assert again != exported

    @pytest.mark.parametrize("flag", list(KeySecurity))
    def test_key_security_preserved(self, secret, flag: KeySecurity) -> None:
        exported = encrypt_secret_key(secret, "pw", log_n=TEST_LOG_N, key_security=flag)
        assert EncryptedKeyPackage.decode(exported).key_security is flag

    def test_config_is_used(self, secret) -> None:
        config = KeyExportConfig(log_n=5, key_security=KeySecurity.SECURE)
        package = EncryptedKeyPackage.decode(encrypt_secret_key(secret, "pw", config=config))
        assert package.log_n == 5
        assert package.key_security is KeySecurity.SECURE

    def test_default_cost(self, secret) -> None:
        """The default scrypt cost is 2^16."""
        exported = encrypt_secret_key(secret, "pw")
        assert EncryptedKeyPackage.decode(exported).log_n == 16
        assert decrypt_secret_key(exported, "pw") == secret

    def test_empty_passphrase(self, secret) -> None:
        exported = encrypt_secret_key(secret, "", log_n=TEST_LOG_N)
        assert decrypt_secret_key(exported, "") == secret

    def test_passphrase_normalization(self, secret) -> None:
        """Compatibility-equivalent passphrases unlock the same package."""
        exported = encrypt_secret_key(secret, "cafe\u0301 \ufb01sh", log_n=TEST_LOG_N)
        assert decrypt_secret_key(exported, "caf\u00e9 fish") == secret


class TestExportFailures:
    """Test rejection of wrong passphrases and damaged packages."""

    def test_wrong_passphrase(self, exported) -> None:
        with pytest.raises(WrongPassphraseError):
            decrypt_secret_key(exported, "battery staple")

    def test_corrupted_ciphertext(self, exported) -> None:
        data = bytearray(EncryptedKeyPackage.decode(exported).to_bytes())
        data[50] ^= 0x01
        corrupted = EncryptedKeyPackage.from_bytes(bytes(data))

        with pytest.raises(WrongPassphraseError) as wrong_passphrase:
            decrypt_secret_key(corrupted, "correct horse")
        with pytest.raises(WrongPassphraseError) as wrong_both:
            decrypt_secret_key(corrupted, "battery staple")
        assert str(wrong_passphrase.value) == str(wrong_both.value)

    def test_changed_key_security_flag(self, exported) -> None:
        """The flag is authenticated along with the key."""
        package = EncryptedKeyPackage.decode(exported)
        package.key_security = KeySecurity.INSECURE
        with pytest.raises(WrongPassphraseError):
            decrypt_secret_key(package, "correct horse")

    def test_unknown_version(self, exported) -> None:
        data = bytearray(EncryptedKeyPackage.decode(exported).to_bytes())
        data[0] = 0x03
        with pytest.raises(UnsupportedVersionError):
            EncryptedKeyPackage.from_bytes(bytes(data))

    def test_wrong_size(self, exported) -> None:
        data = EncryptedKeyPackage.decode(exported).to_bytes()
        with pytest.raises(InvalidEntityError):
            EncryptedKeyPackage.from_bytes(data[:-1])

    def test_unsupported_cost(self, exported) -> None:
        package = EncryptedKeyPackage.decode(exported)
        package.log_n = 0
        with pytest.raises(InvalidEntityError):
            decrypt_secret_key(package, "correct horse")

    def test_wrong_prefix(self, secret) -> None:
        from nostrcore.entities import encode_nsec

        with pytest.raises(UnknownPrefixError):
            EncryptedKeyPackage.decode(encode_nsec(secret))
