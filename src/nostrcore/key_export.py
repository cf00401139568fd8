"""
Password-protected secret key export (NIP-49).

The secret key is encrypted with XChaCha20-Poly1305 under a key derived from
the passphrase with scrypt (r=8, p=1, N=2^log_n). The key-security flag is
authenticated as associated data. The package is rendered as an
``ncryptsec`` bech32 string.

## Package Format (91 bytes)

    [0]      version (0x02)
    [1]      log_n
    [2-17]   salt (16 bytes)
    [18-41]  nonce (24 bytes)
    [42]     key security flag
    [43-90]  ciphertext (32 bytes) + tag (16 bytes)

## Security

- scrypt at log_n=16 uses 64 MiB and takes on the order of 100ms; this is
  the default and the minimum to use for real keys
- Passphrases are NFKC-normalized so the same phrase typed on different
  systems derives the same key
- A wrong passphrase and a corrupted package fail identically
"""

import logging
import os
import unicodedata
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Dict, Optional, Union

from cryptography.hazmat.primitives.kdf.scrypt import Scrypt
from nacl.bindings import (
    crypto_aead_xchacha20poly1305_ietf_decrypt,
    crypto_aead_xchacha20poly1305_ietf_encrypt,
)
from nacl.exceptions import CryptoError

from . import bech32
from .secret import SecretBytes, SecretKey
from .types import (
    KEY_EXPORT_DEFAULT_LOG_N,
    KEY_EXPORT_NONCE_SIZE,
    KEY_EXPORT_PACKAGE_SIZE,
    KEY_EXPORT_SALT_SIZE,
    KEY_EXPORT_VERSION,
    InvalidEntityError,
    InvalidKeyMaterialError,
    UnknownPrefixError,
    UnsupportedVersionError,
    WrongPassphraseError,
)

logger = logging.getLogger(__name__)

NCRYPTSEC_PREFIX = "ncryptsec"

# scrypt memory is 128 * r * 2^log_n bytes; 2^22 needs 4 GiB
MIN_LOG_N = 1
MAX_LOG_N = 22
SCRYPT_R = 8
SCRYPT_P = 1


class KeySecurity(IntEnum):
    """How carefully the secret key has been handled before export."""
    INSECURE = 0x00  # known to have been handled insecurely
    SECURE = 0x01  # not known to have been handled insecurely
    UNKNOWN = 0x02  # the client does not track this


@dataclass
class KeyExportConfig:
    """Configuration for encrypted key export."""
    log_n: int = KEY_EXPORT_DEFAULT_LOG_N
    key_security: KeySecurity = KeySecurity.UNKNOWN

    def __post_init__(self) -> None:
        if not MIN_LOG_N <= self.log_n <= MAX_LOG_N:
            raise ValueError(f"log_n must be between {MIN_LOG_N} and {MAX_LOG_N}, got {self.log_n}")
        self.key_security = KeySecurity(self.key_security)


@dataclass
class EncryptedKeyPackage:
    """A secret key encrypted under a passphrase."""
    version: int
    log_n: int
    salt: bytes  # 16 bytes
    nonce: bytes  # 24 bytes
    key_security: KeySecurity
    ciphertext: bytes  # 32-byte key + 16-byte tag

    def to_bytes(self) -> bytes:
        return (
            bytes([self.version, self.log_n])
            + self.salt
            + self.nonce
            + bytes([int(self.key_security)])
            + self.ciphertext
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "EncryptedKeyPackage":
        """
        Parse a package.

        Raises:
            UnsupportedVersionError: If the version byte is unknown
            InvalidEntityError: If the data has the wrong size or flag
        """
        if not data:
            raise InvalidEntityError("Empty encrypted key package")
        version = data[0]
        if version not in _UNWRAPPERS:
            raise UnsupportedVersionError(version)
        if len(data) != KEY_EXPORT_PACKAGE_SIZE:
            raise InvalidEntityError(
                f"Encrypted key package must be {KEY_EXPORT_PACKAGE_SIZE} bytes, got {len(data)}"
            )

        offset = 2
        salt = data[offset:offset + KEY_EXPORT_SALT_SIZE]
        offset += KEY_EXPORT_SALT_SIZE
        nonce = data[offset:offset + KEY_EXPORT_NONCE_SIZE]
        offset += KEY_EXPORT_NONCE_SIZE
        try:
            key_security = KeySecurity(data[offset])
        except ValueError as e:
            raise InvalidEntityError(f"Unknown key security flag: {data[offset]}") from e
        offset += 1

        return cls(
            version=version,
            log_n=data[1],
            salt=bytes(salt),
            nonce=bytes(nonce),
            key_security=key_security,
            ciphertext=bytes(data[offset:]),
        )

    def encode(self) -> str:
        """Render as an ``ncryptsec`` string."""
        return bech32.encode(NCRYPTSEC_PREFIX, self.to_bytes())

    @classmethod
    def decode(cls, text: str) -> "EncryptedKeyPackage":
        """
        Parse an ``ncryptsec`` string.

        Raises:
            UnknownPrefixError: If the prefix is not ``ncryptsec``
            ChecksumMismatchError: If the checksum does not verify
        """
        prefix, data = bech32.decode(text.strip())
        if prefix != NCRYPTSEC_PREFIX:
            raise UnknownPrefixError(prefix)
        return cls.from_bytes(data)


def _normalize_passphrase(passphrase: str) -> bytes:
    return unicodedata.normalize("NFKC", passphrase).encode("utf-8")


def _derive_wrapping_key(passphrase: str, salt: bytes, log_n: int) -> SecretBytes:
    if not MIN_LOG_N <= log_n <= MAX_LOG_N:
        raise InvalidEntityError(f"Unsupported scrypt cost log_n={log_n}")
    kdf = Scrypt(salt=salt, length=32, n=2 ** log_n, r=SCRYPT_R, p=SCRYPT_P)
    return SecretBytes(kdf.derive(_normalize_passphrase(passphrase)))


def _unwrap_v2(package: EncryptedKeyPackage, passphrase: str) -> SecretKey:
    with _derive_wrapping_key(passphrase, package.salt, package.log_n) as wrapping_key:
        try:
            plaintext = crypto_aead_xchacha20poly1305_ietf_decrypt(
                package.ciphertext,
                bytes([int(package.key_security)]),
                package.nonce,
                wrapping_key.reveal(),
            )
        except CryptoError as e:
            logger.debug("Encrypted key package failed authentication")
            raise WrongPassphraseError() from e

    with SecretBytes(plaintext) as buffer:
        try:
            return SecretKey(buffer.reveal())
        except InvalidKeyMaterialError as e:
            # Authenticated but not a valid scalar: the exporter was broken
            raise WrongPassphraseError() from e


_UNWRAPPERS: Dict[int, Callable[[EncryptedKeyPackage, str], SecretKey]] = {
    0x02: _unwrap_v2,
}


def encrypt_secret_key(
    secret: SecretKey,
    passphrase: str,
    log_n: Optional[int] = None,
    key_security: Optional[KeySecurity] = None,
    config: Optional[KeyExportConfig] = None,
) -> str:
    """
    Encrypt a secret key under a passphrase.

    Args:
        secret: The key to export
        passphrase: Passphrase, any length
        log_n: scrypt cost as log2(N); overrides the config
        key_security: Key handling flag; overrides the config
        config: Defaults for cost and flag

    Returns:
        The ``ncryptsec`` string
    """
    config = config or KeyExportConfig()
    if log_n is not None:
        config = KeyExportConfig(log_n=log_n, key_security=config.key_security)
    if key_security is not None:
        config = KeyExportConfig(log_n=config.log_n, key_security=key_security)

    salt = os.urandom(KEY_EXPORT_SALT_SIZE)
    nonce = os.urandom(KEY_EXPORT_NONCE_SIZE)
    flag = bytes([int(config.key_security)])

    with _derive_wrapping_key(passphrase, salt, config.log_n) as wrapping_key:
        ciphertext = crypto_aead_xchacha20poly1305_ietf_encrypt(
            secret.reveal(), flag, nonce, wrapping_key.reveal()
        )

    package = EncryptedKeyPackage(
        version=KEY_EXPORT_VERSION,
        log_n=config.log_n,
        salt=salt,
        nonce=nonce,
        key_security=config.key_security,
        ciphertext=ciphertext,
    )
    return package.encode()


def decrypt_secret_key(
    encrypted: Union[str, EncryptedKeyPackage],
    passphrase: str,
) -> SecretKey:
    """
    Recover a secret key from an encrypted package.

    Args:
        encrypted: ``ncryptsec`` string or parsed package
        passphrase: The passphrase used at export

    Returns:
        The SecretKey

    Raises:
        WrongPassphraseError: If the passphrase is wrong or the package is
            corrupted
        UnsupportedVersionError: If the package version is unknown
    """
    if isinstance(encrypted, str):
        encrypted = EncryptedKeyPackage.decode(encrypted)

    try:
        unwrap = _UNWRAPPERS[encrypted.version]
    except KeyError:
        raise UnsupportedVersionError(encrypted.version) from None
    return unwrap(encrypted, passphrase)
