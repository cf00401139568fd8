"""Type definitions and protocol constants for nostr-core."""

# Key and signature sizes
SECRET_KEY_SIZE = 32
PUBLIC_KEY_SIZE = 32
SIGNATURE_SIZE = 64
EVENT_ID_SIZE = 32

# secp256k1 group order
CURVE_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

# Legacy (NIP-04) cipher constants
LEGACY_IV_SIZE = 16
LEGACY_BLOCK_SIZE = 16
LEGACY_IV_SEPARATOR = "?iv="

# Modern (NIP-44) cipher constants
MODERN_VERSION = 0x02
MODERN_NONCE_SIZE = 32
MODERN_MAC_SIZE = 32
MODERN_MIN_PADDED_LEN = 32
MODERN_MAX_PLAINTEXT_SIZE = 65535
CONVERSATION_KEY_SALT = b"nip44-v2"

# Encrypted key export (NIP-49) constants
KEY_EXPORT_VERSION = 0x02
KEY_EXPORT_SALT_SIZE = 16
KEY_EXPORT_NONCE_SIZE = 24
KEY_EXPORT_TAG_SIZE = 16
KEY_EXPORT_PACKAGE_SIZE = 91  # 1 + 1 + 16 + 24 + 1 + 32 + 16
KEY_EXPORT_DEFAULT_LOG_N = 16

# Event kinds the core needs to know about
KIND_ENCRYPTED_DIRECT_MESSAGE = 4


class NostrError(Exception):
    """Base exception for nostr-core errors."""
    pass


class InvalidKeyMaterialError(NostrError):
    """Malformed, zero or out-of-range scalar, or a point not on the curve."""
    pass


class EventError(NostrError):
    """Base class for event integrity failures. The event must be discarded."""
    pass


class IdMismatchError(EventError):
    """The stored event id is not the hash of the event's fields."""
    pass


class BadSignatureError(EventError):
    """The event signature does not verify against its id and pubkey."""
    pass


class EventInFutureError(EventError):
    """The event claims a creation time later than the allowed maximum."""
    pass


class WrongEventKindError(NostrError):
    """The event is not of the kind the operation expects."""
    pass


class PowExhaustedError(NostrError):
    """Proof-of-work mining gave up before reaching the difficulty."""
    pass


class DecodeError(NostrError):
    """Malformed cipher envelope (bad syntax, base64 or size)."""
    pass


class PaddingError(NostrError):
    """Invalid block padding after legacy decryption."""
    pass


class AuthenticationFailedError(NostrError):
    """Integrity tag check failed. No plaintext is exposed."""
    pass


class WrongPassphraseError(AuthenticationFailedError):
    """Wrong passphrase or corrupted encrypted key package.

    The two causes are deliberately indistinguishable.
    """

    def __init__(self) -> None:
        super().__init__("Decryption failed - incorrect passphrase or corrupted data")


class UnsupportedVersionError(NostrError):
    """Unknown version byte in a versioned envelope or package."""

    def __init__(self, version) -> None:
        self.version = version
        super().__init__(f"Unsupported version: {version!r}")


class InvalidPaddingError(NostrError):
    """Declared plaintext length does not fit the padded buffer."""
    pass


class MessageLengthError(NostrError):
    """Plaintext or payload length outside the permitted range."""
    pass


class EntityError(NostrError):
    """Base class for text entity decoding failures."""
    pass


class InvalidEntityError(EntityError):
    """Text is not well-formed bech32 or carries an invalid payload."""
    pass


class ChecksumMismatchError(EntityError):
    """The trailing checksum does not match the recomputed value."""
    pass


class UnknownPrefixError(EntityError):
    """The human-readable prefix is not a recognized entity kind."""

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix
        super().__init__(f"Unknown entity prefix: {prefix!r}")


class TruncatedEntityError(EntityError):
    """A TLV record declares more bytes than remain in the payload."""
    pass
