"""
Bech32 text encoding (BIP-173 checksum).

Payload bytes are regrouped into 5-bit symbols from the alphabet below and
followed by a 6-symbol BCH checksum over the expanded prefix and data. The
BIP-173 90-character limit is not enforced because TLV entities routinely
exceed it.
"""

from typing import List, Tuple

from .types import ChecksumMismatchError, InvalidEntityError

CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
_CHARSET_REVERSE = {c: i for i, c in enumerate(CHARSET)}
_GENERATOR = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)
CHECKSUM_LENGTH = 6


def _polymod(values: List[int]) -> int:
    chk = 1
    for value in values:
        top = chk >> 25
        chk = (chk & 0x1FFFFFF) << 5 ^ value
        for i in range(5):
            if (top >> i) & 1:
                chk ^= _GENERATOR[i]
    return chk


def _hrp_expand(hrp: str) -> List[int]:
    return [ord(c) >> 5 for c in hrp] + [0] + [ord(c) & 31 for c in hrp]


def _create_checksum(hrp: str, data: List[int]) -> List[int]:
    polymod = _polymod(_hrp_expand(hrp) + data + [0] * CHECKSUM_LENGTH) ^ 1
    return [(polymod >> 5 * (5 - i)) & 31 for i in range(CHECKSUM_LENGTH)]


def convert_bits(data, from_bits: int, to_bits: int, pad: bool) -> List[int]:
    """
    Regroup a sequence of ``from_bits``-wide integers into ``to_bits`` groups.

    Raises:
        InvalidEntityError: If a value is out of range, or padding is
            non-zero or too long when ``pad`` is False
    """
    acc = 0
    bits = 0
    result = []
    max_value = (1 << to_bits) - 1
    max_acc = (1 << (from_bits + to_bits - 1)) - 1
    for value in data:
        if value < 0 or value >> from_bits:
            raise InvalidEntityError(f"Value {value} does not fit in {from_bits} bits")
        acc = ((acc << from_bits) | value) & max_acc
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            result.append((acc >> bits) & max_value)
    if pad:
        if bits:
            result.append((acc << (to_bits - bits)) & max_value)
    elif bits >= from_bits or ((acc << (to_bits - bits)) & max_value):
        raise InvalidEntityError("Invalid padding in bech32 data")
    return result


def encode(hrp: str, data: bytes) -> str:
    """Encode bytes under a human-readable prefix."""
    if not hrp or any(ord(c) < 33 or ord(c) > 126 for c in hrp):
        raise ValueError(f"Invalid human-readable prefix: {hrp!r}")
    hrp = hrp.lower()
    words = convert_bits(data, 8, 5, True)
    combined = words + _create_checksum(hrp, words)
    return hrp + "1" + "".join(CHARSET[w] for w in combined)


def decode(text: str) -> Tuple[str, bytes]:
    """
    Decode a bech32 string into its prefix and payload bytes.

    A single substituted character is reported as a checksum mismatch when
    the replacement is in the alphabet. A replacement outside the alphabet
    (such as ``b``, ``i``, ``o`` or ``!``) never reaches the checksum and is
    reported as an invalid entity.

    Raises:
        InvalidEntityError: On mixed case, missing separator, or characters
            outside the alphabet
        ChecksumMismatchError: If the checksum does not verify
    """
    if any(ord(c) < 33 or ord(c) > 126 for c in text):
        raise InvalidEntityError("Bech32 string contains invalid characters")
    if text.lower() != text and text.upper() != text:
        raise InvalidEntityError("Bech32 string mixes upper and lower case")

    text = text.lower()
    pos = text.rfind("1")
    if pos < 1 or pos + CHECKSUM_LENGTH + 1 > len(text):
        raise InvalidEntityError("Bech32 separator missing or misplaced")

    hrp = text[:pos]
    try:
        words = [_CHARSET_REVERSE[c] for c in text[pos + 1:]]
    except KeyError as e:
        raise InvalidEntityError(f"Invalid bech32 character: {e.args[0]!r}") from e

    if _polymod(_hrp_expand(hrp) + words) != 1:
        raise ChecksumMismatchError("Bech32 checksum mismatch")

    data = convert_bits(words[:-CHECKSUM_LENGTH], 5, 8, False)
    return hrp, bytes(data)
