"""Proof of work on event ids (NIP-13)."""

import logging
from typing import Optional

from .canonical import compute_event_id
from .event import Event, UnsignedEvent, sign_event
from .keys import public_key_from_secret
from .secret import SecretKey
from .types import PowExhaustedError

logger = logging.getLogger(__name__)

# Targets are committed as a single byte
MAX_DIFFICULTY = 255


def leading_zero_bits(event_id: bytes) -> int:
    """Count the leading zero bits of an event id."""
    count = 0
    for byte in event_id:
        if byte == 0:
            count += 8
            continue
        count += 8 - byte.bit_length()
        break
    return count


def event_pow(event: Event) -> int:
    """
    Return the proof of work an event can claim.

    This is the number of leading zero bits in its id, capped at the target
    committed to in its first ``nonce`` tag. Events without a target, or
    whose target is not a number in 0-255, claim no work, so a lucky id
    alone does not count.
    """
    target = 0
    for tag in event.tags_named("nonce"):
        if len(tag) >= 3:
            try:
                target = int(tag[2])
            except ValueError:
                target = 0
            if not 0 <= target <= MAX_DIFFICULTY:
                target = 0
        break

    return min(leading_zero_bits(event.id_bytes), target)


def mine_event(
    secret: SecretKey,
    unsigned: UnsignedEvent,
    difficulty: int,
    max_attempts: Optional[int] = None,
) -> Event:
    """
    Search for a nonce tag that gives the event id ``difficulty`` zero bits.

    Any existing ``nonce`` tags are replaced. created_at is left untouched.

    Args:
        secret: Author's secret key
        unsigned: Event fields to mine and sign
        difficulty: Required number of leading zero bits (0-255)
        max_attempts: Optional cap on the number of nonces tried

    Returns:
        The signed Event

    Raises:
        PowExhaustedError: If max_attempts nonces were tried without success
    """
    if not 0 <= difficulty <= MAX_DIFFICULTY:
        raise ValueError(f"Difficulty must be between 0 and 255, got {difficulty}")

    pubkey_hex = public_key_from_secret(secret).hex()
    target = str(difficulty)
    tags = [list(tag) for tag in unsigned.tags if not tag or tag[0] != "nonce"]
    tags.append(["nonce", "0", target])
    nonce_index = len(tags) - 1

    attempt = 0
    while True:
        if max_attempts is not None and attempt >= max_attempts:
            raise PowExhaustedError(
                f"No nonce reached {difficulty} bits in {max_attempts} attempts"
            )

        tags[nonce_index][1] = str(attempt)
        event_id = compute_event_id(
            pubkey_hex, unsigned.created_at, unsigned.kind, tags, unsigned.content
        )
        if leading_zero_bits(event_id) >= difficulty:
            break
        attempt += 1

    logger.debug("Mined %d bits after %d attempts", difficulty, attempt + 1)

    mined = UnsignedEvent(
        created_at=unsigned.created_at,
        kind=unsigned.kind,
        tags=tags,
        content=unsigned.content,
        pubkey=pubkey_hex,
    )
    return sign_event(secret, mined)
