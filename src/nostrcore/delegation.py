"""
Delegated event signing (NIP-26).

A delegator authorizes another key to publish on its behalf by signing a
token over the delegatee's public key and a conditions string. The event
carries the authorization in a ``delegation`` tag::

    ["delegation", <delegator pubkey>, <conditions>, <signature>]
"""

import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .event import Event
from .keys import public_key_from_secret, sign_hash, verify_hash
from .secret import SecretKey


class DelegationStatus(Enum):
    """Outcome of checking an event for a delegation."""
    NOT_DELEGATED = "not_delegated"
    DELEGATED = "delegated"
    INVALID = "invalid"


@dataclass
class DelegationResult:
    """Result of ``check_delegation``."""
    status: DelegationStatus
    delegator: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class DelegationConditions:
    """Restrictions a delegator places on delegated events."""
    kinds: List[int]
    created_after: Optional[int] = None
    created_before: Optional[int] = None

    @classmethod
    def parse(cls, text: str) -> "DelegationConditions":
        """
        Parse a conditions string such as ``kind=1&created_at>1680000000``.

        Raises:
            ValueError: If a clause is not recognized
        """
        conditions = cls(kinds=[])
        if not text:
            return conditions

        for clause in text.split("&"):
            if clause.startswith("kind="):
                conditions.kinds.append(int(clause[len("kind="):]))
            elif clause.startswith("created_at>"):
                conditions.created_after = int(clause[len("created_at>"):])
            elif clause.startswith("created_at<"):
                conditions.created_before = int(clause[len("created_at<"):])
            else:
                raise ValueError(f"Unknown delegation condition: {clause!r}")
        return conditions

    def to_string(self) -> str:
        clauses = [f"kind={kind}" for kind in self.kinds]
        if self.created_after is not None:
            clauses.append(f"created_at>{self.created_after}")
        if self.created_before is not None:
            clauses.append(f"created_at<{self.created_before}")
        return "&".join(clauses)

    def check(self, event: Event) -> Optional[str]:
        """Return the reason the event violates the conditions, or None.

        An event created exactly at either time bound is accepted.
        """
        if self.kinds and event.kind not in self.kinds:
            return "Event kind not delegated"
        if self.created_after is not None and event.created_at < self.created_after:
            return "Event created before delegation started"
        if self.created_before is not None and event.created_at > self.created_before:
            return "Event created after delegation ended"
        return None


def delegation_token(delegatee_pubkey_hex: str, conditions: str) -> bytes:
    """Return the 32-byte digest the delegator signs."""
    token = f"nostr:delegation:{delegatee_pubkey_hex}:{conditions}"
    return hashlib.sha256(token.encode("utf-8")).digest()


def create_delegation_tag(
    delegator_secret: SecretKey,
    delegatee_pubkey_hex: str,
    conditions: str,
) -> List[str]:
    """
    Build a ``delegation`` tag authorizing ``delegatee_pubkey_hex``.

    Args:
        delegator_secret: The delegator's secret key
        delegatee_pubkey_hex: Public key allowed to publish
        conditions: Conditions string

    Returns:
        The tag as a list of strings
    """
    DelegationConditions.parse(conditions)
    signature = sign_hash(
        delegator_secret, delegation_token(delegatee_pubkey_hex, conditions)
    )
    delegator = public_key_from_secret(delegator_secret).hex()
    return ["delegation", delegator, conditions, signature.hex()]


def check_delegation(event: Event) -> DelegationResult:
    """
    Check whether an event was validly delegated.

    Only the first ``delegation`` tag is considered. The event's own
    signature is not checked here; use ``verify_event`` for that.
    """
    tags = event.tags_named("delegation")
    if not tags:
        return DelegationResult(DelegationStatus.NOT_DELEGATED)

    tag = tags[0]
    if len(tag) < 4:
        return DelegationResult(DelegationStatus.INVALID, reason="Malformed delegation tag")

    _, delegator, conditions_text, signature_hex = tag[:4]
    try:
        delegator_bytes = bytes.fromhex(delegator)
        signature = bytes.fromhex(signature_hex)
    except ValueError as e:
        return DelegationResult(DelegationStatus.INVALID, reason=f"Bad hex: {e}")

    try:
        conditions = DelegationConditions.parse(conditions_text)
    except ValueError as e:
        return DelegationResult(DelegationStatus.INVALID, reason=str(e))

    token = delegation_token(event.pubkey, conditions_text)
    if not verify_hash(delegator_bytes, token, signature):
        return DelegationResult(DelegationStatus.INVALID, reason="Bad delegation signature")

    reason = conditions.check(event)
    if reason is not None:
        return DelegationResult(DelegationStatus.INVALID, reason=reason)

    return DelegationResult(DelegationStatus.DELEGATED, delegator=delegator)
