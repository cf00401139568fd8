"""Tests for proof of work on event ids."""

import dataclasses

import pytest
from nostrcore.event import UnsignedEvent, sign_event, verify_event
from nostrcore.pow import event_pow, leading_zero_bits, mine_event
from nostrcore.secret import SecretKey
from nostrcore.types import PowExhaustedError
from .test_vectors import ALICE_SECRET_HEX


class TestLeadingZeroBits:
    """Test bit counting."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (bytes(32), 256),
            (b"\x80" + bytes(31), 0),
            (b"\x01" + bytes(31), 7),
            (b"\x00\x00\x0f" + bytes(29), 20),
            (b"\x00\xff" + bytes(30), 8),
        ],
    )
    def test_counts(self, value: bytes, expected: int) -> None:
        assert leading_zero_bits(value) == expected


class TestMining:
    """Test mining and claimed work."""

    @pytest.fixture
    def alice(self):
        return SecretKey.from_hex(ALICE_SECRET_HEX)

    @pytest.fixture
    def unsigned(self):
        return UnsignedEvent(
            created_at=1700000000,
            kind=1,
            tags=[["nonce", "999", "1"], ["t", "pow"]],
            content="mined",
        )

    def test_mine_reaches_difficulty(self, alice, unsigned) -> None:
        event = mine_event(alice, unsigned, difficulty=8)

        verify_event(event)
        assert leading_zero_bits(event.id_bytes) >= 8
        assert event_pow(event) >= 8

        nonce_tags = event.tags_named("nonce")
        assert len(nonce_tags) == 1
        assert nonce_tags[0][2] == "8"
        assert event.tags[-1] == nonce_tags[0]
        assert ("t", "pow") in event.tags

    def test_claimed_work_is_capped_by_target(self, alice, unsigned) -> None:
        event = mine_event(alice, unsigned, difficulty=4)
        lowered = tuple(
            tag if tag[0] != "nonce" else (tag[0], tag[1], "1") for tag in event.tags
        )
        assert event_pow(dataclasses.replace(event, tags=lowered)) <= 1

    def test_no_nonce_tag_claims_nothing(self, alice) -> None:
        event = sign_event(alice, UnsignedEvent(created_at=1, kind=1, content="x"))
        assert event_pow(event) == 0

    def test_unparsable_target(self, alice) -> None:
        event = sign_event(
            alice,
            UnsignedEvent(created_at=1, kind=1, tags=[["nonce", "1", "lots"]]),
        )
        assert event_pow(event) == 0

    @pytest.mark.parametrize("target", ["300", "256", "-3"])
    def test_out_of_range_target_claims_nothing(self, alice, unsigned, target: str) -> None:
        """Targets that do not fit in a byte are ignored."""
        event = mine_event(alice, unsigned, difficulty=8)
        retargeted = tuple(
            tag if tag[0] != "nonce" else (tag[0], tag[1], target) for tag in event.tags
        )
        assert event_pow(dataclasses.replace(event, tags=retargeted)) == 0

    def test_exhausted(self, alice, unsigned) -> None:
        with pytest.raises(PowExhaustedError):
            mine_event(alice, unsigned, difficulty=64, max_attempts=5)

    def test_zero_difficulty(self, alice, unsigned) -> None:
        event = mine_event(alice, unsigned, difficulty=0)
        assert event.tags_named("nonce")[0][1] == "0"

    def test_rejects_bad_difficulty(self, alice, unsigned) -> None:
        with pytest.raises(ValueError):
            mine_event(alice, unsigned, difficulty=300)
