"""
Unit tests for fpp.crypto.keyimage — nullifiers and key images.
"""

import secrets

import pytest

from fpp.crypto.curve import SECP256K1_N, derive_public_key, encode_point
from fpp.crypto.hashing import hash_bytes, hash_point
from fpp.crypto.keyimage import (
    NULLIFIER_DOMAIN,
    compute_key_image,
    compute_nullifier,
    is_valid_nullifier,
    verify_key_image,
)
from fpp.errors import PreconditionError


def _random_key() -> int:
    return secrets.randbelow(SECP256K1_N - 1) + 1


class TestNullifier:
    """Tests for per-coin nullifiers."""

    def test_deterministic(self):
        secret = secrets.token_hex(32)
        assert compute_nullifier("coin-1", secret) == compute_nullifier("coin-1", secret)

    def test_differs_by_coin_id(self):
        secret = secrets.token_hex(32)
        assert compute_nullifier("coin-1", secret) != compute_nullifier("coin-2", secret)

    def test_differs_by_secret(self):
        assert compute_nullifier("coin-1", secrets.token_hex(32)) != compute_nullifier(
            "coin-1", secrets.token_hex(32)
        )

    def test_double_hash_construction(self):
        secret = secrets.token_hex(32)
        expected = hash_bytes(hash_bytes("coin-1", secret), NULLIFIER_DOMAIN).hex()
        assert compute_nullifier("coin-1", secret) == expected

    def test_format(self):
        n = compute_nullifier("coin-1", secrets.token_hex(32))
        assert is_valid_nullifier(n)

    def test_rejects_empty_inputs(self):
        with pytest.raises(PreconditionError, match="coin_id"):
            compute_nullifier("", "ab")
        with pytest.raises(PreconditionError, match="secret"):
            compute_nullifier("coin-1", "")

    @pytest.mark.parametrize("value", ["", "AB" * 32, "ab" * 31, "zz" * 32, None])
    def test_invalid_formats(self, value):
        assert is_valid_nullifier(value) is False


class TestKeyImage:
    """Tests for I = x·Hp(x·G)."""

    def test_formula(self):
        x = _random_key()
        assert compute_key_image(x) == x * hash_point(derive_public_key(x))

    def test_deterministic(self):
        x = _random_key()
        assert compute_key_image(x) == compute_key_image(x)

    def test_distinct_per_key(self):
        assert compute_key_image(_random_key()) != compute_key_image(_random_key())

    def test_verify_with_point_and_hex(self):
        x = _random_key()
        image = compute_key_image(x)
        assert verify_key_image(image, x) is True
        assert verify_key_image(encode_point(image), x) is True

    def test_verify_wrong_key(self):
        image = compute_key_image(_random_key())
        assert verify_key_image(image, _random_key()) is False

    def test_zero_key_rejected(self):
        with pytest.raises(PreconditionError):
            compute_key_image(0)
