"""
Unit tests for fpp.crypto.curve — secp256k1 group law and codecs.

The in-house arithmetic is cross-checked against the ecdsa library's
independent implementation.
"""

import secrets

import ecdsa
import pytest

from fpp.crypto.curve import (
    G,
    G_COMPRESSED,
    INFINITY,
    SECP256K1_N,
    SECP256K1_P,
    CurvePoint,
    decode_point,
    derive_public_key,
    encode_point,
    encode_point_uncompressed,
    mod_inverse,
    mod_n,
    mod_p,
    point_add,
    point_double,
    point_negate,
    scalar_from_hex,
    scalar_multiply,
    scalar_to_hex,
    validate_point,
)
from fpp.errors import InvalidPointError, PreconditionError


def _random_scalar() -> int:
    return secrets.randbelow(SECP256K1_N - 1) + 1


# ==============================================================================
# Modular helpers
# ==============================================================================


class TestModular:
    """Tests for mod_p / mod_n / mod_inverse."""

    def test_negative_inputs_are_corrected(self):
        """Negative intermediates land in [0, m)."""
        assert mod_p(-1) == SECP256K1_P - 1
        assert mod_n(-1) == SECP256K1_N - 1

    def test_inverse_roundtrip(self):
        """a · a⁻¹ ≡ 1 mod p."""
        a = secrets.randbelow(SECP256K1_P - 1) + 1
        assert (a * mod_inverse(a, SECP256K1_P)) % SECP256K1_P == 1

    def test_inverse_matches_pow(self):
        """Extended Euclid agrees with Python's built-in modular inverse."""
        a = _random_scalar()
        assert mod_inverse(a, SECP256K1_N) == pow(a, -1, SECP256K1_N)

    def test_inverse_of_negative(self):
        """Negative values are reduced before inversion."""
        assert mod_inverse(-3, 7) == pow(4, -1, 7)

    def test_no_inverse_raises(self):
        """Non-coprime values have no inverse."""
        with pytest.raises(ValueError, match="no inverse"):
            mod_inverse(6, 9)


# ==============================================================================
# Group law
# ==============================================================================


class TestGroupLaw:
    """Tests for point addition, doubling and scalar multiplication."""

    def test_generator_on_curve(self):
        assert G.is_on_curve()

    def test_distributive_law(self):
        """a·G + b·G == (a+b mod n)·G."""
        a, b = _random_scalar(), _random_scalar()
        assert scalar_multiply(a, G) + scalar_multiply(b, G) == scalar_multiply((a + b) % SECP256K1_N, G)

    def test_matches_ecdsa_reference(self):
        """k·G agrees with the ecdsa library."""
        k = _random_scalar()
        ours = scalar_multiply(k, G)
        ref = ecdsa.SECP256k1.generator * k
        assert (ours.x, ours.y) == (ref.x(), ref.y())

    def test_doubling_matches_addition(self):
        """point_double(P) == P + P == 2·P."""
        P = scalar_multiply(_random_scalar(), G)
        assert point_double(P) == point_add(P, P) == scalar_multiply(2, P)

    def test_addition_commutes(self):
        P = scalar_multiply(_random_scalar(), G)
        Q = scalar_multiply(_random_scalar(), G)
        assert P + Q == Q + P

    def test_infinity_is_identity(self):
        """P + ∞ == ∞ + P == P."""
        P = scalar_multiply(_random_scalar(), G)
        assert P + INFINITY == P
        assert INFINITY + P == P

    def test_inverse_pair_sums_to_infinity(self):
        """P + (-P) == ∞."""
        P = scalar_multiply(_random_scalar(), G)
        assert (P + point_negate(P)).is_infinity
        assert (P - P).is_infinity

    def test_zero_scalar_gives_infinity(self):
        assert scalar_multiply(0, G).is_infinity

    def test_order_scalar_gives_infinity(self):
        """n·G == ∞."""
        assert scalar_multiply(SECP256K1_N, G).is_infinity

    def test_multiply_infinity(self):
        assert scalar_multiply(_random_scalar(), INFINITY).is_infinity

    def test_negative_scalar(self):
        """(-k)·G == -(k·G)."""
        k = _random_scalar()
        assert scalar_multiply(-k, G) == -scalar_multiply(k, G)

    def test_operator_sugar(self):
        """k * P and P * k both delegate to scalar_multiply."""
        k = _random_scalar()
        assert k * G == G * k == scalar_multiply(k, G)

    def test_results_stay_on_curve(self):
        P = scalar_multiply(_random_scalar(), G)
        Q = scalar_multiply(_random_scalar(), G)
        assert (P + Q).is_on_curve()
        assert point_double(P).is_on_curve()

    def test_negate_infinity(self):
        assert point_negate(INFINITY).is_infinity


class TestPublicKeys:
    """Tests for derive_public_key / validate_point."""

    def test_derive_public_key(self):
        k = _random_scalar()
        assert derive_public_key(k) == scalar_multiply(k, G)

    def test_zero_private_key_rejected(self):
        with pytest.raises(PreconditionError, match="non-zero"):
            derive_public_key(SECP256K1_N)

    def test_validate_rejects_off_curve(self):
        with pytest.raises(InvalidPointError, match="not on secp256k1"):
            validate_point(CurvePoint(1, 1))

    def test_out_of_field_is_off_curve(self):
        assert not CurvePoint(G.x + SECP256K1_P, G.y).is_on_curve()


# ==============================================================================
# Codecs
# ==============================================================================


class TestPointCodec:
    """Tests for point serialization."""

    def test_generator_encoding(self):
        """G compresses to the well-known SEC1 encoding."""
        assert G_COMPRESSED == "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"

    def test_compressed_roundtrip(self):
        P = scalar_multiply(_random_scalar(), G)
        hex_str = encode_point(P)
        assert len(hex_str) == 66
        assert hex_str[:2] in ("02", "03")
        assert decode_point(hex_str) == P

    def test_uncompressed_roundtrip(self):
        P = scalar_multiply(_random_scalar(), G)
        hex_str = encode_point_uncompressed(P)
        assert len(hex_str) == 130
        assert decode_point(hex_str) == P

    def test_accepts_0x_prefix(self):
        assert decode_point("0x" + G_COMPRESSED) == G

    def test_matches_ecdsa_compressed_encoding(self):
        """Compressed encoding agrees with ecdsa's VerifyingKey."""
        k = _random_scalar()
        sk = ecdsa.SigningKey.from_secret_exponent(k, curve=ecdsa.SECP256k1)
        expected = sk.get_verifying_key().to_string("compressed").hex()
        assert encode_point(scalar_multiply(k, G)) == expected

    def test_encode_infinity_rejected(self):
        with pytest.raises(InvalidPointError, match="infinity"):
            encode_point(INFINITY)
        with pytest.raises(InvalidPointError, match="infinity"):
            encode_point_uncompressed(INFINITY)

    def test_decode_invalid_prefix(self):
        """Must reject 33-byte points with prefix other than 02/03."""
        with pytest.raises(InvalidPointError, match="Invalid prefix"):
            decode_point("05" + "aa" * 32)

    def test_decode_wrong_length(self):
        with pytest.raises(InvalidPointError, match="33 or 65 bytes"):
            decode_point("02aabb")

    def test_decode_not_hex(self):
        with pytest.raises(InvalidPointError, match="Not a hex string"):
            decode_point("zz" * 33)

    def test_decode_off_curve_uncompressed(self):
        bad = "04" + (1).to_bytes(32, "big").hex() + (1).to_bytes(32, "big").hex()
        with pytest.raises(InvalidPointError):
            decode_point(bad)

    def test_decode_x_without_root(self):
        """An x whose x³ + 7 is a non-residue mod p is rejected."""
        x = 1
        while pow((x ** 3 + 7) % SECP256K1_P, (SECP256K1_P - 1) // 2, SECP256K1_P) == 1:
            x += 1
        with pytest.raises(InvalidPointError, match="does not correspond"):
            decode_point("02" + x.to_bytes(32, "big").hex())

    def test_invalid_point_error_is_value_error(self):
        """Callers validating input can catch ValueError."""
        with pytest.raises(ValueError):
            decode_point("")


class TestScalarCodec:
    """Tests for fixed-width scalar encoding."""

    def test_roundtrip(self):
        k = _random_scalar()
        hex_str = scalar_to_hex(k)
        assert len(hex_str) == 64
        assert scalar_from_hex(hex_str) == k

    def test_small_scalar_padded(self):
        assert scalar_to_hex(1) == "00" * 31 + "01"

    def test_reduces_mod_n(self):
        assert scalar_to_hex(SECP256K1_N + 5) == scalar_to_hex(5)

    def test_wrong_width_rejected(self):
        with pytest.raises(PreconditionError, match="32-byte"):
            scalar_from_hex("abcd")
