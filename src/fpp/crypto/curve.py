"""
secp256k1 group arithmetic for the privacy transaction core.

Provides:
- CurvePoint: affine point with an explicit point-at-infinity flag
- point_add / point_double / point_negate / scalar_multiply
- mod_inverse via the extended Euclidean algorithm
- Compressed (33-byte) and uncompressed (65-byte) point codecs
- Fixed-width (32-byte) scalar codec

Mathematical foundation:
    E: y² = x³ + 7 over F_p, group order n (prime, cofactor 1).
    Addition:  λ = (y2 - y1) / (x2 - x1)
    Doubling:  λ = 3·x1² / (2·y1)
    x3 = λ² - x1 - x2,  y3 = λ·(x1 - x3) - y1

    Every intermediate is reduced with a non-negative modulo, so signed
    intermediates like (y2 - y1) always land in [0, p).

The domain parameters are read from the `ecdsa` library's SECP256k1
definition; the arithmetic itself is implemented here.

References:
    [SEC2]  Certicom Research, "SEC 2: Recommended Elliptic Curve Domain
            Parameters", v2.0, §2.4.1 (secp256k1).
    [SEC1]  Certicom Research, "SEC 1: Elliptic Curve Cryptography",
            §2.3.3–2.3.4 (point encoding).
"""

from __future__ import annotations

from dataclasses import dataclass

import ecdsa

from fpp.errors import InvalidPointError, PreconditionError

# ==============================================================================
# secp256k1 domain parameters
# ==============================================================================

_CURVE = ecdsa.SECP256k1.curve
_GENERATOR = ecdsa.SECP256k1.generator

# Field prime
SECP256K1_P: int = _CURVE.p()

# Curve coefficients (a = 0, b = 7)
SECP256K1_A: int = _CURVE.a()
SECP256K1_B: int = _CURVE.b()

# Group order
SECP256K1_N: int = ecdsa.SECP256k1.order

POINT_BYTES = 33
SCALAR_BYTES = 32


def mod_p(a: int) -> int:
    """Reduce into [0, p), correcting negative inputs."""
    return ((a % SECP256K1_P) + SECP256K1_P) % SECP256K1_P


def mod_n(a: int) -> int:
    """Reduce into [0, n), correcting negative inputs."""
    return ((a % SECP256K1_N) + SECP256K1_N) % SECP256K1_N


def mod_inverse(a: int, m: int) -> int:
    """
    Compute a⁻¹ mod m with the extended Euclidean algorithm.

    Args:
        a: Value to invert (any integer, reduced mod m first).
        m: Modulus.

    Returns:
        The inverse in [0, m).

    Raises:
        ValueError: If a has no inverse modulo m.
    """
    old_r, r = a % m, m
    old_s, s = 1, 0
    while r != 0:
        quotient = old_r // r
        old_r, r = r, old_r - quotient * r
        old_s, s = s, old_s - quotient * s
    if old_r != 1:
        raise ValueError(f"{a} has no inverse modulo {m}")
    return ((old_s % m) + m) % m


# ==============================================================================
# CurvePoint
# ==============================================================================


@dataclass(frozen=True)
class CurvePoint:
    """
    An affine point on secp256k1, or the point at infinity.

    The identity is represented by is_infinity=True with zeroed coordinates;
    use the module-level INFINITY rather than building one by hand.
    """
    x: int
    y: int
    is_infinity: bool = False

    def is_on_curve(self) -> bool:
        """True for the identity or any point satisfying y² = x³ + 7 mod p."""
        if self.is_infinity:
            return True
        if not (0 <= self.x < SECP256K1_P and 0 <= self.y < SECP256K1_P):
            return False
        return mod_p(self.y * self.y - (self.x * self.x * self.x + SECP256K1_A * self.x + SECP256K1_B)) == 0

    def __add__(self, other: CurvePoint) -> CurvePoint:
        return point_add(self, other)

    def __sub__(self, other: CurvePoint) -> CurvePoint:
        return point_add(self, point_negate(other))

    def __neg__(self) -> CurvePoint:
        return point_negate(self)

    def __rmul__(self, k: int) -> CurvePoint:
        return scalar_multiply(k, self)

    def __mul__(self, k: int) -> CurvePoint:
        return scalar_multiply(k, self)


INFINITY = CurvePoint(0, 0, True)
"""The group identity."""

G = CurvePoint(_GENERATOR.x(), _GENERATOR.y())
"""The standard secp256k1 base point."""


def validate_point(pt: CurvePoint) -> CurvePoint:
    """
    Reject points that do not lie on the curve.

    Raises:
        InvalidPointError: If pt is off-curve.
    """
    if not pt.is_on_curve():
        raise InvalidPointError(f"Point ({pt.x:#x}, {pt.y:#x}) is not on secp256k1")
    return pt


# ==============================================================================
# Group law
# ==============================================================================


def point_add(p1: CurvePoint, p2: CurvePoint) -> CurvePoint:
    """
    Add two points. Handles identity, inverse pairs and doubling.

    Args:
        p1: First operand.
        p2: Second operand.

    Returns:
        p1 + p2.
    """
    if p1.is_infinity:
        return p2
    if p2.is_infinity:
        return p1

    if p1.x == p2.x:
        # P + (-P), including the y = 0 doubling case
        if mod_p(p1.y + p2.y) == 0:
            return INFINITY
        numerator = mod_p(3 * p1.x * p1.x + SECP256K1_A)
        denominator = mod_p(2 * p1.y)
    else:
        numerator = mod_p(p2.y - p1.y)
        denominator = mod_p(p2.x - p1.x)

    lam = mod_p(numerator * mod_inverse(denominator, SECP256K1_P))
    x3 = mod_p(lam * lam - p1.x - p2.x)
    y3 = mod_p(lam * (p1.x - x3) - p1.y)
    return CurvePoint(x3, y3)


def point_double(pt: CurvePoint) -> CurvePoint:
    """Return 2·pt."""
    return point_add(pt, pt)


def point_negate(pt: CurvePoint) -> CurvePoint:
    """Return -pt."""
    if pt.is_infinity:
        return INFINITY
    return CurvePoint(pt.x, mod_p(-pt.y))


def scalar_multiply(k: int, pt: CurvePoint) -> CurvePoint:
    """
    Compute k·pt by double-and-add over the bits of k mod n.

    Args:
        k: Scalar (any integer; reduced mod n, so negatives work).
        pt: Point to multiply.

    Returns:
        k·pt. INFINITY when k ≡ 0 mod n or pt is INFINITY.
    """
    scalar = mod_n(k)
    if scalar == 0 or pt.is_infinity:
        return INFINITY

    result = INFINITY
    addend = pt
    while scalar > 0:
        if scalar & 1:
            result = point_add(result, addend)
        addend = point_double(addend)
        scalar >>= 1
    return result


def derive_public_key(private_key: int) -> CurvePoint:
    """
    Compute P = x·G.

    Raises:
        PreconditionError: If x ≡ 0 mod n.
    """
    if mod_n(private_key) == 0:
        raise PreconditionError("private key must be non-zero mod n")
    return scalar_multiply(private_key, G)


# ==============================================================================
# Codecs
# ==============================================================================


def _strip_hex(hex_str: str, error: type[PreconditionError] = InvalidPointError) -> bytes:
    if not isinstance(hex_str, str):
        raise error(f"Expected a hex string, got {type(hex_str).__name__}")
    if hex_str.startswith(("0x", "0X")):
        hex_str = hex_str[2:]
    try:
        return bytes.fromhex(hex_str)
    except ValueError as err:
        raise error(f"Not a hex string: {hex_str[:16]}...") from err


def encode_point(pt: CurvePoint) -> str:
    """
    Encode a point as a 33-byte compressed hex string.

    Raises:
        InvalidPointError: If pt is the point at infinity.
    """
    if pt.is_infinity:
        raise InvalidPointError("Cannot encode the point at infinity")
    prefix = b"\x02" if pt.y % 2 == 0 else b"\x03"
    return (prefix + pt.x.to_bytes(32, "big")).hex()


def encode_point_uncompressed(pt: CurvePoint) -> str:
    """Encode a point as a 65-byte uncompressed (0x04) hex string."""
    if pt.is_infinity:
        raise InvalidPointError("Cannot encode the point at infinity")
    return (b"\x04" + pt.x.to_bytes(32, "big") + pt.y.to_bytes(32, "big")).hex()


def point_to_bytes(pt: CurvePoint) -> bytes:
    """Compressed SEC1 bytes, used as hash input."""
    return bytes.fromhex(encode_point(pt))


def decode_point(hex_str: str) -> CurvePoint:
    """
    Decode a compressed (33-byte) or uncompressed (65-byte) secp256k1 point.

    Args:
        hex_str: Hex string, optionally 0x-prefixed.

    Returns:
        The validated CurvePoint.

    Raises:
        InvalidPointError: If the encoding is malformed or off-curve.
    """
    raw = _strip_hex(hex_str)

    if len(raw) == 33:
        prefix = raw[0]
        if prefix not in (0x02, 0x03):
            raise InvalidPointError(f"Invalid prefix byte: 0x{prefix:02x}")
        x = int.from_bytes(raw[1:], "big")
        if x >= SECP256K1_P:
            raise InvalidPointError("x coordinate exceeds the field prime")
        y_sq = mod_p(pow(x, 3, SECP256K1_P) + SECP256K1_B)
        y = pow(y_sq, (SECP256K1_P + 1) // 4, SECP256K1_P)
        if (y * y) % SECP256K1_P != y_sq:
            raise InvalidPointError(f"X coordinate 0x{x:064x} does not correspond to a curve point")
        if (y % 2 == 0) != (prefix == 0x02):
            y = SECP256K1_P - y
        return CurvePoint(x, y)

    if len(raw) == 65:
        if raw[0] != 0x04:
            raise InvalidPointError(f"Invalid prefix byte: 0x{raw[0]:02x}")
        pt = CurvePoint(int.from_bytes(raw[1:33], "big"), int.from_bytes(raw[33:], "big"))
        return validate_point(pt)

    raise InvalidPointError(f"Expected 33 or 65 bytes, got {len(raw)}")


def scalar_to_hex(k: int) -> str:
    """Encode a scalar as 32-byte fixed-width hex."""
    return mod_n(k).to_bytes(SCALAR_BYTES, "big").hex()


def scalar_from_hex(hex_str: str) -> int:
    """Decode a 32-byte hex scalar (not reduced)."""
    raw = _strip_hex(hex_str, PreconditionError)
    if len(raw) != SCALAR_BYTES:
        raise PreconditionError(f"Expected {SCALAR_BYTES}-byte scalar, got {len(raw)}")
    return int.from_bytes(raw, "big")


G_COMPRESSED = encode_point(G)
"""Compressed hex of the base point."""
