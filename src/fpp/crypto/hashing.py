"""
Domain-separated hashing into scalars and curve points.

Provides:
- hash_bytes: Blake2b256 over length-prefixed parts
- hash_to_scalar: Blake2b256 digest reduced mod n
- hash_to_point: try-and-increment map onto secp256k1
- hash_point: Hp(P), the per-public-key point used by key images and rings
- NUMS_H: the second Pedersen generator, H = hash_to_point(G)

Algorithm (hash_to_point):
    for counter in 0..255:
        x = int(Blake2b256(data ‖ counter_be32)) mod p
        y = (x³ + 7)^((p+1)/4) mod p        (valid because p ≡ 3 mod 4)
        accept iff y² ≡ x³ + 7 (mod p), choosing the even root

    About half of all x values are on the curve, so exhausting 256 counters
    has probability 2⁻²⁵⁶. That outcome is reported as an internal error.

References:
    [H2C]   IETF draft-irtf-cfrg-hash-to-curve, §5 (try-and-increment method).
    [Ped91] T.P. Pedersen, CRYPTO '91, §3 (independent generators).
"""

from __future__ import annotations

import hashlib
from functools import lru_cache

from fpp.crypto.curve import (
    G,
    SECP256K1_B,
    SECP256K1_N,
    SECP256K1_P,
    CurvePoint,
    mod_p,
    point_to_bytes,
)
from fpp.errors import HashToCurveError

HASH_TO_POINT_ATTEMPTS = 256
DIGEST_SIZE = 32

HashPart = bytes | str | int | CurvePoint


def _to_bytes(part: HashPart) -> bytes:
    if isinstance(part, CurvePoint):
        return point_to_bytes(part)
    if isinstance(part, bytes):
        return part
    if isinstance(part, str):
        return part.encode("utf-8")
    if isinstance(part, int):
        if part < 0 or part >= 1 << 256:
            raise ValueError(f"Integer hash input out of 256-bit range: {part}")
        return part.to_bytes(32, "big")
    raise TypeError(f"Cannot hash value of type {type(part).__name__}")


def hash_bytes(*parts: HashPart) -> bytes:
    """
    Blake2b256 over the concatenation of length-prefixed parts.

    Each part is prefixed with its 4-byte big-endian length so that
    ("ab", "c") and ("a", "bc") hash differently.
    """
    hasher = hashlib.blake2b(digest_size=DIGEST_SIZE)
    for part in parts:
        raw = _to_bytes(part)
        hasher.update(len(raw).to_bytes(4, "big"))
        hasher.update(raw)
    return hasher.digest()


def hash_hex(*parts: HashPart) -> str:
    """hash_bytes as a 64-char hex string."""
    return hash_bytes(*parts).hex()


def hash_to_scalar(*parts: HashPart) -> int:
    """Hash parts to an integer in [0, n)."""
    return int.from_bytes(hash_bytes(*parts), "big") % SECP256K1_N


@lru_cache(maxsize=1024)
def hash_to_point(data: bytes) -> CurvePoint:
    """
    Map bytes deterministically onto a secp256k1 point.

    Args:
        data: Arbitrary input bytes.

    Returns:
        A curve point with even y and no known discrete log relative to G.

    Raises:
        HashToCurveError: If no counter in 0..255 yields a curve point.
    """
    for counter in range(HASH_TO_POINT_ATTEMPTS):
        digest = hashlib.blake2b(data + counter.to_bytes(32, "big"), digest_size=DIGEST_SIZE).digest()
        x = int.from_bytes(digest, "big") % SECP256K1_P
        y_sq = mod_p(pow(x, 3, SECP256K1_P) + SECP256K1_B)
        y = pow(y_sq, (SECP256K1_P + 1) // 4, SECP256K1_P)
        if (y * y) % SECP256K1_P == y_sq:
            if y % 2 != 0:
                y = SECP256K1_P - y
            return CurvePoint(x, y)
    raise HashToCurveError(
        f"hash_to_point: no curve point found in {HASH_TO_POINT_ATTEMPTS} attempts"
    )


def hash_point(pt: CurvePoint) -> CurvePoint:
    """Hp(P): hash a public point to an independent curve point."""
    return hash_to_point(point_to_bytes(pt))


NUMS_H = hash_point(G)
"""The NUMS secondary generator H = Hp(G), used for Pedersen commitments."""
