"""
Pedersen Commitment primitives for fixed-denomination coins.

Provides:
- PedersenCommitment: immutable (commitment, value, blinding factor) triple
- commit / verify over secp256k1
- commitment_from_secret: the coin-mint commitment keyed by a coin secret
- open_commitment / add_commitments: homomorphic helpers

Mathematical foundation:
    C = value·G + r·H
    where H = NUMS_H = Hp(G) has no known discrete log with respect to G.

    - Hiding: C reveals nothing about `value` without r.
    - Binding: opening C to a second (value', r') requires log_G(H).
      This rests on the discrete log assumption for secp256k1; nothing here
      proves it.
    - Homomorphic: C1 + C2 = (v1+v2)·G + (r1+r2)·H

References:
    [Ped91] T.P. Pedersen, "Non-Interactive and Information-Theoretic Secure
            Verifiable Secret Sharing", CRYPTO '91, §3.
"""

from __future__ import annotations

from dataclasses import dataclass

from fpp.crypto.curve import (
    G,
    INFINITY,
    SECP256K1_N,
    CurvePoint,
    decode_point,
    encode_point,
    mod_n,
    scalar_from_hex,
)
from fpp.crypto.hashing import NUMS_H
from fpp.crypto.randomness import random_scalar
from fpp.errors import InvalidPointError, PreconditionError

COIN_DENOMINATION = 10
"""Fixed value of every coin."""

# ==============================================================================
# PedersenCommitment
# ==============================================================================


@dataclass(frozen=True)
class PedersenCommitment:
    """
    A Pedersen commitment together with its opening.

    Attributes:
        commitment: The curve point C = value·G + r·H.
        value: The committed value.
        blinding_factor: The scalar r in [1, n-1].
    """
    commitment: CurvePoint
    value: int
    blinding_factor: int

    @property
    def commitment_hex(self) -> str:
        """33-byte compressed hex of C."""
        return encode_point(self.commitment)

    def verify(self) -> bool:
        """Check that this opening reproduces its own commitment."""
        return verify(self.commitment, self.value, self.blinding_factor)


def _check_blinding(blinding_factor: int) -> int:
    r = mod_n(blinding_factor)
    if r == 0:
        raise PreconditionError("blinding_factor must be non-zero mod n")
    return r


def commit(value: int, blinding_factor: int | None = None) -> PedersenCommitment:
    """
    Create a Pedersen commitment C = value·G + r·H.

    Args:
        value: The committed value (non-negative integer).
        blinding_factor: The blinding factor r. Drawn from the secure RNG
            when omitted.

    Returns:
        PedersenCommitment holding C and its opening.

    Raises:
        PreconditionError: If value is negative or r ≡ 0 mod n.
    """
    if value < 0:
        raise PreconditionError(f"value must be non-negative, got {value}")
    if blinding_factor is None:
        blinding_factor = random_scalar(SECP256K1_N)
    r = _check_blinding(blinding_factor)

    C = value * G + r * NUMS_H
    return PedersenCommitment(commitment=C, value=value, blinding_factor=r)


def verify(commitment: CurvePoint | str, value: int, blinding_factor: int) -> bool:
    """
    Verify a Pedersen commitment: check that C == value·G + r·H.

    Args:
        commitment: The commitment point, or its hex encoding.
        value: The claimed committed value.
        blinding_factor: The claimed blinding factor.

    Returns:
        True if the opening matches, False otherwise (including malformed input).
    """
    try:
        C = decode_point(commitment) if isinstance(commitment, str) else commitment
        expected = commit(value, blinding_factor).commitment
    except PreconditionError:
        return False
    return C == expected


def commitment_from_secret(secret_hex: str, value: int) -> PedersenCommitment:
    """
    Commit to a coin's value using the coin secret as blinding factor.

    This is the commitment minted for a coin: the holder of the secret can
    open it, nobody else can link it to the value.
    """
    return commit(value, scalar_from_hex(secret_hex))


def open_commitment(commitment: CurvePoint | str, value: int) -> CurvePoint:
    """
    Strip the value component: C - value·G = r·H.

    Raises:
        InvalidPointError: If the commitment hex is invalid.
    """
    C = decode_point(commitment) if isinstance(commitment, str) else commitment
    return C - value * G


def add_commitments(commitments: list[CurvePoint | str]) -> CurvePoint:
    """Homomorphic sum of commitments (INFINITY for an empty list)."""
    total = INFINITY
    for c in commitments:
        pt = decode_point(c) if isinstance(c, str) else c
        if not pt.is_on_curve():
            raise InvalidPointError("Commitment is not on secp256k1")
        total = total + pt
    return total
