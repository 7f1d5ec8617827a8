"""
LSAG (Linkable Spontaneous Anonymous Group) ring signatures.

Proves that one of the public keys {P_0, ..., P_{n-1}} authorized a message
without revealing which, while publishing a key image I = x·Hp(P_s) that
links any two signatures made with the same key.

Mathematical foundation (signer index s, private key x, P_s = x·G):

    1. α ← random;  L_s = α·G,  R_s = α·Hp(P_s)
    2. c_{s+1} = H(m ‖ I ‖ L_s ‖ R_s)
    3. for i = s+1, ..., s-1 (mod n):
           r_i ← random
           L_i = r_i·G + c_i·P_i
           R_i = r_i·Hp(P_i) + c_i·I
           c_{i+1} = H(m ‖ I ‖ L_i ‖ R_i)
    4. r_s = α - c_s·x (mod n)

    At the signer index: r_s·G + c_s·P_s = α·G = L_s and
    r_s·Hp(P_s) + c_s·I = α·Hp(P_s) = R_s, so the chain closes.

Verification walks i = 0..n-1 recomputing L_i, R_i from the published
(c_i, r_i) and the public key P_i, and accepts iff every recomputed
c_{i+1} matches the published value and c_n wraps back to c_0.

Every signature draws a fresh α and fresh r_i. Reusing α for two messages
under the same key reveals x.

References:
    [LWW04] J. Liu, V. Wei, D. Wong, "Linkable Spontaneous Anonymous Group
            Signature for Ad Hoc Groups", ACISP 2004.
    [CN]    N. van Saberhagen, "CryptoNote v2.0", §4.4.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from fpp.crypto.curve import (
    G,
    SECP256K1_N,
    CurvePoint,
    decode_point,
    derive_public_key,
    encode_point,
    mod_n,
    scalar_from_hex,
    scalar_to_hex,
    validate_point,
)
from fpp.crypto.hashing import hash_hex, hash_point, hash_to_scalar
from fpp.crypto.keyimage import compute_key_image
from fpp.crypto.randomness import random_scalar
from fpp.errors import (
    InvalidPointError,
    PreconditionError,
    RingSignatureError,
    VerificationResult,
)

CHALLENGE_DOMAIN = "fpp.lsag.challenge.v1"
SIGNATURE_DOMAIN = "fpp.lsag.signature.v1"


# ==============================================================================
# RingSignature
# ==============================================================================


@dataclass(frozen=True)
class RingSignature:
    """
    A complete LSAG signature, hex-encoded for transport.

    Attributes:
        key_image: Compressed hex of I = x·Hp(P_s).
        ring_members: Compressed hex public keys [P_0, ..., P_{n-1}].
        c: Challenge scalars, 32-byte hex each.
        r: Response scalars, 32-byte hex each.
        L: Compressed hex of L_i for each ring position.
        R: Compressed hex of R_i for each ring position.
        message: Hex of the signed message bytes.
        signature: Blake2b256 digest over (message, c, r), used as a compact id.
    """
    key_image: str
    ring_members: list[str]
    c: list[str]
    r: list[str]
    L: list[str]
    R: list[str]
    message: str
    signature: str

    @property
    def ring_size(self) -> int:
        """Number of members in the ring."""
        return len(self.ring_members)

    @property
    def message_bytes(self) -> bytes:
        return bytes.fromhex(self.message)


def _message_bytes(message: bytes | str) -> bytes:
    return message if isinstance(message, bytes) else message.encode("utf-8")


def _challenge(message: bytes, key_image: CurvePoint, L: CurvePoint, R: CurvePoint) -> int:
    return hash_to_scalar(CHALLENGE_DOMAIN, message, key_image, L, R)


def _digest(message: bytes, c: list[str], r: list[str]) -> str:
    return hash_hex(SIGNATURE_DOMAIN, message, ",".join(c), ",".join(r))


# ==============================================================================
# Signing
# ==============================================================================


def generate_ring_signature(
    message: bytes | str,
    private_key: int,
    ring: Sequence[CurvePoint | str],
    signer_index: int,
) -> RingSignature:
    """
    Sign `message` on behalf of the ring, as the member at `signer_index`.

    Args:
        message: The message to bind (str is UTF-8 encoded).
        private_key: The signer's private scalar x.
        ring: Public keys, as points or compressed/uncompressed hex.
        signer_index: Position of x·G inside `ring`.

    Returns:
        RingSignature over the ring in the given order.

    Raises:
        RingSignatureError: If the ring has fewer than 2 members, the index
            is out of range, or ring[signer_index] is not x·G.
        InvalidPointError: If a ring member is not a valid curve point.
    """
    n = len(ring)
    if n < 2:
        raise RingSignatureError(f"Ring size must be at least 2, got {n}")
    if signer_index < 0 or signer_index >= n:
        raise RingSignatureError(f"Invalid signer index {signer_index} for ring of size {n}")

    members = [decode_point(p) if isinstance(p, str) else validate_point(p) for p in ring]
    if any(p.is_infinity for p in members):
        raise InvalidPointError("Ring members must not be the point at infinity")
    x = mod_n(private_key)
    if x == 0:
        raise RingSignatureError("private key must be non-zero mod n")
    if members[signer_index] != derive_public_key(x):
        raise RingSignatureError("Private key does not match the ring member at the signer index")

    m = _message_bytes(message)
    key_image = compute_key_image(x)

    c: list[int] = [0] * n
    r: list[int] = [0] * n
    L: list[CurvePoint] = [G] * n
    R: list[CurvePoint] = [G] * n

    # Step 1: commit to α at the signer position
    alpha = random_scalar(SECP256K1_N)
    L[signer_index] = alpha * G
    R[signer_index] = alpha * hash_point(members[signer_index])

    # Step 2: first challenge after the signer
    current = _challenge(m, key_image, L[signer_index], R[signer_index])

    # Step 3: walk the rest of the ring with random responses
    for step in range(1, n):
        idx = (signer_index + step) % n
        c[idx] = current
        r[idx] = random_scalar(SECP256K1_N)
        P_i = members[idx]
        L[idx] = r[idx] * G + current * P_i
        R[idx] = r[idx] * hash_point(P_i) + current * key_image
        current = _challenge(m, key_image, L[idx], R[idx])

    # Step 4: close the loop
    c[signer_index] = current
    r[signer_index] = mod_n(alpha - current * x)

    c_hex = [scalar_to_hex(v) for v in c]
    r_hex = [scalar_to_hex(v) for v in r]
    return RingSignature(
        key_image=encode_point(key_image),
        ring_members=[encode_point(p) for p in members],
        c=c_hex,
        r=r_hex,
        L=[encode_point(p) for p in L],
        R=[encode_point(p) for p in R],
        message=m.hex(),
        signature=_digest(m, c_hex, r_hex),
    )


# ==============================================================================
# Verification
# ==============================================================================


def verify_ring_signature(sig: RingSignature) -> VerificationResult:
    """
    Verify an LSAG signature, reporting every distinct failure.

    Malformed input (short ring, length mismatch, undecodable points) is
    reported separately from cryptographic failure (broken challenge chain,
    loop not closing). Never raises for malformed input.

    Args:
        sig: The signature to check.

    Returns:
        VerificationResult with is_valid and the list of errors.
    """
    errors: list[str] = []
    n = len(sig.ring_members)

    if n < 2:
        errors.append(f"Ring size must be at least 2, got {n}")

    lengths = {"c": len(sig.c), "r": len(sig.r), "L": len(sig.L), "R": len(sig.R)}
    mismatched = {k: v for k, v in lengths.items() if v != n}
    if mismatched:
        errors.append(f"Invalid signature component lengths: ring has {n}, got {mismatched}")

    if not sig.message:
        errors.append("Missing message")

    if errors:
        return VerificationResult.from_errors(errors)

    try:
        key_image = decode_point(sig.key_image)
        message = sig.message_bytes
    except (PreconditionError, ValueError, TypeError):
        return VerificationResult.from_errors(["Invalid key image or message encoding"])

    members: list[CurvePoint] = []
    for i, member in enumerate(sig.ring_members):
        try:
            members.append(decode_point(member))
        except PreconditionError:
            errors.append(f"Invalid ring member at index {i}")
    if errors:
        return VerificationResult.from_errors(errors)

    try:
        c_raw = [scalar_from_hex(v) for v in sig.c]
        r_raw = [scalar_from_hex(v) for v in sig.r]
    except PreconditionError as e:
        return VerificationResult.from_errors([f"Malformed signature scalar: {e}"])

    for name, values in (("c", c_raw), ("r", r_raw)):
        for i, v in enumerate(values):
            if v >= SECP256K1_N:
                errors.append(f"Non-canonical scalar {name}[{i}]")

    for i in range(n):
        c_i = mod_n(c_raw[i])
        r_i = mod_n(r_raw[i])
        P_i = members[i]

        L_i = r_i * G + c_i * P_i
        R_i = r_i * hash_point(P_i) + c_i * key_image
        if L_i.is_infinity or R_i.is_infinity:
            errors.append(f"Degenerate commitment at index {i}")
            break

        if encode_point(L_i) != sig.L[i].lower() or encode_point(R_i) != sig.R[i].lower():
            errors.append(f"Published L/R do not match recomputed values at index {i}")

        next_c = _challenge(message, key_image, L_i, R_i)
        next_idx = (i + 1) % n
        if next_c != c_raw[next_idx]:
            errors.append(
                f"Challenge chain broken at index {i}: expected {sig.c[next_idx][:10]}, "
                f"got {scalar_to_hex(next_c)[:10]}"
            )
            if next_idx == 0:
                errors.append("Ring signature does not form a valid loop")
            break

    if sig.signature != _digest(message, list(sig.c), list(sig.r)):
        errors.append("Signature digest does not match (message, c, r)")

    return VerificationResult.from_errors(errors)


def key_images_linked(a: RingSignature, b: RingSignature) -> bool:
    """True if both signatures were produced with the same private key."""
    return a.key_image.lower() == b.key_image.lower()
