"""
Nullifiers and key images: the two double-spend markers of a transfer.

Mathematical foundation:
    Nullifier (per coin):
        N = Blake2b256( Blake2b256(coin_id ‖ secret) ‖ "nullifier_domain_separator" )
        Revealed at spend time. Deterministic in (coin_id, secret) and
        unlinkable to coin_id without the secret.

    Key image (per private key):
        I = x·Hp(P),  P = x·G
        The same x always produces the same I, so two ring signatures by the
        same key are linkable even though neither reveals its signer.

Both functions are pure. Rejecting a reused nullifier or key image is the
ledger's job; nothing here tracks spend-state.

References:
    [CN]    N. van Saberhagen, "CryptoNote v2.0", §4.4 (key images).
    [FS07]  Fujisaki & Suzuki, "Traceable Ring Signature", PKC 2007.
"""

from __future__ import annotations

import re

from fpp.crypto.curve import (
    CurvePoint,
    decode_point,
    derive_public_key,
    mod_n,
)
from fpp.crypto.hashing import hash_bytes, hash_point
from fpp.errors import PreconditionError

NULLIFIER_DOMAIN = "nullifier_domain_separator"

_NULLIFIER_RE = re.compile(r"^[0-9a-f]{64}$")


# ==============================================================================
# Nullifiers
# ==============================================================================


def compute_nullifier(coin_id: str, secret: str) -> str:
    """
    Derive the spend marker for a coin.

    Args:
        coin_id: The coin identifier.
        secret: The coin secret (hex string).

    Returns:
        64-char hex nullifier.

    Raises:
        PreconditionError: If coin_id or secret is empty.
    """
    if not coin_id:
        raise PreconditionError("coin_id must be non-empty")
    if not secret:
        raise PreconditionError("secret must be non-empty")
    inner = hash_bytes(coin_id, secret)
    return hash_bytes(inner, NULLIFIER_DOMAIN).hex()


def is_valid_nullifier(nullifier: str) -> bool:
    """Format check: 32 bytes of lowercase hex."""
    return isinstance(nullifier, str) and bool(_NULLIFIER_RE.match(nullifier))


# ==============================================================================
# Key images
# ==============================================================================


def compute_key_image(private_key: int) -> CurvePoint:
    """
    Compute the key image I = x·Hp(x·G).

    Args:
        private_key: The spender's private scalar x.

    Returns:
        The key image point.

    Raises:
        PreconditionError: If x ≡ 0 mod n.
    """
    x = mod_n(private_key)
    P = derive_public_key(x)
    return x * hash_point(P)


def verify_key_image(key_image: CurvePoint | str, private_key: int) -> bool:
    """
    Check that a key image was derived from the given private key.

    Used by auditors when the spender discloses x.
    """
    try:
        image = decode_point(key_image) if isinstance(key_image, str) else key_image
        expected = compute_key_image(private_key)
    except PreconditionError:
        return False
    return image == expected
