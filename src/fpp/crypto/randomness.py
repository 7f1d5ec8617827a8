"""
Cryptographically secure randomness.

Every blinding factor, ephemeral scalar, decoy draw and ring-signature
randomizer comes from here. Values are drawn fresh on each call and never
cached. If the operating system cannot provide secure randomness the
module refuses to import.
"""

from __future__ import annotations

import os
import secrets
from typing import MutableSequence, TypeVar

from fpp.errors import RandomnessUnavailableError

T = TypeVar("T")


def _ensure_secure_source() -> None:
    try:
        os.urandom(1)
    except NotImplementedError as err:
        raise RandomnessUnavailableError(
            "No cryptographically secure random source is available"
        ) from err


_ensure_secure_source()


def random_bytes(length: int = 32) -> bytes:
    """Return `length` bytes from the OS CSPRNG."""
    return secrets.token_bytes(length)


def random_secret_hex(length: int = 32) -> str:
    """Return a fresh random secret as a fixed-width hex string."""
    return secrets.token_hex(length)


def random_scalar(order: int) -> int:
    """Return a uniformly random scalar in [1, order-1]."""
    return secrets.randbelow(order - 1) + 1


def secure_randbelow(upper: int) -> int:
    """Return a uniformly random integer in [0, upper)."""
    if upper <= 0:
        raise ValueError(f"upper bound must be positive, got {upper}")
    return secrets.randbelow(upper)


def secure_shuffle(items: MutableSequence[T]) -> None:
    """Fisher-Yates shuffle in place using the secure source."""
    for i in range(len(items) - 1, 0, -1):
        j = secrets.randbelow(i + 1)
        items[i], items[j] = items[j], items[i]
