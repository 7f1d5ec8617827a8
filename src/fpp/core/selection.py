"""
Gravity-weighted coin selection.

A coin's gravity weight grows with its mass and the square root of its age:

    weight = mass · √(age_days + 1) · GRAVITY_CONSTANT

weighted_select samples without replacement: each draw picks a uniform
cursor in [0, total remaining weight), walks the remaining coins subtracting
weights until the cursor is used up, removes the chosen coin, and repeats
with the reduced total.

Draws come from a SeedStream: a single 256-bit seed (secure by default,
caller-supplied for reproducible tests) stretched by a linear-congruential
step mod n. Only the seed needs to be unpredictable; the LCG is a cheap
mixer, not a CSPRNG.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import TypeVar

from fpp.core.models import FloatingPoint
from fpp.crypto.curve import SECP256K1_N
from fpp.crypto.pedersen import COIN_DENOMINATION
from fpp.crypto.randomness import random_bytes
from fpp.errors import InsufficientFundsError, PreconditionError

logger = logging.getLogger("fpp.selection")

GRAVITY_CONSTANT = 10

LCG_MULTIPLIER = 0x5DEECE66D
LCG_INCREMENT = 0xB
DRAW_RESOLUTION = 1_000_000

CoinT = TypeVar("CoinT", bound=FloatingPoint)


def gravity_weight(coin: FloatingPoint, now: datetime | None = None) -> float:
    """mass · √(age_days + 1) · GRAVITY_CONSTANT"""
    return coin.mass * math.sqrt(coin.age_days(now) + 1) * GRAVITY_CONSTANT


class SeedStream:
    """Deterministic stream of draws in [0, 1) stretched from one seed."""

    def __init__(self, seed: int | str | None = None):
        if seed is None:
            seed = int.from_bytes(random_bytes(32), "big")
        elif isinstance(seed, str):
            seed = int(seed[2:] if seed.startswith("0x") else seed, 16)
        self._state = seed % SECP256K1_N

    def next_float(self) -> float:
        self._state = (self._state * LCG_MULTIPLIER + LCG_INCREMENT) % SECP256K1_N
        return (self._state % DRAW_RESOLUTION) / DRAW_RESOLUTION


def weighted_select(
    coins: Sequence[CoinT],
    count: int,
    seed: int | str | None = None,
    now: datetime | None = None,
) -> list[CoinT]:
    """
    Pick `count` coins with probability proportional to gravity weight,
    without replacement.

    Args:
        coins: Candidate coins.
        count: How many to pick.
        seed: Seed for reproducible draws; secure random when omitted.
        now: Reference time for ages (defaults to now, fixed for the whole call).

    Returns:
        The chosen coins in draw order. All coins, unchanged, when
        count >= len(coins).
    """
    if not coins or count <= 0:
        return []
    if count >= len(coins):
        return list(coins)

    now = now or datetime.now(timezone.utc)
    stream = SeedStream(seed)
    remaining = list(coins)
    weights = [gravity_weight(c, now) for c in remaining]
    selected: list[CoinT] = []

    while len(selected) < count and remaining:
        total = sum(weights)
        if total <= 0:
            break

        cursor = stream.next_float() * total
        chosen = max(i for i, w in enumerate(weights) if w > 0)
        for i, w in enumerate(weights):
            if w <= 0:
                continue
            cursor -= w
            if cursor <= 0:
                chosen = i
                break

        selected.append(remaining.pop(chosen))
        weights.pop(chosen)

    logger.debug(f"Gravity selection picked {len(selected)} of {len(coins)} coins")
    return selected


def required_coin_count(amount: int | float, denomination: int = COIN_DENOMINATION) -> int:
    """Number of fixed-denomination coins needed to cover `amount`."""
    if amount <= 0:
        raise PreconditionError(f"amount must be positive, got {amount}")
    if denomination <= 0:
        raise PreconditionError(f"denomination must be positive, got {denomination}")
    return math.ceil(amount / denomination)


def select_coins_for_payment(
    coins: Sequence[FloatingPoint],
    amount: int | float,
    denomination: int = COIN_DENOMINATION,
    seed: int | str | None = None,
    now: datetime | None = None,
) -> list[FloatingPoint]:
    """
    Choose unspent coins to pay `amount`, weighted by gravity.

    Raises:
        InsufficientFundsError: If the unspent coins cannot cover the amount.
    """
    needed = required_coin_count(amount, denomination)
    unspent = [c for c in coins if not c.is_spent]
    if len(unspent) < needed:
        raise InsufficientFundsError(
            f"Payment of {amount} needs {needed} coins, only {len(unspent)} unspent"
        )
    return weighted_select(unspent, needed, seed=seed, now=now)
