"""
Decoy selection for ring anonymity sets.

Decoys are drawn uniformly at random from eligible coins (unspent, not a
real input). Decoy choice never depends on gravity weight or any other
observable coin attribute.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Sequence

from fpp.core.models import DecoySelectionResult, FloatingPoint
from fpp.crypto.hashing import hash_hex
from fpp.crypto.randomness import secure_randbelow, secure_shuffle
from fpp.errors import PreconditionError

logger = logging.getLogger("fpp.decoys")

DEFAULT_TARGET_RING_SIZE = 11
SELECTION_DOMAIN = "fpp.decoys.selection.v1"


def select_decoys(
    all_coins: Iterable[FloatingPoint],
    real_input_ids: Sequence[str],
    target_ring_size: int = DEFAULT_TARGET_RING_SIZE,
) -> DecoySelectionResult:
    """
    Draw decoys to pad the real inputs up to `target_ring_size`.

    Args:
        all_coins: The pool snapshot.
        real_input_ids: Ids of the coins actually being spent.
        target_ring_size: Desired |real inputs| + |decoys|.

    Returns:
        DecoySelectionResult. When the eligible pool is too small the ring
        shrinks and anonymity_score drops below 100, or to 0 when no coin is
        eligible at all; callers enforcing a minimum ring size must treat
        that as a hard failure.

    Raises:
        PreconditionError: If target_ring_size is not positive.
    """
    if target_ring_size <= 0:
        raise PreconditionError(f"target_ring_size must be positive, got {target_ring_size}")

    real_ids = list(real_input_ids)
    real_set = set(real_ids)
    eligible = [c for c in all_coins if c.id not in real_set and not c.is_spent]
    needed = max(0, target_ring_size - len(real_ids))

    candidates = list(eligible)
    selected: list[FloatingPoint] = []
    while len(selected) < needed and candidates:
        selected.append(candidates.pop(secure_randbelow(len(candidates))))
    secure_shuffle(selected)

    ring_ids = [d.id for d in selected]
    for real_id in real_ids:
        ring_ids.insert(secure_randbelow(len(ring_ids) + 1), real_id)

    ring_size = len(real_ids) + len(selected)
    anonymity_score = min(100.0, ring_size / target_ring_size * 100) if eligible else 0.0

    if not eligible:
        logger.warning(f"No eligible decoys in pool; ring shrinks to {ring_size}")
    elif len(selected) < needed:
        logger.warning(
            f"Only {len(selected)} of {needed} decoys available; anonymity score {anonymity_score:.1f}"
        )

    selection_proof = ""
    if selected:
        selection_proof = hash_hex(SELECTION_DOMAIN, ",".join(d.id for d in selected), int(time.time()))

    return DecoySelectionResult(
        decoys=selected,
        ring_size=ring_size,
        anonymity_score=anonymity_score,
        ring_ids=ring_ids,
        selection_proof=selection_proof,
    )
