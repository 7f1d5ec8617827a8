"""
Async wrapper around build_transaction that simulates proving latency.

The builder itself is synchronous and deterministic to test. This harness
stands in for a slower proving backend: it awaits a cancellable delay, then
runs the build in a worker thread so the event loop is never blocked.
Cancelling the awaiting task discards the build; nothing is shared between
concurrent builds, so an abandoned build leaves no partial state behind.

Usage:
    tx = asyncio.run(build_transaction_async(inputs, pool, recipient, key, root))
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Iterable, Sequence

from fpp.core.models import FloatingPoint, PrivacyTransaction
from fpp.core.pool import CoinPool
from fpp.core.transaction import build_transaction
from fpp.crypto.curve import CurvePoint
from fpp.errors import PreconditionError
from fpp.tools.safety import PrivacyConfig

logger = logging.getLogger("fpp.harness")


async def build_transaction_async(
    input_coins: Sequence[FloatingPoint],
    pool: CoinPool | Iterable[FloatingPoint],
    recipient_public_key: CurvePoint | str,
    sender_private_key: int,
    merkle_root: str = "",
    deadline: int | None = None,
    config: PrivacyConfig | None = None,
    latency: float | None = None,
) -> PrivacyTransaction:
    """
    Build a transaction after a simulated proving delay.

    Args:
        latency: Seconds to wait before building. Defaults to
            config.simulated_latency_seconds.
        Remaining arguments are passed to build_transaction.

    Raises:
        Everything build_transaction raises, plus asyncio.CancelledError if
        the caller cancels while waiting.
    """
    config = config or PrivacyConfig()
    delay = config.simulated_latency_seconds if latency is None else latency
    if delay < 0:
        raise PreconditionError(f"latency must be non-negative, got {delay}")

    # pool state is fixed at call time
    snapshot = pool.snapshot() if isinstance(pool, CoinPool) else list(pool)

    if delay:
        logger.debug(f"Simulating {delay:.3f}s proving latency")
        await asyncio.sleep(delay)

    build = functools.partial(
        build_transaction,
        list(input_coins),
        snapshot,
        recipient_public_key,
        sender_private_key,
        merkle_root=merkle_root,
        deadline=deadline,
        config=config,
    )
    return await asyncio.to_thread(build)
