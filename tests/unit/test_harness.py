"""
Unit tests for fpp.harness — the async latency wrapper.
"""

import asyncio
import secrets

import pytest

from fpp.core.models import mint_coin
from fpp.core.pool import CoinPool
from fpp.core.transaction import verify_transaction
from fpp.crypto.curve import SECP256K1_N, derive_public_key, encode_point
from fpp.errors import PreconditionError
from fpp.harness import build_transaction_async
from fpp.tools.safety import PrivacyConfig

CONFIG = PrivacyConfig(min_ring_size=3, target_ring_size=5, max_ring_size=8)


def _random_key() -> int:
    return secrets.randbelow(SECP256K1_N - 1) + 1


@pytest.fixture
def setup():
    sender = _random_key()
    recipient_pub = encode_point(derive_public_key(_random_key()))
    coin = mint_coin()
    pool = CoinPool([coin] + [mint_coin() for _ in range(6)])
    return sender, recipient_pub, coin, pool


class TestBuildTransactionAsync:
    """Tests for build_transaction_async."""

    def test_builds_after_latency(self, setup):
        sender, recipient_pub, coin, pool = setup
        tx = asyncio.run(
            build_transaction_async([coin], pool, recipient_pub, sender, config=CONFIG, latency=0.01)
        )
        assert verify_transaction(tx, config=CONFIG).is_valid

    def test_latency_from_config(self, setup):
        sender, recipient_pub, coin, pool = setup
        config = PrivacyConfig(min_ring_size=3, target_ring_size=5, max_ring_size=8,
                               simulated_latency_seconds=0.01)
        tx = asyncio.run(build_transaction_async([coin], pool, recipient_pub, sender, config=config))
        assert tx.input_point_ids == [coin.id]

    def test_cancellation_leaves_pool_untouched(self, setup):
        sender, recipient_pub, coin, pool = setup

        async def abandon():
            task = asyncio.create_task(
                build_transaction_async([coin], pool, recipient_pub, sender, config=CONFIG, latency=10)
            )
            await asyncio.sleep(0.01)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(abandon())
        assert len(pool.unspent()) == 7

    def test_concurrent_builds_are_independent(self, setup):
        sender, recipient_pub, coin, pool = setup
        other = mint_coin()
        pool.add(other)

        async def both():
            return await asyncio.gather(
                build_transaction_async([coin], pool, recipient_pub, sender, config=CONFIG, latency=0.01),
                build_transaction_async([other], pool, recipient_pub, sender, config=CONFIG, latency=0),
            )

        first, second = asyncio.run(both())
        assert first.tx_hash != second.tx_hash
        assert first.key_image == second.key_image

    def test_negative_latency(self, setup):
        sender, recipient_pub, coin, pool = setup
        with pytest.raises(PreconditionError, match="non-negative"):
            asyncio.run(build_transaction_async([coin], pool, recipient_pub, sender, latency=-1))
