"""
Integration tests for the full private transfer lifecycle.

Mint coins into a pool, pick inputs by gravity weight, build and verify a
transfer, hand the outputs to the recipient, and play the ledger's role of
recording nullifiers and key images to catch double spends.

Run with: python -m pytest tests/integration -v -m integration
"""

import secrets
from datetime import datetime, timedelta, timezone

import pytest

from fpp import CoinPool, build_transaction, mint_coin, verify_transaction
from fpp.core.selection import select_coins_for_payment
from fpp.crypto.curve import SECP256K1_N, derive_public_key, encode_point
from fpp.crypto.encryption import decrypt_output, verify_output_commitment
from fpp.crypto.ring import key_images_linked
from fpp.errors import CoinAlreadySpentError
from fpp.tools.safety import PrivacyConfig

pytestmark = pytest.mark.integration


def _random_key() -> int:
    return secrets.randbelow(SECP256K1_N - 1) + 1


class Ledger:
    """Minimal spend-state keeper standing in for the external ledger."""

    def __init__(self):
        self.nullifiers: set[str] = set()
        self.key_images: set[str] = set()
        self.commitments: list[str] = []

    def accept(self, tx) -> list[str]:
        errors = list(verify_transaction(tx).errors)
        if self.nullifiers & set(tx.input_nullifiers):
            errors.append("nullifier already spent")
        if tx.key_image in self.key_images:
            errors.append("key image already seen")
        if not errors:
            self.nullifiers.update(tx.input_nullifiers)
            self.key_images.add(tx.key_image)
            self.commitments.extend(tx.output_commitments)
        return errors


@pytest.fixture
def world():
    """A pool of 20 coins of mixed ages, three owned by the sender."""
    now = datetime.now(timezone.utc)
    pool = CoinPool(
        mint_coin(owner="pool", created_at=now - timedelta(days=i % 7)) for i in range(17)
    )
    for days in (1, 3, 9):
        pool.add(mint_coin(owner="sender", created_at=now - timedelta(days=days)))
    return pool, _random_key(), _random_key()


class TestLifecycle:
    """End-to-end transfer scenarios."""

    def test_single_input_transfer(self, world):
        """1 input and 1 recipient: one output, verified, decryptable."""
        pool, sender, recipient = world
        recipient_pub = encode_point(derive_public_key(recipient))
        coin = pool.owned_by("sender")[0]

        tx = build_transaction([coin], pool, recipient_pub, sender)
        assert len(tx.input_point_ids) == len(tx.output_commitments) == 1
        assert verify_transaction(tx).is_valid

        secret = decrypt_output(tx.encrypted_outputs[0], recipient)
        assert verify_output_commitment(tx.encrypted_outputs[0], secret)

    def test_payment_flow_and_spend_marking(self, world):
        """Pay 20: two coins chosen by gravity, spent once, never again."""
        pool, sender, recipient = world
        recipient_pub = encode_point(derive_public_key(recipient))
        ledger = Ledger()

        inputs = select_coins_for_payment(pool.owned_by("sender"), 20)
        assert len(inputs) == 2

        tx = build_transaction(inputs, pool, recipient_pub, sender)
        assert ledger.accept(tx) == []
        for coin_id in tx.input_point_ids:
            spent = pool.mark_spent(coin_id)
            assert spent.nullifier in tx.input_nullifiers

        with pytest.raises(CoinAlreadySpentError):
            build_transaction([pool.get(inputs[0].id)], pool, recipient_pub, sender)

        assert len(ledger.commitments) == 2

    def test_ledger_links_repeat_spender(self, world):
        """A second transfer by the same key is linked through its key image."""
        pool, sender, recipient = world
        recipient_pub = encode_point(derive_public_key(recipient))
        ledger = Ledger()
        first_coin, second_coin = pool.owned_by("sender")[:2]

        first = build_transaction([first_coin], pool, recipient_pub, sender)
        assert ledger.accept(first) == []
        pool.mark_spent(first_coin.id)

        second = build_transaction([second_coin], pool, recipient_pub, sender)
        assert key_images_linked(first.ring_signature, second.ring_signature)
        assert "key image already seen" in ledger.accept(second)

    def test_recipient_spends_received_output(self, world):
        """The recipient mints the received secret into a coin and spends it on."""
        pool, sender, recipient = world
        recipient_pub = encode_point(derive_public_key(recipient))
        third_party = encode_point(derive_public_key(_random_key()))

        tx = build_transaction([pool.owned_by("sender")[0]], pool, recipient_pub, sender)
        secret = decrypt_output(tx.encrypted_outputs[0], recipient)
        received = mint_coin(owner="recipient", secret=secret)
        assert received.commitment == tx.output_commitments[0]

        pool.add(received)
        onward = build_transaction([received], pool, third_party, recipient)
        assert verify_transaction(onward).is_valid
        assert onward.key_image != tx.key_image

    def test_small_pool_respects_policy(self):
        """A sparse pool still builds when the policy allows small rings."""
        config = PrivacyConfig(min_ring_size=2, target_ring_size=3, max_ring_size=5)
        pool = CoinPool([mint_coin(), mint_coin()])
        coin = mint_coin()
        tx = build_transaction([coin], pool, encode_point(derive_public_key(_random_key())),
                               _random_key(), config=config)
        assert tx.ring_signature.ring_size == 3
        assert verify_transaction(tx, config=config).is_valid
