"""
Explicit coin-pool state.

The pool snapshot is passed into each call instead of living in a module
global, so the crypto core stays free of hidden state. A CoinPool is a
plain container: the ledger remains the authority on what is spent.
Not thread-safe; give each concurrent build its own snapshot.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from fpp.core.models import FloatingPoint
from fpp.errors import PreconditionError


class CoinPool:
    """
    In-memory view of the coin pool.

    Usage:
        pool = CoinPool([mint_coin() for _ in range(20)])
        tx = build_transaction(inputs, pool, recipient, sender_key, root)
        for coin_id in tx.input_point_ids:
            pool.mark_spent(coin_id)
    """

    def __init__(self, coins: Iterable[FloatingPoint] = ()):
        self._coins: dict[str, FloatingPoint] = {}
        for coin in coins:
            self.add(coin)

    def __len__(self) -> int:
        return len(self._coins)

    def __iter__(self) -> Iterator[FloatingPoint]:
        return iter(list(self._coins.values()))

    def __contains__(self, coin_id: object) -> bool:
        return coin_id in self._coins

    def add(self, coin: FloatingPoint) -> None:
        """Add a coin. Ids must be unique."""
        if coin.id in self._coins:
            raise PreconditionError(f"Duplicate coin id: {coin.id}")
        self._coins[coin.id] = coin

    def get(self, coin_id: str) -> FloatingPoint:
        """Look up a coin by id."""
        try:
            return self._coins[coin_id]
        except KeyError:
            raise PreconditionError(f"Unknown coin id: {coin_id}") from None

    def unspent(self) -> list[FloatingPoint]:
        return [c for c in self._coins.values() if not c.is_spent]

    def owned_by(self, owner: str) -> list[FloatingPoint]:
        """Unspent coins belonging to `owner`."""
        return [c for c in self._coins.values() if c.owner == owner and not c.is_spent]

    def snapshot(self) -> list[FloatingPoint]:
        """A list copy of every coin, spent or not."""
        return list(self._coins.values())

    def mark_spent(self, coin_id: str) -> FloatingPoint:
        """
        Replace a coin with its spent form and return it.

        Raises:
            PreconditionError: If the id is unknown.
            CoinAlreadySpentError: If the coin is already spent.
        """
        spent = self.get(coin_id).spend()
        self._coins[coin_id] = spent
        return spent
