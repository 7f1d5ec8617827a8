"""
Unit tests for fpp.core.decoys — decoy selection for rings.
"""

import logging

import pytest

from fpp.core.decoys import select_decoys
from fpp.core.models import mint_coin
from fpp.errors import PreconditionError


@pytest.fixture
def pool():
    return [mint_coin(coin_id=f"coin-{i:02d}") for i in range(20)]


class TestSelectDecoys:
    """Tests for select_decoys."""

    def test_twenty_coins_two_inputs(self, pool):
        """20 unspent coins, 2 real inputs, target 11: 9 distinct decoys, score 100."""
        real = ["coin-03", "coin-17"]
        result = select_decoys(pool, real, 11)
        assert len(result.decoys) == 9
        assert len({d.id for d in result.decoys}) == 9
        assert result.ring_size == 11
        assert result.anonymity_score == 100

    def test_disjoint_from_real_inputs(self, pool):
        real = ["coin-00", "coin-01", "coin-02"]
        for _ in range(10):
            result = select_decoys(pool, real, 11)
            assert not {d.id for d in result.decoys} & set(real)
            assert result.ring_size == len(real) + len(result.decoys)

    def test_ring_ids_contain_everything(self, pool):
        real = ["coin-05"]
        result = select_decoys(pool, real, 11)
        assert len(result.ring_ids) == 11
        assert set(result.ring_ids) == {d.id for d in result.decoys} | set(real)

    def test_spent_coins_excluded(self, pool):
        spent = {c.id for c in pool[:15]}
        pool = [c.spend() if c.id in spent else c for c in pool]
        result = select_decoys(pool, ["coin-19"], 11)
        assert len(result.decoys) == 4
        assert not {d.id for d in result.decoys} & spent

    def test_small_pool_lowers_score(self, pool, caplog):
        with caplog.at_level(logging.WARNING, logger="fpp.decoys"):
            result = select_decoys(pool[:5], ["coin-00"], 11)
        assert len(result.decoys) == 4
        assert result.ring_size == 5
        assert result.anonymity_score == pytest.approx(5 / 11 * 100)
        assert "Only 4 of 10 decoys" in caplog.text

    def test_empty_pool(self, caplog):
        with caplog.at_level(logging.WARNING, logger="fpp.decoys"):
            result = select_decoys([], ["a", "b"], 11)
        assert result.decoys == []
        assert result.ring_size == 2
        assert result.anonymity_score == 0
        assert result.selection_proof == ""
        assert "No eligible decoys" in caplog.text

    def test_selection_proof(self, pool):
        result = select_decoys(pool, ["coin-00"], 4)
        assert len(result.selection_proof) == 64

    def test_enough_real_inputs_needs_no_decoys(self, pool):
        result = select_decoys(pool, [c.id for c in pool[:12]], 11)
        assert result.decoys == []
        assert result.anonymity_score == 100

    def test_non_positive_target(self, pool):
        with pytest.raises(PreconditionError, match="target_ring_size"):
            select_decoys(pool, ["coin-00"], 0)
