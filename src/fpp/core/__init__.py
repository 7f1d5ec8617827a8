"""core module init"""
from fpp.core.decoys import select_decoys
from fpp.core.models import (
    DecoySelectionResult,
    FloatingPoint,
    PrivacyMetrics,
    PrivacyTransaction,
    mint_coin,
)
from fpp.core.pool import CoinPool
from fpp.core.selection import (
    SeedStream,
    gravity_weight,
    required_coin_count,
    select_coins_for_payment,
    weighted_select,
)
from fpp.core.transaction import build_transaction, verify_transaction

__all__ = [
    "CoinPool",
    "DecoySelectionResult",
    "FloatingPoint",
    "PrivacyMetrics",
    "PrivacyTransaction",
    "SeedStream",
    "build_transaction",
    "gravity_weight",
    "mint_coin",
    "required_coin_count",
    "select_coins_for_payment",
    "select_decoys",
    "verify_transaction",
    "weighted_select",
]
