"""
fpp: Floating Point Protocol privacy transaction core.

Fixed-denomination coins, Pedersen commitments, nullifiers, LSAG ring
signatures and recipient-encrypted outputs, assembled into anonymous
transfers.

Usage:
    from fpp import CoinPool, build_transaction, mint_coin, verify_transaction
    from fpp.tools import PrivacyConfig
"""

from fpp.core.models import FloatingPoint, PrivacyTransaction, mint_coin
from fpp.core.pool import CoinPool
from fpp.core.transaction import build_transaction, verify_transaction
from fpp.errors import FPPError, PreconditionError, VerificationResult
from fpp.harness import build_transaction_async

__version__ = "0.1.0"
__all__ = [
    "CoinPool",
    "FPPError",
    "FloatingPoint",
    "PreconditionError",
    "PrivacyTransaction",
    "VerificationResult",
    "build_transaction",
    "build_transaction_async",
    "mint_coin",
    "verify_transaction",
]
