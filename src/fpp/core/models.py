"""
Core data models for the Floating Point Protocol.
Every coin ("floating point") carries the same fixed denomination.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fpp.crypto.encryption import EncryptedOutput
from fpp.crypto.keyimage import compute_nullifier
from fpp.crypto.pedersen import COIN_DENOMINATION, commitment_from_secret
from fpp.crypto.proof import PlaceholderProof
from fpp.crypto.randomness import random_secret_hex
from fpp.crypto.ring import RingSignature
from fpp.errors import CoinAlreadySpentError, PreconditionError

SECONDS_PER_DAY = 86_400


class FloatingPoint(BaseModel):
    """A fixed-denomination coin held in the pool."""
    id: str
    value: int = COIN_DENOMINATION
    commitment: str  # compressed hex of C = value·G + r·H
    nullifier: str | None = None  # set once, when spent
    mass: float = 1.0
    created_at: datetime
    is_spent: bool = False
    owner: str | None = None
    secret: str | None = Field(default=None, repr=False)  # sensitive until spent

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        return v if v.tzinfo is not None else v.replace(tzinfo=timezone.utc)

    def age_days(self, now: datetime | None = None) -> float:
        """Age in (fractional) days. Coins dated in the future count as age 0."""
        now = now or datetime.now(timezone.utc)
        return max(0.0, (now - self.created_at).total_seconds() / SECONDS_PER_DAY)

    def spend(self) -> FloatingPoint:
        """
        Return the spent form of this coin.

        The nullifier is computed exactly once here and the secret is dropped,
        since a spent coin's secret is never needed again.

        Raises:
            CoinAlreadySpentError: If the coin is already spent.
            PreconditionError: If the coin has no secret to derive a nullifier from.
        """
        if self.is_spent:
            raise CoinAlreadySpentError(f"Coin {self.id} is already spent")
        if not self.secret:
            raise PreconditionError(f"Coin {self.id} has no secret; cannot derive its nullifier")
        return self.model_copy(
            update={
                "nullifier": compute_nullifier(self.id, self.secret),
                "is_spent": True,
                "secret": None,
            }
        )


def mint_coin(
    owner: str | None = None,
    value: int = COIN_DENOMINATION,
    mass: float = 1.0,
    created_at: datetime | None = None,
    coin_id: str | None = None,
    secret: str | None = None,
) -> FloatingPoint:
    """
    Mint a fresh unspent coin with a random secret and its commitment.

    Args:
        owner: Owner label (opaque to the core).
        value: Denomination.
        mass: Selection mass.
        created_at: Mint time; defaults to now (UTC).
        coin_id: Identifier; random 16-byte hex by default.
        secret: Coin secret; a fresh 32-byte secret by default.
    """
    secret = secret or random_secret_hex()
    return FloatingPoint(
        id=coin_id or random_secret_hex(16),
        value=value,
        commitment=commitment_from_secret(secret, value).commitment_hex,
        mass=mass,
        created_at=created_at or datetime.now(timezone.utc),
        owner=owner,
        secret=secret,
    )


class DecoySelectionResult(BaseModel):
    """Decoys drawn for a ring, plus the resulting anonymity figures."""
    decoys: list[FloatingPoint] = Field(default_factory=list)
    ring_size: int
    anonymity_score: float = Field(ge=0.0, le=100.0)
    ring_ids: list[str] = Field(default_factory=list)  # decoys + real ids, shuffled
    selection_proof: str = ""


class PrivacyMetrics(BaseModel):
    """Anonymity figures attached to a transaction."""
    ring_size: int
    anonymity_score: float
    decoy_count: int


class PrivacyTransaction(BaseModel):
    """A fully assembled anonymous transfer, ready for the ledger."""
    model_config = ConfigDict(frozen=True)

    input_point_ids: list[str]
    input_nullifiers: list[str]
    output_commitments: list[str]
    encrypted_outputs: list[EncryptedOutput]
    proof: PlaceholderProof
    ring_signature: RingSignature
    timestamp: int
    tx_hash: str
    merkle_root: str
    deadline: int
    privacy_metrics: PrivacyMetrics

    @property
    def key_image(self) -> str:
        """The spender's key image, for the ledger's double-spend check."""
        return self.ring_signature.key_image
