"""
Privacy policy for transaction building.

Ring-size bounds and freshness windows are policy, not cryptography: the
ring signature itself works for any ring of two or more keys. Every
build_transaction call validates against a PrivacyConfig before signing.
"""

from __future__ import annotations

from dataclasses import dataclass

from fpp.crypto.pedersen import COIN_DENOMINATION
from fpp.errors import InsufficientAnonymityError, PolicyViolation


@dataclass
class PrivacyConfig:
    """
    Configuration for ring sizes, timing windows and denomination.

    Args:
        denomination:              Fixed value of every coin
        min_ring_size:             Smallest ring a transaction may be signed over
        max_ring_size:             Largest ring a transaction may be signed over
        target_ring_size:          Ring size the decoy builder aims for
        deadline_seconds:          Default validity window of a transaction
        proof_max_age_seconds:     Oldest proof a verifier accepts
        max_clock_skew_seconds:    How far in the future a timestamp may be
        simulated_latency_seconds: Delay the async harness adds before building
        min_coin_age_days:         Spending younger coins triggers a timing warning
    """
    denomination: int = COIN_DENOMINATION
    min_ring_size: int = 5
    max_ring_size: int = 20
    target_ring_size: int = 11
    deadline_seconds: int = 30 * 60
    proof_max_age_seconds: int = 30 * 60
    max_clock_skew_seconds: int = 60
    simulated_latency_seconds: float = 0.0
    min_coin_age_days: float = 1.0

    def validate(self) -> None:
        """Raise PolicyViolation if the configuration is inconsistent."""
        if self.denomination <= 0:
            raise PolicyViolation(f"denomination must be positive, got {self.denomination}")
        if self.min_ring_size < 2:
            raise PolicyViolation(f"min_ring_size must be at least 2, got {self.min_ring_size}")
        if not self.min_ring_size <= self.target_ring_size <= self.max_ring_size:
            raise PolicyViolation(
                f"target_ring_size {self.target_ring_size} must lie in "
                f"[{self.min_ring_size}, {self.max_ring_size}]"
            )
        if self.deadline_seconds <= 0:
            raise PolicyViolation(f"deadline_seconds must be positive, got {self.deadline_seconds}")
        if self.simulated_latency_seconds < 0:
            raise PolicyViolation("simulated_latency_seconds must be non-negative")

    def validate_ring_size(self, ring_size: int) -> None:
        """
        Enforce the ring-size bounds.

        Raises:
            InsufficientAnonymityError: If ring_size < min_ring_size.
            PolicyViolation: If ring_size > max_ring_size.
        """
        if ring_size < self.min_ring_size:
            raise InsufficientAnonymityError(
                f"Ring size {ring_size} is below the minimum of {self.min_ring_size}"
            )
        if ring_size > self.max_ring_size:
            raise PolicyViolation(
                f"Ring size {ring_size} exceeds the maximum of {self.max_ring_size}"
            )

    def validate_privacy_transfer(
        self,
        ring_size: int,
        coin_ages_days: list[float] | None = None,
    ) -> list[str]:
        """
        Run privacy-aware pre-flight checks before a transfer.

        Returns a list of warning strings (empty = all clear).
        """
        warnings = []

        if ring_size < self.target_ring_size:
            warnings.append(
                f"LOW_ANONYMITY: Ring size {ring_size} < target {self.target_ring_size}. "
                f"Transfer is easier to link."
            )

        for age in coin_ages_days or []:
            if age < self.min_coin_age_days:
                warnings.append(
                    f"TOO_SOON: Coin is {age:.2f} days old (minimum {self.min_coin_age_days}). "
                    f"Timing analysis risk."
                )

        return warnings
