"""
Error taxonomy for the privacy transaction core.

Four classes of failure:

1. Precondition violations (bad ring size, signer index out of range,
   mismatched lengths, off-curve points) raise immediately and are never
   retried. They subclass ValueError so callers validating user input can
   catch them the usual way.
2. Verification failures are not exceptions. Verifiers return a
   VerificationResult carrying every distinct error they found.
3. Internal errors (hash-to-curve exhaustion) are fatal and distinct from
   user input errors.
4. Missing secure randomness is fatal at import time.
"""

from __future__ import annotations

from dataclasses import dataclass, field


class FPPError(Exception):
    """Base class for every error raised by the fpp package."""
    pass


# ==============================================================================
# Precondition violations
# ==============================================================================


class PreconditionError(FPPError, ValueError):
    """Raised when a caller passes input that violates an operation's contract."""
    pass


class InvalidPointError(PreconditionError):
    """Raised when an encoding is malformed or a point is not on the curve."""
    pass


class RingSignatureError(PreconditionError):
    """Raised when a ring signature cannot be constructed from the given ring."""
    pass


class InsufficientAnonymityError(PreconditionError):
    """Raised when a ring would be smaller than the configured minimum."""
    pass


class InsufficientFundsError(PreconditionError):
    """Raised when not enough unspent coins exist to cover a payment."""
    pass


class CoinAlreadySpentError(PreconditionError):
    """Raised when a spent coin is spent again or used as a transaction input."""
    pass


class PolicyViolation(PreconditionError):
    """Raised when an action or configuration breaks the privacy policy."""
    pass


class DecryptionError(FPPError):
    """Raised when an encrypted output fails authentication for the given key."""
    pass


# ==============================================================================
# Fatal errors
# ==============================================================================


class InternalError(FPPError, RuntimeError):
    """Unrecoverable internal failure. Not caused by caller input."""
    pass


class HashToCurveError(InternalError):
    """Raised when hash-to-point exhausts its counter space."""
    pass


class RandomnessUnavailableError(InternalError):
    """Raised when no cryptographically secure random source is present."""
    pass


# ==============================================================================
# Verification results
# ==============================================================================


@dataclass(frozen=True)
class VerificationResult:
    """
    Outcome of a verification routine.

    Attributes:
        is_valid: True iff no errors were found.
        errors: Human-readable descriptions of every failed check.
    """
    is_valid: bool
    errors: list[str] = field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: list[str]) -> VerificationResult:
        return cls(is_valid=not errors, errors=list(errors))

    def __bool__(self) -> bool:
        return self.is_valid
