"""
Transaction assembly: turns owned coins into a complete PrivacyTransaction.

Pipeline (one synchronous call, no I/O):
    1. Draw decoys from the pool snapshot
    2. Derive a nullifier for every input coin
    3. Mint one fresh output per input and encrypt its secret for the recipient
    4. Build the placeholder proof binding inputs, nullifiers and outputs
    5. Shuffle the sender's key into the decoy keys and ring-sign a message
       binding the inputs, nullifiers, outputs, root, recipient and timing
    6. Hash (proof, signature, timestamp) into the transaction id

Either a complete transaction comes back or a PreconditionError subclass is
raised. Nothing is recorded anywhere: marking inputs spent and rejecting
reused nullifiers or key images is the ledger's job.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

from fpp.core.decoys import select_decoys
from fpp.core.models import FloatingPoint, PrivacyMetrics, PrivacyTransaction
from fpp.core.pool import CoinPool
from fpp.crypto.curve import (
    CurvePoint,
    decode_point,
    derive_public_key,
    encode_point,
    mod_n,
    scalar_to_hex,
)
from fpp.crypto.encryption import EncryptedOutput, encrypt_for_recipient
from fpp.crypto.hashing import hash_bytes, hash_hex
from fpp.crypto.keyimage import compute_nullifier
from fpp.crypto.proof import PlaceholderProof, generate_placeholder_proof, verify_placeholder_proof
from fpp.crypto.randomness import random_secret_hex, secure_randbelow
from fpp.crypto.ring import generate_ring_signature, verify_ring_signature
from fpp.errors import (
    CoinAlreadySpentError,
    InsufficientAnonymityError,
    PreconditionError,
    VerificationResult,
)
from fpp.tools.safety import PrivacyConfig

logger = logging.getLogger("fpp.transaction")

MESSAGE_DOMAIN = "fpp.tx.message.v1"
TX_DOMAIN = "fpp.tx.hash.v1"


# ==============================================================================
# Helpers
# ==============================================================================


def transaction_message(
    proof: PlaceholderProof,
    input_ids: Sequence[str],
    nullifiers: Sequence[str],
    encrypted_outputs: Sequence[EncryptedOutput],
    merkle_root: str,
    recipient_public_key: str,
    timestamp: int,
    deadline: int,
) -> bytes:
    """
    The bytes the ring signature authorizes.

    Every public field a relayer could swap after signing is covered: spent
    ids and their nullifiers, each output's commitment, ciphertext, ephemeral
    key and tag, the accumulator root, the recipient and the validity window.
    """
    outputs = [
        hash_hex(eo.output_commitment, eo.encrypted_secret, eo.ephemeral_public_key, eo.mac)
        for eo in encrypted_outputs
    ]
    return hash_bytes(
        MESSAGE_DOMAIN,
        proof.proof,
        ",".join(input_ids),
        ",".join(nullifiers),
        ",".join(outputs),
        merkle_root,
        recipient_public_key.lower(),
        timestamp,
        deadline,
    )


def transaction_hash(proof: PlaceholderProof, signature: str, timestamp: int) -> str:
    return hash_hex(TX_DOMAIN, proof.proof, signature, timestamp)


def _recipient_hex(recipient_public_key: CurvePoint | str) -> str:
    point = decode_point(recipient_public_key) if isinstance(recipient_public_key, str) else recipient_public_key
    return encode_point(point)


def _ring_keys(decoys: Iterable[FloatingPoint], sender_key: CurvePoint, limit: int) -> list[CurvePoint]:
    """Decoy commitments as ring keys, deduplicated, excluding the sender's key."""
    keys: list[CurvePoint] = []
    seen = {sender_key}
    for decoy in decoys:
        if len(keys) >= limit:
            break
        try:
            point = decode_point(decoy.commitment)
        except PreconditionError:
            logger.warning(f"Skipping decoy {decoy.id}: commitment is not a curve point")
            continue
        if point in seen:
            continue
        seen.add(point)
        keys.append(point)
    return keys


# ==============================================================================
# Build
# ==============================================================================


def build_transaction(
    input_coins: Sequence[FloatingPoint],
    pool: CoinPool | Iterable[FloatingPoint],
    recipient_public_key: CurvePoint | str,
    sender_private_key: int,
    merkle_root: str = "",
    deadline: int | None = None,
    config: PrivacyConfig | None = None,
    now: int | None = None,
) -> PrivacyTransaction:
    """
    Assemble an anonymous transfer of `input_coins` to a recipient.

    Args:
        input_coins: The sender's unspent coins being spent.
        pool: Pool snapshot decoys are drawn from (CoinPool or coin list).
        recipient_public_key: Recipient's public point or its hex.
        sender_private_key: The sender's private scalar.
        merkle_root: Accumulator root the inputs are claimed against.
        deadline: Unix seconds after which the transaction is void.
            Defaults to now + config.deadline_seconds.
        config: Privacy policy; PrivacyConfig() by default.
        now: Unix seconds to stamp the transaction with; defaults to now.

    Returns:
        PrivacyTransaction with one output per input.

    Raises:
        PreconditionError: Empty or duplicate inputs, bad key, past deadline.
        CoinAlreadySpentError: If an input coin is already spent.
        InsufficientAnonymityError: If the ring is smaller than min_ring_size.
        InvalidPointError: If the recipient key is not a curve point.
    """
    config = config or PrivacyConfig()
    config.validate()

    if not input_coins:
        raise PreconditionError("At least one input coin is required")
    ids = [c.id for c in input_coins]
    if len(set(ids)) != len(ids):
        raise PreconditionError("Duplicate input coin ids")
    for coin in input_coins:
        if coin.is_spent:
            raise CoinAlreadySpentError(f"Input coin {coin.id} is already spent")

    x = mod_n(sender_private_key)
    if x == 0:
        raise PreconditionError("sender private key must be non-zero mod n")
    sender_key = derive_public_key(x)
    recipient = _recipient_hex(recipient_public_key)

    timestamp = int(time.time()) if now is None else now
    tx_deadline = timestamp + config.deadline_seconds if deadline is None else deadline
    if tx_deadline <= timestamp:
        raise PreconditionError(f"Deadline {tx_deadline} is not after timestamp {timestamp}")

    # 1. decoys
    snapshot = pool.snapshot() if isinstance(pool, CoinPool) else list(pool)
    decoy_result = select_decoys(snapshot, ids, config.target_ring_size)

    # 2. nullifiers
    sender_secret = scalar_to_hex(x)
    nullifiers = [compute_nullifier(c.id, c.secret or sender_secret) for c in input_coins]

    # 3. outputs, 1:1 with inputs
    encrypted_outputs = [
        encrypt_for_recipient(random_secret_hex(), recipient, config.denomination)
        for _ in input_coins
    ]

    # 4. proof
    proof = generate_placeholder_proof(
        input_ids=ids,
        nullifiers=nullifiers,
        encrypted_outputs=encrypted_outputs,
        recipient_public_key=recipient,
        sender_secret=sender_secret,
        merkle_root=merkle_root,
        timestamp=timestamp,
    )

    # 5. ring signature
    ring = _ring_keys(decoy_result.decoys, sender_key, config.max_ring_size - 1)
    signer_index = secure_randbelow(len(ring) + 1)
    ring.insert(signer_index, sender_key)
    if len(ring) < config.min_ring_size:
        raise InsufficientAnonymityError(
            f"Ring size {len(ring)} is below the minimum of {config.min_ring_size} "
            f"({len(decoy_result.decoys)} decoys available)"
        )
    config.validate_ring_size(len(ring))

    message = transaction_message(
        proof, ids, nullifiers, encrypted_outputs, merkle_root, recipient, timestamp, tx_deadline
    )
    signature = generate_ring_signature(message, x, ring, signer_index)

    # 6. id
    tx = PrivacyTransaction(
        input_point_ids=ids,
        input_nullifiers=nullifiers,
        output_commitments=[eo.output_commitment for eo in encrypted_outputs],
        encrypted_outputs=encrypted_outputs,
        proof=proof,
        ring_signature=signature,
        timestamp=timestamp,
        tx_hash=transaction_hash(proof, signature.signature, timestamp),
        merkle_root=merkle_root,
        deadline=tx_deadline,
        privacy_metrics=PrivacyMetrics(
            ring_size=signature.ring_size,
            anonymity_score=decoy_result.anonymity_score,
            decoy_count=len(decoy_result.decoys),
        ),
    )

    stamped = datetime.fromtimestamp(timestamp, timezone.utc)
    coin_ages = [c.age_days(stamped) for c in input_coins]
    for warning in config.validate_privacy_transfer(signature.ring_size, coin_ages):
        logger.warning(warning)
    logger.info(
        f"Built transaction {tx.tx_hash[:16]}: {len(ids)} input(s), ring size {signature.ring_size}"
    )
    return tx


# ==============================================================================
# Verify
# ==============================================================================


def verify_transaction(
    tx: PrivacyTransaction,
    config: PrivacyConfig | None = None,
    now: int | None = None,
) -> VerificationResult:
    """
    Run every stateless check the ledger applies before accepting `tx`.

    Spend-state checks (nullifier or key image already seen) need ledger
    state and are not done here.

    Returns:
        VerificationResult aggregating proof, ring and binding failures.
    """
    config = config or PrivacyConfig()
    current = int(time.time()) if now is None else now
    errors: list[str] = []

    proof_result = verify_placeholder_proof(
        tx.proof,
        expected_inputs=len(tx.input_point_ids),
        expected_outputs=len(tx.output_commitments),
        now=current,
        max_age_seconds=config.proof_max_age_seconds,
        max_skew_seconds=config.max_clock_skew_seconds,
    )
    errors.extend(proof_result.errors)

    ring_result = verify_ring_signature(tx.ring_signature)
    errors.extend(ring_result.errors)

    if tx.ring_signature.ring_size < config.min_ring_size:
        errors.append(
            f"Ring size {tx.ring_signature.ring_size} is below the minimum of {config.min_ring_size}"
        )

    if list(tx.input_nullifiers) != list(tx.proof.nullifiers):
        errors.append("Transaction nullifiers do not match the proof")
    if list(tx.output_commitments) != list(tx.proof.output_commitments):
        errors.append("Transaction output commitments do not match the proof")
    if [eo.output_commitment for eo in tx.encrypted_outputs] != list(tx.output_commitments):
        errors.append("Encrypted outputs do not match output commitments")
    if list(tx.encrypted_outputs) != list(tx.proof.encrypted_outputs):
        errors.append("Transaction encrypted outputs do not match the proof")
    if tx.merkle_root != tx.proof.merkle_root:
        errors.append("Transaction merkle root does not match the proof")
    if len(set(tx.input_nullifiers)) != len(tx.input_nullifiers):
        errors.append("Duplicate nullifier within transaction")

    recipient = tx.proof.public_signals[0] if tx.proof.public_signals else ""
    expected_message = transaction_message(
        tx.proof,
        tx.input_point_ids,
        tx.input_nullifiers,
        tx.encrypted_outputs,
        tx.merkle_root,
        recipient,
        tx.timestamp,
        tx.deadline,
    )
    if tx.ring_signature.message.lower() != expected_message.hex():
        errors.append("Ring signature message does not bind this transaction")

    if tx.timestamp != tx.proof.timestamp:
        errors.append("Transaction timestamp does not match the proof")
    if current > tx.deadline:
        errors.append("Transaction deadline has passed")

    if transaction_hash(tx.proof, tx.ring_signature.signature, tx.timestamp) != tx.tx_hash:
        errors.append("Transaction hash does not match contents")

    result = VerificationResult.from_errors(errors)
    if not result:
        logger.debug(f"Transaction {tx.tx_hash[:16]} rejected: {result.errors}")
    return result
