"""
Placeholder for the succinct transfer proof.

A production deployment proves, in zero knowledge, that every nullifier
belongs to a coin in the ledger's Merkle accumulator and that the outputs
conserve value. That proof system (a Groth16-style SNARK) is not
implemented. PlaceholderProof keeps the same shape ({pi_a, pi_b, pi_c} plus
public signals) so the rest of the pipeline and the ledger interface can be
exercised, but it is a content-derived digest with NO soundness: anyone can
produce one. It must be replaced wholesale by a real prover.

What verify_placeholder_proof does check is structural: formats, counts,
value conservation for the fixed denomination (|nullifiers| == |outputs|),
freshness, and that proof_hash matches (proof, pi_a, pi_c).
"""

from __future__ import annotations

import time
from dataclasses import dataclass

from fpp.crypto.curve import decode_point
from fpp.crypto.encryption import EncryptedOutput
from fpp.crypto.hashing import hash_bytes, hash_hex
from fpp.crypto.keyimage import is_valid_nullifier
from fpp.crypto.randomness import random_secret_hex
from fpp.errors import PreconditionError, VerificationResult

PROOF_DOMAIN = "fpp.proof.placeholder.v1"
CIRCUIT_NAME = "PrivacyPayment"
PROOF_VERSION = "1.0.0"
ZERO_ROOT = "00" * 32

MAX_PROOF_AGE_SECONDS = 30 * 60
MAX_CLOCK_SKEW_SECONDS = 60


@dataclass(frozen=True)
class PlaceholderProof:
    """
    Non-cryptographic stand-in for a succinct transfer proof.

    Attributes:
        proof: Digest binding inputs, nullifiers, outputs, recipient and root.
        public_signals: [recipient key, input count, merkle root].
        nullifiers: Nullifiers of the spent inputs.
        output_commitments: Commitments of the minted outputs.
        encrypted_outputs: Encrypted output secrets.
        verification_key: Digest of (proof, timestamp).
        pi_a / pi_b / pi_c: Random filler in Groth16 proof shape.
        merkle_root: Accumulator root the inputs are claimed against.
        circuit: Circuit name the real prover would use.
        proof_hash: Digest of (proof, pi_a, pi_c).
        timestamp: Unix seconds at generation.
        version: Placeholder format version.
    """
    proof: str
    public_signals: list[str]
    nullifiers: list[str]
    output_commitments: list[str]
    encrypted_outputs: list[EncryptedOutput]
    verification_key: str
    pi_a: list[str]
    pi_b: list[list[str]]
    pi_c: list[str]
    merkle_root: str
    proof_hash: str
    timestamp: int
    circuit: str = CIRCUIT_NAME
    version: str = PROOF_VERSION


def _proof_hash(proof: str, pi_a: list[str], pi_c: list[str]) -> str:
    return hash_hex(PROOF_DOMAIN, proof, ",".join(pi_a), ",".join(pi_c))


def generate_placeholder_proof(
    input_ids: list[str],
    nullifiers: list[str],
    encrypted_outputs: list[EncryptedOutput],
    recipient_public_key: str,
    sender_secret: str,
    merkle_root: str = "",
    timestamp: int | None = None,
) -> PlaceholderProof:
    """
    Assemble the placeholder proof artifact for a transfer.

    Args:
        input_ids: Ids of the coins being spent.
        nullifiers: Their nullifiers, in the same order.
        encrypted_outputs: One encrypted output per minted coin.
        recipient_public_key: Recipient key hex.
        sender_secret: Sender secret folded into the proof digest.
        merkle_root: Accumulator root (zero root if empty).
        timestamp: Unix seconds; defaults to now.

    Returns:
        PlaceholderProof.

    Raises:
        PreconditionError: If input_ids and nullifiers differ in length.
    """
    if len(input_ids) != len(nullifiers):
        raise PreconditionError(
            f"input_ids ({len(input_ids)}) and nullifiers ({len(nullifiers)}) must have equal length"
        )
    ts = int(time.time()) if timestamp is None else timestamp
    output_commitments = [eo.output_commitment for eo in encrypted_outputs]

    proof_input = hash_bytes(
        PROOF_DOMAIN,
        ",".join(input_ids),
        ",".join(nullifiers),
        ",".join(output_commitments),
        recipient_public_key,
        merkle_root or ZERO_ROOT,
    )
    proof = hash_hex(proof_input, sender_secret)

    pi_a = [random_secret_hex(), random_secret_hex()]
    pi_b = [
        [random_secret_hex(), random_secret_hex()],
        [random_secret_hex(), random_secret_hex()],
    ]
    pi_c = [random_secret_hex(), random_secret_hex()]

    return PlaceholderProof(
        proof=proof,
        public_signals=[recipient_public_key, str(len(input_ids)), merkle_root],
        nullifiers=list(nullifiers),
        output_commitments=output_commitments,
        encrypted_outputs=list(encrypted_outputs),
        verification_key=hash_hex(proof, ts),
        pi_a=pi_a,
        pi_b=pi_b,
        pi_c=pi_c,
        merkle_root=merkle_root,
        proof_hash=_proof_hash(proof, pi_a, pi_c),
        timestamp=ts,
    )


def verify_placeholder_proof(
    proof: PlaceholderProof,
    expected_inputs: int | None = None,
    expected_outputs: int | None = None,
    now: int | None = None,
    max_age_seconds: int = MAX_PROOF_AGE_SECONDS,
    max_skew_seconds: int = MAX_CLOCK_SKEW_SECONDS,
) -> VerificationResult:
    """
    Structural checks on a placeholder proof.

    This does not and cannot establish soundness; see the module docstring.

    Returns:
        VerificationResult listing every failed check.
    """
    errors: list[str] = []

    if not is_valid_nullifier(proof.proof):  # same 32-byte hex format
        errors.append("Invalid proof format")
    if not proof.nullifiers:
        errors.append("Missing nullifiers")
    if not proof.output_commitments:
        errors.append("Missing output commitments")

    if expected_inputs is not None and len(proof.nullifiers) != expected_inputs:
        errors.append(f"Input count mismatch: expected {expected_inputs}, got {len(proof.nullifiers)}")
    if expected_outputs is not None and len(proof.output_commitments) != expected_outputs:
        errors.append(
            f"Output count mismatch: expected {expected_outputs}, got {len(proof.output_commitments)}"
        )

    if len(proof.nullifiers) != len(proof.output_commitments):
        errors.append(
            f"Value not conserved: {len(proof.nullifiers)} inputs != "
            f"{len(proof.output_commitments)} outputs"
        )
    if [eo.output_commitment for eo in proof.encrypted_outputs] != list(proof.output_commitments):
        errors.append("Encrypted outputs do not match output commitments")

    current = int(time.time()) if now is None else now
    if current - proof.timestamp > max_age_seconds:
        errors.append("Proof has expired")
    if proof.timestamp > current + max_skew_seconds:
        errors.append("Proof timestamp is in the future")

    if _proof_hash(proof.proof, proof.pi_a, proof.pi_c) != proof.proof_hash:
        errors.append("Proof hash verification failed")

    for nullifier in proof.nullifiers:
        if not is_valid_nullifier(nullifier):
            errors.append(f"Invalid nullifier format: {str(nullifier)[:10]}")

    for commitment in proof.output_commitments:
        try:
            decode_point(commitment)
        except PreconditionError:
            errors.append(f"Invalid output commitment format: {str(commitment)[:10]}")

    return VerificationResult.from_errors(errors)
