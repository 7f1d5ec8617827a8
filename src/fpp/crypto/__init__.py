"""
fpp.crypto — Cryptographic primitives for the privacy transaction core.

Provides:
- secp256k1 group arithmetic and point/scalar codecs
- Domain-separated hash-to-scalar and hash-to-point
- Pedersen Commitments (C = v·G + r·H)
- Nullifiers and key images
- LSAG ring signatures
- ECDH recipient output encryption
- The placeholder transfer proof
"""

from fpp.crypto.curve import (
    G,
    G_COMPRESSED,
    INFINITY,
    SECP256K1_N,
    SECP256K1_P,
    CurvePoint,
    decode_point,
    derive_public_key,
    encode_point,
    encode_point_uncompressed,
    mod_inverse,
    point_add,
    point_double,
    scalar_from_hex,
    scalar_multiply,
    scalar_to_hex,
)
from fpp.crypto.encryption import (
    EncryptedOutput,
    decrypt_output,
    encrypt_for_recipient,
    verify_output_commitment,
)
from fpp.crypto.hashing import NUMS_H, hash_point, hash_to_point, hash_to_scalar
from fpp.crypto.keyimage import (
    compute_key_image,
    compute_nullifier,
    is_valid_nullifier,
    verify_key_image,
)
from fpp.crypto.pedersen import (
    COIN_DENOMINATION,
    PedersenCommitment,
    commit,
    commitment_from_secret,
    verify,
)
from fpp.crypto.proof import (
    PlaceholderProof,
    generate_placeholder_proof,
    verify_placeholder_proof,
)
from fpp.crypto.ring import (
    RingSignature,
    generate_ring_signature,
    key_images_linked,
    verify_ring_signature,
)

__all__ = [
    # Curve
    "G",
    "G_COMPRESSED",
    "INFINITY",
    "SECP256K1_N",
    "SECP256K1_P",
    "CurvePoint",
    "decode_point",
    "derive_public_key",
    "encode_point",
    "encode_point_uncompressed",
    "mod_inverse",
    "point_add",
    "point_double",
    "scalar_from_hex",
    "scalar_multiply",
    "scalar_to_hex",
    # Hashing
    "NUMS_H",
    "hash_point",
    "hash_to_point",
    "hash_to_scalar",
    # Pedersen
    "COIN_DENOMINATION",
    "PedersenCommitment",
    "commit",
    "commitment_from_secret",
    "verify",
    # Nullifiers & key images
    "compute_key_image",
    "compute_nullifier",
    "is_valid_nullifier",
    "verify_key_image",
    # Ring signatures
    "RingSignature",
    "generate_ring_signature",
    "key_images_linked",
    "verify_ring_signature",
    # Encryption
    "EncryptedOutput",
    "decrypt_output",
    "encrypt_for_recipient",
    "verify_output_commitment",
    # Proof placeholder
    "PlaceholderProof",
    "generate_placeholder_proof",
    "verify_placeholder_proof",
]
