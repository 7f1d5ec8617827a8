"""
Recipient output encryption for newly minted coins.

Each output coin's secret is encrypted so that only the holder of the
recipient's private scalar can recover (and later spend) it.

Construction:
    e ← random,  E = e·G                       (ephemeral key, published)
    S = e·P_rcpt = x_rcpt·E                    (ECDH shared point)
    k = Blake2b256("fpp.ecdh.v1" ‖ S ‖ E)
    keystream = Blake2b256(k ‖ 0) ‖ Blake2b256(k ‖ 1) ‖ ...
    ciphertext = secret ⊕ keystream
    mac = Blake2b256_k(ciphertext ‖ output_commitment)   (keyed Blake2b)

The output commitment is the coin's Pedersen commitment keyed by the secret,
so a successful decryption can be checked against it.
"""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass

from fpp.crypto.curve import (
    G,
    SECP256K1_N,
    CurvePoint,
    decode_point,
    encode_point,
    mod_n,
)
from fpp.crypto.hashing import hash_bytes
from fpp.crypto.pedersen import COIN_DENOMINATION, commitment_from_secret
from fpp.crypto.randomness import random_scalar
from fpp.errors import DecryptionError, InvalidPointError, PreconditionError

ECDH_DOMAIN = "fpp.ecdh.v1"
KEYSTREAM_DOMAIN = "fpp.keystream.v1"


@dataclass(frozen=True)
class EncryptedOutput:
    """
    An encrypted output coin secret.

    Attributes:
        encrypted_secret: Hex ciphertext of the coin secret.
        ephemeral_public_key: Compressed hex of E = e·G.
        output_commitment: Compressed hex of the output coin's commitment.
        mac: Hex keyed-Blake2b tag over (ciphertext, output_commitment).
    """
    encrypted_secret: str
    ephemeral_public_key: str
    output_commitment: str
    mac: str


def _shared_key(shared_point: CurvePoint, ephemeral: CurvePoint) -> bytes:
    if shared_point.is_infinity:
        raise InvalidPointError("ECDH produced the point at infinity")
    return hash_bytes(ECDH_DOMAIN, shared_point, ephemeral)


def _keystream(key: bytes, length: int) -> bytes:
    blocks = []
    counter = 0
    while sum(len(b) for b in blocks) < length:
        blocks.append(hash_bytes(KEYSTREAM_DOMAIN, key, counter))
        counter += 1
    return b"".join(blocks)[:length]


def _xor(data: bytes, stream: bytes) -> bytes:
    return bytes(a ^ b for a, b in zip(data, stream))


def _mac(key: bytes, ciphertext: bytes, output_commitment: str) -> str:
    tag = hashlib.blake2b(key=key, digest_size=32)
    tag.update(ciphertext)
    tag.update(bytes.fromhex(output_commitment))
    return tag.hexdigest()


def encrypt_for_recipient(
    secret: str,
    recipient_public_key: CurvePoint | str,
    value: int = COIN_DENOMINATION,
) -> EncryptedOutput:
    """
    Encrypt a coin secret for a recipient.

    Args:
        secret: The output coin's 32-byte secret (hex string).
        recipient_public_key: The recipient's public point (or its hex).
        value: The coin's denomination, committed in output_commitment.

    Returns:
        EncryptedOutput ready to attach to a transaction.

    Raises:
        PreconditionError: If the secret is empty or not hex.
        InvalidPointError: If the recipient key is not a curve point.
    """
    try:
        plaintext = bytes.fromhex(secret)
    except (TypeError, ValueError) as err:
        raise PreconditionError("secret must be a hex string") from err
    if not plaintext:
        raise PreconditionError("secret must be non-empty")

    recipient = decode_point(recipient_public_key) if isinstance(recipient_public_key, str) else recipient_public_key
    if recipient.is_infinity or not recipient.is_on_curve():
        raise InvalidPointError("Recipient public key is not a valid curve point")

    e = random_scalar(SECP256K1_N)
    ephemeral = e * G
    key = _shared_key(e * recipient, ephemeral)

    ciphertext = _xor(plaintext, _keystream(key, len(plaintext)))
    output_commitment = commitment_from_secret(secret, value).commitment_hex

    return EncryptedOutput(
        encrypted_secret=ciphertext.hex(),
        ephemeral_public_key=encode_point(ephemeral),
        output_commitment=output_commitment,
        mac=_mac(key, ciphertext, output_commitment),
    )


def decrypt_output(output: EncryptedOutput, recipient_private_key: int) -> str:
    """
    Recover the coin secret from an EncryptedOutput.

    Args:
        output: The encrypted output.
        recipient_private_key: The recipient's private scalar.

    Returns:
        The secret as a hex string.

    Raises:
        DecryptionError: If the MAC does not verify under this key.
        InvalidPointError: If the ephemeral key is malformed.
    """
    x = mod_n(recipient_private_key)
    if x == 0:
        raise PreconditionError("recipient private key must be non-zero mod n")

    ephemeral = decode_point(output.ephemeral_public_key)
    key = _shared_key(x * ephemeral, ephemeral)

    try:
        ciphertext = bytes.fromhex(output.encrypted_secret)
        expected_mac = _mac(key, ciphertext, output.output_commitment)
    except ValueError as err:
        raise DecryptionError("Encrypted output is not valid hex") from err

    if not hmac.compare_digest(expected_mac, output.mac.lower()):
        raise DecryptionError("MAC verification failed: wrong key or tampered output")

    return _xor(ciphertext, _keystream(key, len(ciphertext))).hex()


def verify_output_commitment(output: EncryptedOutput, secret: str, value: int = COIN_DENOMINATION) -> bool:
    """Check that a decrypted secret opens the output's commitment."""
    try:
        return commitment_from_secret(secret, value).commitment_hex == output.output_commitment.lower()
    except PreconditionError:
        return False
