#!/usr/bin/env python3
"""
Example 01: Private transfer demo.

Mints a pool of coins, builds an anonymous transfer through the async
harness, verifies it, lets the recipient decrypt the output, and shows the
policy layer refusing a ring that is too small.

Usage:
    python examples/01_private_transfer.py
"""

import asyncio
import logging
import secrets

from fpp import CoinPool, build_transaction, build_transaction_async, mint_coin, verify_transaction
from fpp.crypto import SECP256K1_N, decrypt_output, derive_public_key, encode_point
from fpp.errors import InsufficientAnonymityError
from fpp.tools import PrivacyConfig

logging.basicConfig(level=logging.INFO, format="%(name)s %(levelname)s %(message)s")

sender_key = secrets.randbelow(SECP256K1_N - 1) + 1
recipient_key = secrets.randbelow(SECP256K1_N - 1) + 1
recipient_pub = encode_point(derive_public_key(recipient_key))

pool = CoinPool(mint_coin(owner="pool") for _ in range(19))
coin = mint_coin(owner="sender")
pool.add(coin)

print("=== Private Transfer Demo ===")
print()

# Test 1: Build and verify
print("[Test 1] Build a transfer of one coin (simulated 0.2s proving delay)")
config = PrivacyConfig(simulated_latency_seconds=0.2)
tx = asyncio.run(build_transaction_async([coin], pool, recipient_pub, sender_key, config=config))
result = verify_transaction(tx)
print(f"  tx_hash:   {tx.tx_hash}")
print(f"  ring size: {tx.privacy_metrics.ring_size}  score: {tx.privacy_metrics.anonymity_score:.0f}")
print(f"  valid:     {result.is_valid}")

# Test 2: Recipient recovers the output
print()
print("[Test 2] Recipient decrypts the output secret")
secret = decrypt_output(tx.encrypted_outputs[0], recipient_key)
received = mint_coin(owner="recipient", secret=secret)
print(f"  commitment matches: {received.commitment == tx.output_commitments[0]}")

# Test 3: Ledger marks the input spent
print()
print("[Test 3] Mark the input spent")
spent = pool.mark_spent(coin.id)
print(f"  nullifier recorded: {spent.nullifier == tx.input_nullifiers[0]}")

# Test 4: Sparse pool (blocked)
print()
print("[Test 4] Try to transfer with only two decoys available")
try:
    build_transaction([mint_coin()], [mint_coin(), mint_coin()], recipient_pub, sender_key)
    print("  -> PASSED")
except InsufficientAnonymityError as e:
    print(f"  -> BLOCKED: {e}")
