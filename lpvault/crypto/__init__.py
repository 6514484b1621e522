"""
LP Vault Crypto Module

Cryptographic primitives for order authorization:
- secp256k1 keys and recoverable signatures
- Keccak-256 hashing
- Address derivation
"""

from .keys import PrivateKey, PublicKey, Signature, generate_keypair
from .signing import (
    sign_message,
    sign_message_hash,
    personal_message_hash,
    recover_public_key,
    recover_message_signer,
    ecrecover,
)
from .hashing import keccak256, keccak256_hex
from .address import (
    ZERO_ADDRESS,
    public_key_to_address,
    is_valid_address,
    normalize_address,
    same_address,
)

__all__ = [
    # Keys
    "PrivateKey",
    "PublicKey",
    "Signature",
    "generate_keypair",
    # Signing
    "sign_message",
    "sign_message_hash",
    "personal_message_hash",
    "recover_public_key",
    "recover_message_signer",
    "ecrecover",
    # Hashing
    "keccak256",
    "keccak256_hex",
    # Address
    "ZERO_ADDRESS",
    "public_key_to_address",
    "is_valid_address",
    "normalize_address",
    "same_address",
]
