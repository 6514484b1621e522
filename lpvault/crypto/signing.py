"""
LP Vault Crypto Signing Module

Message signing and signer recovery over secp256k1.
"""

from .keys import PrivateKey, PublicKey, Signature
from .hashing import keccak256
from ..constants import PERSONAL_SIGN_PREFIX


def personal_message_hash(msg_hash: bytes) -> bytes:
    """
    Apply the personal_sign prefix to a 32-byte hash and re-hash it.

    Args:
        msg_hash: 32-byte hash

    Returns:
        keccak256("\\x19Ethereum Signed Message:\\n32" || msg_hash)
    """
    if len(msg_hash) != 32:
        raise ValueError(f"Message hash must be 32 bytes, got {len(msg_hash)}")
    return keccak256(PERSONAL_SIGN_PREFIX + msg_hash)


def sign_message_hash(private_key: PrivateKey, msg_hash: bytes) -> Signature:
    """
    Sign a 32-byte message hash.

    Args:
        private_key: PrivateKey to sign with
        msg_hash: 32-byte hash to sign

    Returns:
        Signature
    """
    return private_key.sign_msg_hash(msg_hash)


def sign_message(private_key: PrivateKey, msg_hash: bytes) -> Signature:
    """
    Sign a 32-byte hash personal_sign style.

    Args:
        private_key: PrivateKey to sign with
        msg_hash: 32-byte hash the signer is authorizing

    Returns:
        Signature over the prefixed digest
    """
    return private_key.sign_msg_hash(personal_message_hash(msg_hash))


def recover_public_key(msg_hash: bytes, signature: Signature) -> PublicKey:
    """
    Recover public key from signature.

    Args:
        msg_hash: 32-byte message hash that was signed
        signature: Signature to recover from

    Returns:
        Recovered PublicKey
    """
    return PublicKey.recover_from_msg_hash(msg_hash, signature)


def recover_message_signer(msg_hash: bytes, signature: Signature) -> str:
    """
    Recover the signer address of a personal_sign signature.

    Args:
        msg_hash: 32-byte hash passed to sign_message()
        signature: Signature from sign_message()

    Returns:
        Recovered checksum address
    """
    return recover_public_key(personal_message_hash(msg_hash), signature).to_address()


def ecrecover(msg_hash: bytes, v: int, r: int, s: int) -> str:
    """
    Recover signer address from signature components.

    This mirrors the Solidity ecrecover() function.

    Args:
        msg_hash: 32-byte message hash
        v: Recovery parameter (0, 1, 27 or 28)
        r: R component
        s: S component

    Returns:
        Recovered address (0x prefixed)
    """
    signature = Signature.from_vrs(v, r, s)
    public_key = recover_public_key(msg_hash, signature)
    return public_key.to_address()
