"""
LP Vault Hashing

keccak256 is the only digest used by the vault: order hashes, the
personal-sign envelope, vault addresses and the order wire constants.
"""

from typing import Union

from Crypto.Hash import keccak as _keccak


def keccak256(data: Union[bytes, str]) -> bytes:
    """
    Compute Keccak-256 hash (Ethereum standard).

    Args:
        data: Input bytes or 0x-prefixed hex string

    Returns:
        32-byte hash
    """
    if isinstance(data, str):
        if data.startswith('0x') or data.startswith('0X'):
            data = bytes.fromhex(data[2:])
        else:
            data = bytes.fromhex(data)

    k = _keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


def keccak256_hex(data: Union[bytes, str]) -> str:
    """Keccak-256 as a 0x-prefixed hex string."""
    return '0x' + keccak256(data).hex()
