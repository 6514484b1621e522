"""
LP Vault Crypto Address Module

Ethereum-style 20-byte addresses with EIP-55 checksum.
"""

from eth_utils import is_address, is_checksum_address, to_checksum_address

from .hashing import keccak256

ADDRESS_PREFIX = "0x"
ADDRESS_LENGTH = 40  # 20 bytes = 40 hex chars
ZERO_ADDRESS = "0x" + "0" * ADDRESS_LENGTH


def public_key_to_address(public_key) -> str:
    """
    Derive address from public key: last 20 bytes of keccak256(pubkey).

    Args:
        public_key: PublicKey instance or 64/65-byte uncompressed key

    Returns:
        Checksum address
    """
    if hasattr(public_key, 'to_bytes'):
        pub_bytes = public_key.to_bytes()
    else:
        pub_bytes = public_key

    # Remove 04 prefix if present (uncompressed secp256k1)
    if len(pub_bytes) == 65 and pub_bytes[0] == 0x04:
        pub_bytes = pub_bytes[1:]

    if len(pub_bytes) != 64:
        raise ValueError(f"secp256k1 public key must be 64 bytes, got {len(pub_bytes)}")

    return to_checksum_address("0x" + keccak256(pub_bytes)[-20:].hex())


def is_valid_address(address) -> bool:
    """
    Check if address is a well-formed 0x-prefixed hex address.

    Mixed-case input must carry a valid EIP-55 checksum.
    """
    if not isinstance(address, str) or not address.startswith(ADDRESS_PREFIX):
        return False
    digits = address[len(ADDRESS_PREFIX):]
    if digits != digits.lower() and digits != digits.upper():
        return is_checksum_address(address)
    return is_address(address)


def normalize_address(address: str) -> str:
    """
    Normalize address to its checksum form.

    Raises:
        ValueError: if address is not valid
    """
    if not is_valid_address(address):
        raise ValueError(f"Invalid address: {address!r}")
    return to_checksum_address(address)


def same_address(a: str, b: str) -> bool:
    """Case-insensitive address comparison."""
    return a.lower() == b.lower()
