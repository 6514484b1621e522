"""
LP Vault Crypto Keys

secp256k1 keys and recoverable signatures for order authorization.
Wraps eth-keys; the vault only ever needs recovery, signing is kept for
clients and tests.
"""

import secrets
from typing import Tuple

from eth_keys.datatypes import PrivateKey as EthPrivateKey, PublicKey as EthPublicKey
from eth_keys.datatypes import Signature as EthSignature
from eth_keys.exceptions import BadSignature, ValidationError
from eth_utils import decode_hex

from ..constants import SIGNATURE_LENGTH
from ..exceptions import MalformedSignature, RecoveryFailed

# Accepted recovery ids before normalization: raw {0, 1} and canonical {27, 28}.
_RAW_RECOVERY_IDS = (0, 1)
_CANONICAL_RECOVERY_OFFSET = 27


class PrivateKey:
    """
    secp256k1 private key for order signing.
    """

    def __init__(self, key_bytes: bytes):
        if len(key_bytes) != 32:
            raise ValueError(f"Private key must be 32 bytes, got {len(key_bytes)}")
        try:
            self._key = EthPrivateKey(key_bytes)
        except ValidationError as e:
            raise ValueError(f"Invalid private key: {e}") from e

    @classmethod
    def from_hex(cls, hex_str: str) -> "PrivateKey":
        return cls(decode_hex(hex_str))

    @classmethod
    def from_int(cls, key_int: int) -> "PrivateKey":
        return cls(key_int.to_bytes(32, byteorder='big'))

    @classmethod
    def generate(cls) -> "PrivateKey":
        """Generate a new random private key."""
        return cls(secrets.token_bytes(32))

    @property
    def public_key(self) -> "PublicKey":
        return PublicKey(self._key.public_key)

    @property
    def address(self) -> str:
        return self.public_key.to_address()

    def to_bytes(self) -> bytes:
        return self._key.to_bytes()

    def sign_msg_hash(self, msg_hash: bytes) -> "Signature":
        """
        Sign a 32-byte message hash.

        Args:
            msg_hash: 32-byte hash to sign

        Returns:
            Signature instance
        """
        if len(msg_hash) != 32:
            raise ValueError(f"Message hash must be 32 bytes, got {len(msg_hash)}")
        return Signature(self._key.sign_msg_hash(msg_hash))

    def __repr__(self) -> str:
        return f"PrivateKey({self.address})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, PrivateKey):
            return False
        return self._key == other._key


class PublicKey:
    """
    secp256k1 public key.
    """

    def __init__(self, key: EthPublicKey):
        self._key = key

    @classmethod
    def recover_from_msg_hash(cls, msg_hash: bytes, signature: "Signature") -> "PublicKey":
        """
        Recover the public key that produced *signature* over *msg_hash*.

        Raises:
            RecoveryFailed: if the curve point cannot be recovered
        """
        try:
            recovered = signature._signature.recover_public_key_from_msg_hash(msg_hash)
        except (BadSignature, ValidationError) as e:
            raise RecoveryFailed(f"Public key recovery failed: {e}") from e
        return cls(recovered)

    def to_bytes(self) -> bytes:
        """64-byte uncompressed key (x || y)."""
        return self._key.to_bytes()

    def to_address(self) -> str:
        """Checksum address (0x prefixed)."""
        from .address import public_key_to_address
        return public_key_to_address(self)

    def __repr__(self) -> str:
        return f"PublicKey({self.to_address()})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, PublicKey):
            return False
        return self._key == other._key

    def __hash__(self) -> int:
        return hash(self._key.to_bytes())


class Signature:
    """
    Recoverable ECDSA signature, wire format ``r(32) | s(32) | v(1)``.
    """

    def __init__(self, signature: EthSignature):
        self._signature = signature

    @classmethod
    def from_vrs(cls, v: int, r: int, s: int) -> "Signature":
        """
        Create from v, r, s components.

        Args:
            v: Recovery id, raw (0 or 1) or canonical (27 or 28)
            r: R component
            s: S component

        Raises:
            MalformedSignature: if v is not one of 0, 1, 27, 28 or r/s are out of range
        """
        if v >= _CANONICAL_RECOVERY_OFFSET:
            v -= _CANONICAL_RECOVERY_OFFSET
        if v not in _RAW_RECOVERY_IDS:
            raise MalformedSignature(f"Invalid recovery id: {v}")
        try:
            eth_sig = EthSignature(vrs=(v, r, s))
        except ValidationError as e:
            raise MalformedSignature(f"Invalid signature component: {e}") from e
        return cls(eth_sig)

    @classmethod
    def from_bytes(cls, sig_bytes: bytes) -> "Signature":
        """
        Parse a 65-byte signature.

        Raises:
            MalformedSignature: on wrong length or recovery id
        """
        if not isinstance(sig_bytes, (bytes, bytearray)):
            raise MalformedSignature(f"Signature must be bytes, got {type(sig_bytes).__name__}")
        if len(sig_bytes) != SIGNATURE_LENGTH:
            raise MalformedSignature(
                f"Signature must be {SIGNATURE_LENGTH} bytes, got {len(sig_bytes)}"
            )

        r = int.from_bytes(sig_bytes[0:32], byteorder='big')
        s = int.from_bytes(sig_bytes[32:64], byteorder='big')
        v = sig_bytes[64]

        return cls.from_vrs(v, r, s)

    @classmethod
    def from_hex(cls, hex_str: str) -> "Signature":
        return cls.from_bytes(decode_hex(hex_str))

    @property
    def v(self) -> int:
        """Raw recovery id (0 or 1)."""
        return self._signature.v

    @property
    def r(self) -> int:
        return self._signature.r

    @property
    def s(self) -> int:
        return self._signature.s

    @property
    def vrs(self) -> Tuple[int, int, int]:
        return (self.v, self.r, self.s)

    def to_bytes(self) -> bytes:
        """65-byte signature with canonical v (27 or 28)."""
        r_bytes = self.r.to_bytes(32, byteorder='big')
        s_bytes = self.s.to_bytes(32, byteorder='big')
        v_byte = bytes([self.v + _CANONICAL_RECOVERY_OFFSET])
        return r_bytes + s_bytes + v_byte

    def to_hex(self, with_prefix: bool = True) -> str:
        hex_str = self.to_bytes().hex()
        return f"0x{hex_str}" if with_prefix else hex_str

    def __repr__(self) -> str:
        return f"Signature(v={self.v}, r={hex(self.r)[:10]}..., s={hex(self.s)[:10]}...)"


def generate_keypair() -> Tuple[PrivateKey, PublicKey]:
    """Generate a new keypair."""
    private_key = PrivateKey.generate()
    return private_key, private_key.public_key
