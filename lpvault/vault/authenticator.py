"""
Order authentication.

Binds an order's economic terms to the identity that submits it: the
signature must recover to the trader executing the swap, so a signature
intercepted by anyone else is useless to them.
"""

import time
from typing import Callable, Optional

from ..constants import SIGNATURE_LENGTH
from ..crypto.address import same_address
from ..crypto.keys import Signature
from ..crypto.signing import recover_public_key
from ..exceptions import MalformedSignature, OrderExpired
from ..logger import get_logger
from .interfaces import SignatureVerifier
from .order import Order

logger = get_logger(__name__)

_ACCEPTED_RECOVERY_IDS = frozenset((0, 1, 27, 28))


class EcdsaSignatureVerifier:
    """secp256k1 signer recovery backed by eth-keys."""

    def recover(self, message_hash: bytes, signature: bytes) -> str:
        return recover_public_key(message_hash, Signature.from_bytes(signature)).to_address()


def check_signature_encoding(signature: bytes) -> None:
    """
    Reject anything that is not ``r(32) | s(32) | v(1)`` with v in {0, 1, 27, 28}.

    Raises:
        MalformedSignature
    """
    if not isinstance(signature, (bytes, bytearray)):
        raise MalformedSignature(f"Signature must be bytes, got {type(signature).__name__}")
    if len(signature) != SIGNATURE_LENGTH:
        raise MalformedSignature(
            f"Signature must be {SIGNATURE_LENGTH} bytes, got {len(signature)}"
        )
    if signature[64] not in _ACCEPTED_RECOVERY_IDS:
        raise MalformedSignature(f"Invalid recovery id: {signature[64]}")


class OrderAuthenticator:
    """
    Verifies order signatures and deadlines.

    Args:
        verifier: signer recovery capability (defaults to eth-keys ECDSA)
        clock: returns the current unix time in seconds
        clock_skew: seconds an order is still honoured past valid_to
    """

    def __init__(
        self,
        verifier: Optional[SignatureVerifier] = None,
        clock: Optional[Callable[[], float]] = None,
        clock_skew: int = 0,
    ):
        self.verifier = verifier or EcdsaSignatureVerifier()
        self._clock = clock or time.time
        self.clock_skew = clock_skew

    def now(self) -> int:
        return int(self._clock())

    def check_deadline(self, valid_to: int) -> None:
        """
        Raises:
            OrderExpired: current time is past valid_to (plus skew)
        """
        now = self.now()
        if now > valid_to + self.clock_skew:
            raise OrderExpired(valid_to, now)

    def authenticate(self, order: Order, signature: bytes, expected_signer: str) -> bool:
        """
        Check that *signature* over *order* was produced by *expected_signer*.

        Returns:
            False when the recovered signer is someone else

        Raises:
            MalformedSignature: wrong length or recovery id
            RecoveryFailed: no public key can be recovered
        """
        check_signature_encoding(signature)
        signer = self.verifier.recover(order.signing_digest(), bytes(signature))
        if not same_address(signer, expected_signer):
            logger.warning(
                "Order %s signed by %s, expected %s",
                order.hash().hex()[:16], signer, expected_signer,
            )
            return False
        return True
