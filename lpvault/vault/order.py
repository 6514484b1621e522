"""
Signed sell orders.

An order is ABI-encoded with a fixed field order and width, hashed with
keccak256 and wrapped in the personal-sign envelope before signing.
Changing any field's position or type changes every order hash and
invalidates all outstanding signatures.
"""

from __future__ import annotations

from dataclasses import dataclass

from eth_abi import encode

from ..constants import UINT32_MAX
from ..crypto.address import normalize_address
from ..crypto.hashing import keccak256
from ..crypto.keys import PrivateKey
from ..crypto.signing import personal_message_hash, sign_message_hash
from ..exceptions import ArithmeticOverflow
from .math import require_uint256


# ---------------------------------------------------------------------------
# Wire constants
# ---------------------------------------------------------------------------

ORDER_TYPE_HASH = keccak256(
    b"Order("
    b"address sellToken,"
    b"address buyToken,"
    b"address receiver,"
    b"uint256 sellAmount,"
    b"uint256 buyAmount,"
    b"uint32 validTo,"
    b"bytes32 appData,"
    b"uint256 feeAmount,"
    b"string kind,"
    b"bool partiallyFillable,"
    b"string sellTokenBalance,"
    b"string buyTokenBalance"
    b")"
)
KIND_SELL = keccak256(b"sell")
BALANCE_ERC20 = keccak256(b"erc20")
ZERO_APP_DATA = bytes(32)

ORDER_ABI_TYPES = (
    "bytes32",  # type hash
    "address",  # sellToken
    "address",  # buyToken
    "address",  # receiver
    "uint256",  # sellAmount
    "uint256",  # buyAmount
    "uint32",   # validTo
    "bytes32",  # appData
    "uint256",  # feeAmount
    "bytes32",  # kind
    "bool",     # partiallyFillable
    "bytes32",  # sellTokenBalance
    "bytes32",  # buyTokenBalance
)


@dataclass(frozen=True)
class Order:
    """Canonical sell order. Fields are listed in wire order."""
    sell_token: str
    buy_token: str
    receiver: str
    sell_amount: int
    buy_amount: int
    valid_to: int
    app_data: bytes = ZERO_APP_DATA
    fee_amount: int = 0
    kind: bytes = KIND_SELL
    partially_fillable: bool = False
    sell_token_balance: bytes = BALANCE_ERC20
    buy_token_balance: bytes = BALANCE_ERC20

    @classmethod
    def sell(
        cls,
        sell_token: str,
        buy_token: str,
        receiver: str,
        sell_amount: int,
        min_buy_amount: int,
        valid_to: int,
    ) -> "Order":
        """
        Build the canonical order a swap is authorized against.

        Addresses are checksummed and the protocol metadata fields are
        pinned to their fixed values.
        """
        require_uint256(sell_amount, "sell_amount")
        require_uint256(min_buy_amount, "min_buy_amount")
        if not isinstance(valid_to, int) or not 0 <= valid_to <= UINT32_MAX:
            raise ArithmeticOverflow(f"valid_to out of uint32 range: {valid_to}")
        return cls(
            sell_token=normalize_address(sell_token),
            buy_token=normalize_address(buy_token),
            receiver=normalize_address(receiver),
            sell_amount=sell_amount,
            buy_amount=min_buy_amount,
            valid_to=valid_to,
        )

    def encode(self) -> bytes:
        return encode(
            list(ORDER_ABI_TYPES),
            [
                ORDER_TYPE_HASH,
                self.sell_token,
                self.buy_token,
                self.receiver,
                self.sell_amount,
                self.buy_amount,
                self.valid_to,
                self.app_data,
                self.fee_amount,
                self.kind,
                self.partially_fillable,
                self.sell_token_balance,
                self.buy_token_balance,
            ],
        )

    def hash(self) -> bytes:
        return keccak256(self.encode())

    def signing_digest(self) -> bytes:
        """Digest the signer actually signs: personal-sign envelope over hash()."""
        return personal_message_hash(self.hash())


def sign_order(order: Order, private_key: PrivateKey) -> bytes:
    """Produce the 65-byte authorization for *order*."""
    return sign_message_hash(private_key, order.signing_digest()).to_bytes()
