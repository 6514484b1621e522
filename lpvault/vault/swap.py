"""
Constant-product swap engine.

Pricing takes the fee out of the input before applying x·y = k:

    fee  = sell · rate / 10000
    net  = sell − fee
    buy  = net · R_buy / (R_sell + net)

The full sell amount (fee included) is added to the sell reserve, and the
fee is credited to the sell asset's fee-growth counter against the reserve
as it stood before the swap.
"""

from dataclasses import dataclass
from typing import Tuple

from ..constants import BPS_DENOMINATOR
from ..crypto.address import same_address
from ..exceptions import (
    EmptyReserve,
    InvalidAmount,
    InvalidAssetPair,
    InvalidAuthorization,
    InvariantViolation,
    SlippageExceeded,
)
from ..logger import get_logger
from .authenticator import OrderAuthenticator
from .events import EventLog, SwapExecuted
from .fees import accrue_fee
from .interfaces import AssetTransfer
from .math import checked_add, mul_div, require_uint256
from .order import Order
from .state import VaultState

logger = get_logger(__name__)


@dataclass(frozen=True)
class SwapResult:
    buy_amount: int
    fee_amount: int


# ---------------------------------------------------------------------------
# Pricing
# ---------------------------------------------------------------------------

def calculate_fee(amount: int, fee_rate: int) -> int:
    """Fee charged on *amount* at *fee_rate* basis points, rounded down."""
    return mul_div(amount, fee_rate, BPS_DENOMINATOR)


def quote_exact_in(
    sell_amount: int,
    sell_reserve: int,
    buy_reserve: int,
    fee_rate: int,
) -> Tuple[int, int]:
    """
    Price an exact-input sell against the given reserves.

    Returns:
        (buy_amount, fee_amount)

    Raises:
        EmptyReserve: either reserve is zero
    """
    if sell_reserve == 0 or buy_reserve == 0:
        raise EmptyReserve("Cannot price a swap against an empty reserve")

    fee_amount = calculate_fee(sell_amount, fee_rate)
    net_sell = sell_amount - fee_amount
    buy_amount = mul_div(net_sell, buy_reserve, checked_add(sell_reserve, net_sell))
    return buy_amount, fee_amount


def _check_amount(amount: int, name: str, positive: bool = False) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
        raise InvalidAmount(f"{name} must be a non-negative integer, got {amount!r}")
    if positive and amount == 0:
        raise InvalidAmount(f"{name} must be positive")
    require_uint256(amount, name)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class SwapEngine:
    """Executes signed sell orders against one vault's reserves."""

    def __init__(
        self,
        state: VaultState,
        assets: AssetTransfer,
        authenticator: OrderAuthenticator,
        events: EventLog,
    ):
        self.state = state
        self.assets = assets
        self.authenticator = authenticator
        self.events = events

    def _pair_indices(self, sell_asset: str, buy_asset: str) -> Tuple[int, int]:
        if same_address(sell_asset, buy_asset):
            raise InvalidAssetPair("Cannot swap an asset for itself")
        return self.state.asset_index(sell_asset), self.state.asset_index(buy_asset)

    def quote(self, sell_asset: str, buy_asset: str, sell_amount: int) -> SwapResult:
        """Preview a swap at the current reserves. No state is touched."""
        sell_index, buy_index = self._pair_indices(sell_asset, buy_asset)
        _check_amount(sell_amount, "sell_amount", positive=True)
        buy_amount, fee_amount = quote_exact_in(
            sell_amount,
            self.state.reserve(sell_index),
            self.state.reserve(buy_index),
            self.state.swap_fee_rate,
        )
        return SwapResult(buy_amount, fee_amount)

    def calculate_fee(self, amount: int) -> int:
        return calculate_fee(amount, self.state.swap_fee_rate)

    def swap(
        self,
        sell_asset: str,
        buy_asset: str,
        sell_amount: int,
        min_buy_amount: int,
        valid_to: int,
        authorization: bytes,
        trader: str,
    ) -> SwapResult:
        """
        Execute a signed sell order for *trader*.

        Raises:
            InvalidAssetPair, InvalidAmount, OrderExpired,
            InvalidAuthorization, EmptyReserve, SlippageExceeded,
            TransferError
        """
        state = self.state
        sell_index, buy_index = self._pair_indices(sell_asset, buy_asset)
        _check_amount(sell_amount, "sell_amount", positive=True)
        _check_amount(min_buy_amount, "min_buy_amount")

        # 1. authenticate
        self.authenticator.check_deadline(valid_to)
        order = Order.sell(
            state.token(sell_index),
            state.token(buy_index),
            trader,
            sell_amount,
            min_buy_amount,
            valid_to,
        )
        if not self.authenticator.authenticate(order, authorization, trader):
            raise InvalidAuthorization(f"Order was not signed by {trader}")

        # 2. price
        sell_reserve = state.reserve(sell_index)
        buy_reserve = state.reserve(buy_index)
        buy_amount, fee_amount = quote_exact_in(
            sell_amount, sell_reserve, buy_reserve, state.swap_fee_rate
        )
        if buy_amount < min_buy_amount:
            raise SlippageExceeded(buy_amount, min_buy_amount)

        # 3. settle
        accrue_fee(state, sell_index, fee_amount, sell_reserve)
        if buy_amount > buy_reserve:
            raise InvariantViolation(
                f"Swap output {buy_amount} exceeds reserve {buy_reserve}"
            )
        state.set_reserve(sell_index, checked_add(sell_reserve, sell_amount))
        state.set_reserve(buy_index, buy_reserve - buy_amount)

        # 4. transfer: pull before push
        self.assets.transfer_in(state.token(sell_index), trader, sell_amount)
        self.assets.transfer_out(state.token(buy_index), trader, buy_amount)

        self.events.emit(SwapExecuted(
            trader,
            state.token(sell_index),
            state.token(buy_index),
            sell_amount,
            buy_amount,
            fee_amount,
        ))
        logger.info(
            "Swap by %s: %d token%d -> %d token%d (fee %d)",
            trader, sell_amount, sell_index, buy_amount, buy_index, fee_amount,
        )
        return SwapResult(buy_amount, fee_amount)
