"""
Fee-growth accumulator.

Each asset has a global counter of fees earned per unit of reserve, scaled
by FEE_GROWTH_SCALE. A position snapshots both counters when it is opened
and every time it settles; what it is owed is its principal times the
growth since that snapshot. Settlement is O(1) per position no matter how
many swaps happened in between.
"""

from typing import Tuple

from ..constants import FEE_GROWTH_SCALE
from ..exceptions import EmptyReserve
from ..logger import get_logger
from .math import checked_add, checked_sub, mul_div
from .state import Position, VaultState

logger = get_logger(__name__)


def accrue_fee(state: VaultState, asset_index: int, fee_amount: int, reserve_before: int) -> int:
    """
    Credit *fee_amount* of one asset to every unit of its reserve.

    *reserve_before* must be the sell-side reserve read before the swap
    updates it.

    Returns:
        The increase applied to the global counter.

    Raises:
        EmptyReserve: reserve_before is zero
        ArithmeticOverflow: counter would leave the uint256 domain
    """
    if reserve_before == 0:
        raise EmptyReserve(f"Cannot accrue fees against an empty reserve of token{asset_index}")

    delta = mul_div(fee_amount, FEE_GROWTH_SCALE, reserve_before)
    state.set_fee_growth(asset_index, checked_add(state.fee_growth(asset_index), delta))

    logger.debug(
        "Fee accrued on token%d: fee=%d reserve=%d growth+=%d",
        asset_index, fee_amount, reserve_before, delta,
    )
    return delta


def _unclaimed(position: Position, state: VaultState, index: int) -> int:
    growth = state.fee_growth(index)
    entry = position.entry_fee_growth(index)
    if growth <= entry:
        return 0
    return mul_div(position.amount(index), checked_sub(growth, entry), FEE_GROWTH_SCALE)


def unclaimed_fees(position: Position, state: VaultState) -> Tuple[int, int]:
    """Fees owed to *position* since its last settlement. Side-effect free."""
    return _unclaimed(position, state, 0), _unclaimed(position, state, 1)


def settle(position: Position, state: VaultState) -> Tuple[int, int]:
    """
    Settle *position* against the current global counters.

    Bumps the claimed totals and moves both entry snapshots to the current
    counters in one step. The caller owns the payout transfers and rolls
    the state back if they fail.

    Returns:
        (paid0, paid1)
    """
    paid0, paid1 = unclaimed_fees(position, state)

    fees_claimed0 = checked_add(position.fees_claimed0, paid0)
    fees_claimed1 = checked_add(position.fees_claimed1, paid1)

    position.fees_claimed0 = fees_claimed0
    position.fees_claimed1 = fees_claimed1
    position.entry_fee_growth0 = state.fee_growth_global0
    position.entry_fee_growth1 = state.fee_growth_global1
    return paid0, paid1
