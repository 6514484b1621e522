"""
Vault state

All mutable accounting of one vault lives in a single VaultState value
that the ledger and the swap engine share by reference. Rollback is a
deep copy taken before an operation and restored in place on failure.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Dict, Tuple

from ..constants import DEFAULT_SWAP_FEE_RATE, FIRST_POSITION_ID
from ..crypto.address import same_address
from ..exceptions import InvalidAssetPair, PositionNotFound


# ---------------------------------------------------------------------------
# Positions
# ---------------------------------------------------------------------------

@dataclass
class Position:
    """Ledger entry for one open position."""
    position_id: int
    amount0: int
    amount1: int
    fees_claimed0: int = 0
    fees_claimed1: int = 0
    entry_fee_growth0: int = 0
    entry_fee_growth1: int = 0

    def amount(self, index: int) -> int:
        return self.amount1 if index else self.amount0

    def entry_fee_growth(self, index: int) -> int:
        return self.entry_fee_growth1 if index else self.entry_fee_growth0


@dataclass(frozen=True)
class PositionView:
    """Read-only projection of a position, including fees not yet collected."""
    position_id: int
    owner: str
    amount0: int
    amount1: int
    fees_claimed0: int
    fees_claimed1: int
    entry_fee_growth0: int
    entry_fee_growth1: int
    unclaimed_fees0: int
    unclaimed_fees1: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "positionId": self.position_id,
            "owner": self.owner,
            "amount0": self.amount0,
            "amount1": self.amount1,
            "feesClaimed0": self.fees_claimed0,
            "feesClaimed1": self.fees_claimed1,
            "entryFeeGrowthGlobal0": self.entry_fee_growth0,
            "entryFeeGrowthGlobal1": self.entry_fee_growth1,
            "unclaimedFees0": self.unclaimed_fees0,
            "unclaimedFees1": self.unclaimed_fees1,
        }


# ---------------------------------------------------------------------------
# Vault state
# ---------------------------------------------------------------------------

@dataclass
class VaultState:
    """Reserves, fee-growth counters and the position table of one vault."""
    token0: str
    token1: str
    total_amount0: int = 0
    total_amount1: int = 0
    fee_growth_global0: int = 0
    fee_growth_global1: int = 0
    swap_fee_rate: int = DEFAULT_SWAP_FEE_RATE
    next_position_id: int = FIRST_POSITION_ID
    positions: Dict[int, Position] = field(default_factory=dict)

    # -- asset indexing -----------------------------------------------------

    def asset_index(self, asset: str) -> int:
        """0 for token0, 1 for token1."""
        if same_address(asset, self.token0):
            return 0
        if same_address(asset, self.token1):
            return 1
        raise InvalidAssetPair(f"Asset {asset} is not part of this vault")

    def token(self, index: int) -> str:
        return self.token1 if index else self.token0

    def reserve(self, index: int) -> int:
        return self.total_amount1 if index else self.total_amount0

    def set_reserve(self, index: int, value: int) -> None:
        if index:
            self.total_amount1 = value
        else:
            self.total_amount0 = value

    def fee_growth(self, index: int) -> int:
        return self.fee_growth_global1 if index else self.fee_growth_global0

    def set_fee_growth(self, index: int, value: int) -> None:
        if index:
            self.fee_growth_global1 = value
        else:
            self.fee_growth_global0 = value

    @property
    def reserves(self) -> Tuple[int, int]:
        return self.total_amount0, self.total_amount1

    # -- positions ----------------------------------------------------------

    def position(self, position_id: int) -> Position:
        try:
            return self.positions[position_id]
        except KeyError:
            raise PositionNotFound(position_id) from None

    def allocate_position_id(self) -> int:
        position_id = self.next_position_id
        self.next_position_id += 1
        return position_id

    # -- rollback -----------------------------------------------------------

    def snapshot(self) -> "VaultState":
        return copy.deepcopy(self)

    def restore(self, snapshot: "VaultState") -> None:
        """Overwrite this state in place with *snapshot*."""
        self.__dict__.update(copy.deepcopy(snapshot).__dict__)
