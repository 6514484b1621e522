"""
Position ledger.

Owns the position lifecycle: open → collect_fees* → close. Assets are
always pulled before the ledger entry is written, and fees are always
settled before principal is released.
"""

from typing import List, Tuple

from ..exceptions import InvalidDeposit, PositionNotFound, Unauthorized
from ..logger import get_logger
from .events import EventLog, FeesCollected, PositionClosed, PositionOpened
from .fees import settle, unclaimed_fees
from .interfaces import AssetTransfer, AuthorizationProvider, PositionToken
from .math import checked_add, checked_sub, require_uint256
from .state import Position, PositionView, VaultState

logger = get_logger(__name__)


class PositionLedger:
    """
    Position table of one vault.

    The ledger mutates *state* directly; the vault wraps every call in its
    lock and rollback scope.
    """

    def __init__(
        self,
        state: VaultState,
        assets: AssetTransfer,
        position_token: PositionToken,
        authorization: AuthorizationProvider,
        events: EventLog,
    ):
        self.state = state
        self.assets = assets
        self.position_token = position_token
        self.authorization = authorization
        self.events = events

    # -- mutations ----------------------------------------------------------

    def open(self, amount0: int, amount1: int, depositor: str) -> int:
        """
        Deposit liquidity and mint a new position to *depositor*.

        Returns:
            The new position id.

        Raises:
            InvalidDeposit: both amounts zero, or an amount is not a uint256
            TransferError: a pull failed
        """
        for name, amount in (("amount0", amount0), ("amount1", amount1)):
            if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
                raise InvalidDeposit(f"{name} must be a non-negative integer, got {amount!r}")
            require_uint256(amount, name)
        if amount0 == 0 and amount1 == 0:
            raise InvalidDeposit("Deposit must include at least one non-zero amount")

        state = self.state
        total0 = checked_add(state.total_amount0, amount0)
        total1 = checked_add(state.total_amount1, amount1)

        self.assets.transfer_in(state.token0, depositor, amount0)
        self.assets.transfer_in(state.token1, depositor, amount1)

        position_id = state.allocate_position_id()
        state.positions[position_id] = Position(
            position_id=position_id,
            amount0=amount0,
            amount1=amount1,
            entry_fee_growth0=state.fee_growth_global0,
            entry_fee_growth1=state.fee_growth_global1,
        )
        state.total_amount0 = total0
        state.total_amount1 = total1

        self.position_token.mint(depositor, position_id)
        self.events.emit(PositionOpened(depositor, position_id, amount0, amount1))

        logger.info(
            "Position #%d opened by %s: %d token0, %d token1",
            position_id, depositor, amount0, amount1,
        )
        return position_id

    def collect_fees(self, position_id: int, caller: str) -> Tuple[int, int]:
        """
        Pay out the fees a position earned since its last settlement.

        Returns:
            (paid0, paid1)
        """
        position = self._authorized_position(position_id, caller)
        paid0, paid1 = settle(position, self.state)

        self.assets.transfer_out(self.state.token0, caller, paid0)
        self.assets.transfer_out(self.state.token1, caller, paid1)
        self.events.emit(FeesCollected(caller, position_id, paid0, paid1))

        logger.info("Fees collected from #%d by %s: %d, %d", position_id, caller, paid0, paid1)
        return paid0, paid1

    def close(self, position_id: int, caller: str) -> Tuple[int, int]:
        """
        Settle fees, release principal and burn the position.

        Returns:
            Total paid out per asset (principal + settled fees).

        Raises:
            ArithmeticOverflow: a reserve has been drained by swaps below
                the position's recorded principal
        """
        position = self._authorized_position(position_id, caller)
        if position.amount0 == 0 and position.amount1 == 0:
            raise InvalidDeposit(f"Position #{position_id} holds no principal")

        state = self.state
        fees0, fees1 = settle(position, state)
        total0 = checked_sub(state.total_amount0, position.amount0)
        total1 = checked_sub(state.total_amount1, position.amount1)
        payout0 = checked_add(position.amount0, fees0)
        payout1 = checked_add(position.amount1, fees1)

        state.total_amount0 = total0
        state.total_amount1 = total1
        del state.positions[position_id]
        self.position_token.burn(position_id)

        self.assets.transfer_out(state.token0, caller, payout0)
        self.assets.transfer_out(state.token1, caller, payout1)

        self.events.emit(FeesCollected(caller, position_id, fees0, fees1))
        self.events.emit(PositionClosed(caller, position_id, payout0, payout1))

        logger.info(
            "Position #%d closed by %s: %d token0, %d token1 (fees %d, %d)",
            position_id, caller, payout0, payout1, fees0, fees1,
        )
        return payout0, payout1

    # -- queries ------------------------------------------------------------

    def get(self, position_id: int) -> PositionView:
        position = self.state.position(position_id)
        unclaimed0, unclaimed1 = unclaimed_fees(position, self.state)
        return PositionView(
            position_id=position.position_id,
            owner=self.position_token.owner_of(position_id),
            amount0=position.amount0,
            amount1=position.amount1,
            fees_claimed0=position.fees_claimed0,
            fees_claimed1=position.fees_claimed1,
            entry_fee_growth0=position.entry_fee_growth0,
            entry_fee_growth1=position.entry_fee_growth1,
            unclaimed_fees0=unclaimed0,
            unclaimed_fees1=unclaimed1,
        )

    def positions_of(self, owner: str) -> List[int]:
        """Open position ids currently held by *owner*, oldest first."""
        owner = owner.lower()
        return [
            position_id
            for position_id in sorted(self.state.positions)
            if self.position_token.owner_of(position_id).lower() == owner
        ]

    # -- helpers ------------------------------------------------------------

    def _authorized_position(self, position_id: int, caller: str) -> Position:
        position = self.state.positions.get(position_id)
        if position is None:
            raise PositionNotFound(position_id)
        if not self.authorization.can_act(caller, position_id):
            logger.warning("Unauthorized access to #%d by %s", position_id, caller)
            raise Unauthorized(f"{caller} is not owner or approved for position #{position_id}")
        return position
