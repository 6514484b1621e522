"""
LP Vault

Public facade over one two-asset vault. Composes the position ledger and
the swap engine over a single VaultState and makes every mutating call:

  - exclusive: one re-entrancy lock covers all mutating operations, a
    nested call (for instance from a token callback) raises Reentrant
  - all-or-nothing: on any error the state snapshot is restored, external
    effects are compensated through the journal and staged events dropped
  - halting: if an external effect cannot be compensated the vault stops
    accepting mutating calls and raises InvariantViolation
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional, Tuple

from ..config import VaultConfig
from ..constants import MAX_SWAP_FEE_RATE
from ..crypto.address import normalize_address, same_address
from ..exceptions import (
    InvalidAssetPair,
    InvalidFeeRate,
    InvariantViolation,
    Reentrant,
    Unauthorized,
)
from ..logger import get_logger
from .authenticator import OrderAuthenticator
from .events import EventLog, FeeRateUpdated
from .interfaces import (
    AssetTransfer,
    AuthorizationProvider,
    PositionToken,
    PositionTokenAuthorization,
    SignatureVerifier,
)
from .journal import TransferJournal
from .ledger import PositionLedger
from .state import PositionView, VaultState
from .swap import SwapEngine, SwapResult

logger = get_logger(__name__)


class Vault:
    """
    Two-asset constant-product liquidity vault.

    Args:
        token0, token1: addresses of the fixed asset pair
        assets: custody collaborator holding the vault's balances
        position_token: ownership registry for position ids
        owner: admin allowed to change the fee rate
        fee_collector: recorded protocol fee recipient (defaults to owner)
        swap_fee_rate: initial rate in basis points (defaults to config)
        verifier: signature recovery capability (defaults to ECDSA)
        clock: unix-time source for order deadlines
        authorization: owner-or-approved capability (defaults to the position token)
        config: VaultConfig with fee bounds and clock skew
        address: the vault's own address, when deployed through a factory
    """

    def __init__(
        self,
        token0: str,
        token1: str,
        assets: AssetTransfer,
        position_token: PositionToken,
        owner: str,
        fee_collector: Optional[str] = None,
        swap_fee_rate: Optional[int] = None,
        verifier: Optional[SignatureVerifier] = None,
        clock: Optional[Callable[[], float]] = None,
        authorization: Optional[AuthorizationProvider] = None,
        config: Optional[VaultConfig] = None,
        address: Optional[str] = None,
    ):
        token0 = normalize_address(token0)
        token1 = normalize_address(token1)
        if same_address(token0, token1):
            raise InvalidAssetPair("Vault tokens must differ")

        self.config = config or VaultConfig()
        self.owner = normalize_address(owner)
        self.fee_collector = normalize_address(fee_collector) if fee_collector else self.owner
        self.address = normalize_address(address) if address else None

        rate = self.config.swap_fee_rate if swap_fee_rate is None else swap_fee_rate
        self._check_fee_rate(rate)

        self._state = VaultState(token0=token0, token1=token1, swap_fee_rate=rate)
        self._events = EventLog()
        self._journal = TransferJournal(assets, position_token)
        self._locked: bool = False   # reentrancy guard
        self._halted: bool = False

        self.authenticator = OrderAuthenticator(
            verifier=verifier,
            clock=clock,
            clock_skew=self.config.order_clock_skew,
        )
        self.ledger = PositionLedger(
            self._state,
            self._journal,
            self._journal,
            authorization or PositionTokenAuthorization(position_token),
            self._events,
        )
        self.engine = SwapEngine(self._state, self._journal, self.authenticator, self._events)

        logger.info(
            "Vault %s deployed for %s/%s, fee rate %d bps",
            self.address or "(unregistered)", token0, token1, rate,
        )

    # -- Reentrancy guard ---------------------------------------------------

    def _acquire_lock(self) -> None:
        if self._locked:
            raise Reentrant("Reentrancy detected, vault is locked")
        self._locked = True

    def _release_lock(self) -> None:
        self._locked = False

    @contextmanager
    def _operation(self, name: str) -> Iterator[None]:
        self._acquire_lock()
        try:
            if self._halted:
                raise InvariantViolation(f"Vault is halted, {name} refused")
            snapshot = self._state.snapshot()
            self._journal.begin()
            self._events.begin()
            try:
                yield
            except Exception as e:
                logger.warning("%s rolled back: %s: %s", name, type(e).__name__, e)
                failed = self._journal.compensate()
                self._events.discard()
                if failed:
                    # Assets left custody; the snapshot no longer matches it.
                    self._halted = True
                    logger.critical(
                        "Vault halted after %s: %d effect(s) not compensated",
                        name, len(failed),
                    )
                    raise InvariantViolation(
                        f"{name} could not be rolled back: {'; '.join(failed)}"
                    ) from e
                self._state.restore(snapshot)
                raise
            self._journal.commit()
            self._events.commit()
        finally:
            self._release_lock()

    # -- Liquidity ----------------------------------------------------------

    def open_position(self, amount0: int, amount1: int, depositor: str) -> int:
        depositor = normalize_address(depositor)
        with self._operation("open_position"):
            return self.ledger.open(amount0, amount1, depositor)

    def collect_fees(self, position_id: int, caller: str) -> Tuple[int, int]:
        caller = normalize_address(caller)
        with self._operation("collect_fees"):
            return self.ledger.collect_fees(position_id, caller)

    def close_position(self, position_id: int, caller: str) -> Tuple[int, int]:
        """
        Settle and remove a position, paying out principal plus fees.

        Returns the (amount0, amount1) paid. Principal is returned at the
        deposited amounts, so once swaps have drained a reserve below a
        position's recorded principal the close raises ArithmeticOverflow
        and the call is rolled back.
        """
        caller = normalize_address(caller)
        with self._operation("close_position"):
            return self.ledger.close(position_id, caller)

    # -- Swaps --------------------------------------------------------------

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
        trader = normalize_address(trader)
        with self._operation("swap"):
            return self.engine.swap(
                sell_asset,
                buy_asset,
                sell_amount,
                min_buy_amount,
                valid_to,
                authorization,
                trader,
            )

    # -- Admin --------------------------------------------------------------

    def _check_fee_rate(self, rate: int) -> None:
        if not isinstance(rate, int) or isinstance(rate, bool):
            raise InvalidFeeRate(f"Fee rate must be an integer, got {rate!r}")
        cap = min(self.config.max_swap_fee_rate, MAX_SWAP_FEE_RATE)
        if not 0 <= rate <= cap:
            raise InvalidFeeRate(f"Fee rate {rate} outside [0, {cap}] bps")

    def update_fee_rate(self, caller: str, new_rate: int) -> None:
        """Change the swap fee rate. Owner only."""
        if not same_address(caller, self.owner):
            raise Unauthorized(f"{caller} is not the vault owner")
        self._check_fee_rate(new_rate)
        with self._operation("update_fee_rate"):
            old_rate = self._state.swap_fee_rate
            self._state.swap_fee_rate = new_rate
            self._events.emit(FeeRateUpdated(old_rate, new_rate))
            logger.info("Fee rate updated: %d -> %d bps", old_rate, new_rate)

    # -- Queries ------------------------------------------------------------

    @property
    def token0(self) -> str:
        return self._state.token0

    @property
    def token1(self) -> str:
        return self._state.token1

    def get_position(self, position_id: int) -> PositionView:
        return self.ledger.get(position_id)

    def positions_of(self, owner: str) -> List[int]:
        return self.ledger.positions_of(owner)

    def total_reserves(self) -> Tuple[int, int]:
        return self._state.reserves

    def fee_growth_globals(self) -> Tuple[int, int]:
        return self._state.fee_growth_global0, self._state.fee_growth_global1

    def current_fee_rate(self) -> int:
        return self._state.swap_fee_rate

    def quote(self, sell_asset: str, buy_asset: str, sell_amount: int) -> SwapResult:
        return self.engine.quote(sell_asset, buy_asset, sell_amount)

    def calculate_fee(self, amount: int) -> int:
        return self.engine.calculate_fee(amount)

    @property
    def events(self) -> Tuple[Any, ...]:
        return self._events.events

    @property
    def locked(self) -> bool:
        return self._locked

    @property
    def halted(self) -> bool:
        return self._halted

    def __repr__(self) -> str:
        return (
            f"Vault({self._state.token0}/{self._state.token1}, "
            f"reserves={self._state.reserves}, fee={self._state.swap_fee_rate}bps)"
        )
