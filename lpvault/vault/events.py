"""
Vault events and the per-vault event journal.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PositionOpened:
    """Emitted when a deposit mints a new position."""
    owner: str
    position_id: int
    amount0: int
    amount1: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "PositionOpened",
            "owner": self.owner,
            "positionId": self.position_id,
            "amount0": str(self.amount0),
            "amount1": str(self.amount1),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class FeesCollected:
    """Emitted on every fee settlement, including the one inside a close."""
    recipient: str
    position_id: int
    amount0: int
    amount1: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "FeesCollected",
            "recipient": self.recipient,
            "positionId": self.position_id,
            "amount0": str(self.amount0),
            "amount1": str(self.amount1),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class PositionClosed:
    """Emitted when a position is burned. Amounts include settled fees."""
    recipient: str
    position_id: int
    amount0: int
    amount1: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "PositionClosed",
            "recipient": self.recipient,
            "positionId": self.position_id,
            "amount0": str(self.amount0),
            "amount1": str(self.amount1),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class SwapExecuted:
    """Emitted on every settled swap."""
    trader: str
    sell_token: str
    buy_token: str
    sell_amount: int
    buy_amount: int
    fee_amount: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "SwapExecuted",
            "trader": self.trader,
            "sellToken": self.sell_token,
            "buyToken": self.buy_token,
            "sellAmount": str(self.sell_amount),
            "buyAmount": str(self.buy_amount),
            "feeAmount": str(self.fee_amount),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class FeeRateUpdated:
    """Emitted when the owner changes the swap fee rate."""
    old_rate: int
    new_rate: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "FeeRateUpdated",
            "oldRate": self.old_rate,
            "newRate": self.new_rate,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class VaultCreated:
    """Emitted by the factory for every new vault."""
    vault: str
    token0: str
    token1: str
    vault_id: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "VaultCreated",
            "vault": self.vault,
            "token0": self.token0,
            "token1": self.token1,
            "vaultId": self.vault_id,
            "timestamp": self.timestamp,
        }


# ---------------------------------------------------------------------------
# Journal
# ---------------------------------------------------------------------------

class EventLog:
    """
    Append-only event journal.

    Events emitted during an operation are staged and only become visible
    on commit; a failed operation discards them.
    """

    def __init__(self):
        self._events: List[Any] = []
        self._pending: List[Any] = []

    def emit(self, event: Any) -> None:
        self._pending.append(event)

    def begin(self) -> None:
        self._pending = []

    def commit(self) -> None:
        self._events.extend(self._pending)
        self._pending = []

    def discard(self) -> None:
        self._pending = []

    @property
    def events(self) -> Tuple[Any, ...]:
        return tuple(self._events)

    def __len__(self) -> int:
        return len(self._events)
