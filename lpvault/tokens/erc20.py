"""
In-memory ERC20 token and vault custody

Reference implementation of the asset side of the vault:
  - Token: balances, allowances, transfer / approve / transfer_from, mint
  - TokenBank: AssetTransfer over a set of tokens for one custodian address

Transfer hooks let tests stand in for tokens that call back into the
vault mid-transfer.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Tuple

from ..crypto.address import normalize_address
from ..exceptions import InsufficientAllowance, InsufficientBalance, TransferRejected
from ..logger import get_logger

logger = get_logger(__name__)

TransferHook = Callable[["Token", str, str, int], None]


# ══════════════════════════════════════════════════════════════════════
#  EVENTS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TransferEvent:
    """Emitted on every balance move, mints included."""
    token_symbol: str
    sender: str
    recipient: str
    amount: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Transfer",
            "token": self.token_symbol,
            "from": self.sender,
            "to": self.recipient,
            "amount": str(self.amount),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ApprovalEvent:
    """Emitted on every approve."""
    token_symbol: str
    owner: str
    spender: str
    amount: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Approval",
            "token": self.token_symbol,
            "owner": self.owner,
            "spender": self.spender,
            "amount": str(self.amount),
            "timestamp": self.timestamp,
        }


# ══════════════════════════════════════════════════════════════════════
#  TOKEN
# ══════════════════════════════════════════════════════════════════════

MINT_SOURCE = "0x" + "0" * 40


class Token:
    """
    Fungible token with integer base-unit balances.

    Mirrors ERC-20 semantics:
        - balance_of(address) → int
        - transfer(sender, recipient, amount)
        - approve(owner, spender, amount)
        - transfer_from(spender, sender, recipient, amount)
    """

    def __init__(self, address: str, name: str, symbol: str, decimals: int = 18):
        self.address = normalize_address(address)
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.total_supply: int = 0
        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}
        self._events: List[Any] = []
        self._hooks: List[TransferHook] = []
        self._frozen = False

    # ── Queries ──────────────────────────────────────────────────────

    def balance_of(self, address: str) -> int:
        return self._balances.get(normalize_address(address), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((normalize_address(owner), normalize_address(spender)), 0)

    @property
    def events(self) -> List[Any]:
        return list(self._events)

    # ── Admin ────────────────────────────────────────────────────────

    def mint(self, recipient: str, amount: int) -> None:
        if amount <= 0:
            raise ValueError("Mint amount must be positive")
        recipient = normalize_address(recipient)
        self._balances[recipient] = self._balances.get(recipient, 0) + amount
        self.total_supply += amount
        self._events.append(TransferEvent(self.symbol, MINT_SOURCE, recipient, amount))

    def freeze(self) -> None:
        """Reject every transfer until unfreeze()."""
        self._frozen = True

    def unfreeze(self) -> None:
        self._frozen = False

    def add_transfer_hook(self, hook: TransferHook) -> None:
        """Register a callback run before every transfer moves balances. A raising hook aborts the transfer."""
        self._hooks.append(hook)

    # ── Transfers ────────────────────────────────────────────────────

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        self._move(normalize_address(sender), normalize_address(recipient), amount)

    def approve(self, owner: str, spender: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("Allowance amount cannot be negative")
        owner = normalize_address(owner)
        spender = normalize_address(spender)
        self._allowances[(owner, spender)] = amount
        self._events.append(ApprovalEvent(self.symbol, owner, spender, amount))

    def transfer_from(self, spender: str, sender: str, recipient: str, amount: int) -> None:
        spender = normalize_address(spender)
        sender = normalize_address(sender)
        allow = self._allowances.get((sender, spender), 0)
        if allow < amount:
            raise InsufficientAllowance(
                f"{self.symbol}: allowance {allow} < transfer amount {amount}"
            )
        self._move(sender, normalize_address(recipient), amount)
        self._allowances[(sender, spender)] = allow - amount

    def _check_transfer(self, sender: str, amount: int) -> None:
        if self._frozen:
            raise TransferRejected(f"{self.symbol} transfers are frozen")
        if not isinstance(amount, int) or amount <= 0:
            raise TransferRejected(f"{self.symbol}: transfer amount must be a positive integer")
        bal = self._balances.get(sender, 0)
        if bal < amount:
            raise InsufficientBalance(
                f"{self.symbol}: {sender} balance {bal} < transfer amount {amount}"
            )

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        self._check_transfer(sender, amount)
        for hook in list(self._hooks):
            hook(self, sender, recipient, amount)
        self._balances[sender] -= amount
        self._balances[recipient] = self._balances.get(recipient, 0) + amount
        self._events.append(TransferEvent(self.symbol, sender, recipient, amount))
        logger.debug("Transfer: %s -> %s %d %s", sender, recipient, amount, self.symbol)

    def __repr__(self) -> str:
        return f"Token({self.symbol}, {self.address})"


# ══════════════════════════════════════════════════════════════════════
#  CUSTODY
# ══════════════════════════════════════════════════════════════════════

class TokenBank:
    """
    AssetTransfer over a set of tokens for one custodian (the vault).

    transfer_in spends the custodian's allowance; depositors and traders
    approve the custodian first, exactly as with an on-chain vault.
    """

    def __init__(self, custodian: str, tokens: Iterable[Token] = ()):
        self.custodian = normalize_address(custodian)
        self._tokens: Dict[str, Token] = {}
        for token in tokens:
            self.register(token)

    def register(self, token: Token) -> None:
        self._tokens[token.address] = token

    def token(self, asset: str) -> Token:
        try:
            return self._tokens[normalize_address(asset)]
        except KeyError:
            raise TransferRejected(f"Unknown asset {asset}") from None

    def balance_of(self, asset: str) -> int:
        return self.token(asset).balance_of(self.custodian)

    def transfer_in(self, asset: str, sender: str, amount: int) -> None:
        self.token(asset).transfer_from(self.custodian, sender, self.custodian, amount)

    def transfer_out(self, asset: str, recipient: str, amount: int) -> None:
        self.token(asset).transfer(self.custodian, recipient, amount)
