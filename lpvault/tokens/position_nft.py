"""
Position NFT

ERC-721 style ownership registry for vault positions. Mint and burn are
driven by the vault that holds the registry; holders transfer and approve
freely.
"""

from typing import Dict, List, Optional, Set

from ..crypto.address import normalize_address, same_address
from ..exceptions import PositionNotFound, Unauthorized
from ..logger import get_logger

logger = get_logger(__name__)


class PositionNFT:
    """In-memory transferable ownership registry with owner enumeration."""

    def __init__(self, name: str = "LP Vault Position", symbol: str = "LPV-POS"):
        self.name = name
        self.symbol = symbol
        self._owners: Dict[int, str] = {}
        self._token_approvals: Dict[int, str] = {}
        self._operator_approvals: Dict[str, Set[str]] = {}
        self._owned: Dict[str, List[int]] = {}

    # -- queries ------------------------------------------------------------

    def owner_of(self, token_id: int) -> str:
        try:
            return self._owners[token_id]
        except KeyError:
            raise PositionNotFound(token_id) from None

    def exists(self, token_id: int) -> bool:
        return token_id in self._owners

    def balance_of(self, owner: str) -> int:
        return len(self._owned.get(normalize_address(owner), []))

    def tokens_of_owner(self, owner: str) -> List[int]:
        return list(self._owned.get(normalize_address(owner), []))

    def token_of_owner_by_index(self, owner: str, index: int) -> int:
        return self._owned.get(normalize_address(owner), [])[index]

    def get_approved(self, token_id: int) -> Optional[str]:
        self.owner_of(token_id)
        return self._token_approvals.get(token_id)

    def is_approved_for_all(self, owner: str, operator: str) -> bool:
        return normalize_address(operator) in self._operator_approvals.get(normalize_address(owner), set())

    def is_owner_or_approved(self, caller: str, token_id: int) -> bool:
        owner = self._owners.get(token_id)
        if owner is None:
            return False
        caller = normalize_address(caller)
        return (
            caller == owner
            or self._token_approvals.get(token_id) == caller
            or self.is_approved_for_all(owner, caller)
        )

    # -- vault-driven -------------------------------------------------------

    def mint(self, owner: str, token_id: int) -> None:
        if token_id in self._owners:
            raise ValueError(f"Position #{token_id} already minted")
        owner = normalize_address(owner)
        self._owners[token_id] = owner
        self._owned.setdefault(owner, []).append(token_id)
        logger.debug("Minted #%d to %s", token_id, owner)

    def burn(self, token_id: int) -> None:
        owner = self.owner_of(token_id)
        del self._owners[token_id]
        self._token_approvals.pop(token_id, None)
        self._owned[owner].remove(token_id)
        logger.debug("Burned #%d", token_id)

    # -- holders ------------------------------------------------------------

    def approve(self, caller: str, approved: Optional[str], token_id: int) -> None:
        owner = self.owner_of(token_id)
        caller = normalize_address(caller)
        if caller != owner and not self.is_approved_for_all(owner, caller):
            raise Unauthorized(f"{caller} cannot approve position #{token_id}")
        if approved is None:
            self._token_approvals.pop(token_id, None)
        else:
            self._token_approvals[token_id] = normalize_address(approved)

    def set_approval_for_all(self, owner: str, operator: str, approved: bool) -> None:
        owner = normalize_address(owner)
        operator = normalize_address(operator)
        if same_address(owner, operator):
            raise ValueError("Cannot set approval for self")
        operators = self._operator_approvals.setdefault(owner, set())
        if approved:
            operators.add(operator)
        else:
            operators.discard(operator)

    def transfer_from(self, caller: str, sender: str, recipient: str, token_id: int) -> None:
        owner = self.owner_of(token_id)
        if not same_address(owner, sender):
            raise Unauthorized(f"{sender} does not own position #{token_id}")
        if not self.is_owner_or_approved(caller, token_id):
            raise Unauthorized(f"{caller} is not owner or approved for position #{token_id}")
        recipient = normalize_address(recipient)

        self._owned[owner].remove(token_id)
        self._owners[token_id] = recipient
        self._owned.setdefault(recipient, []).append(token_id)
        self._token_approvals.pop(token_id, None)
        logger.info("Position #%d transferred %s -> %s", token_id, owner, recipient)
