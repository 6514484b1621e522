"""
Compensating journal for external side effects.

State rollback covers the vault's own accounting, but asset transfers and
ownership-token mints are carried out by collaborators. The journal
records every completed external effect of the in-flight operation and,
if the operation fails, undoes them newest first.
"""

from typing import Callable, List, Tuple

from ..logger import get_logger
from .interfaces import AssetTransfer, PositionToken

logger = get_logger(__name__)


class TransferJournal:
    """
    AssetTransfer and PositionToken facade that remembers how to undo itself.

    Reversing a transfer_out pulls the assets back from the recipient, which
    needs the recipient's allowance. Operations therefore pull before they
    push so that a failing push leaves only pulls to reverse.
    """

    def __init__(self, assets: AssetTransfer, position_token: PositionToken):
        self._assets = assets
        self._position_token = position_token
        self._undo: List[Tuple[str, Callable[[], None]]] = []

    # -- AssetTransfer ------------------------------------------------------

    def transfer_in(self, asset: str, sender: str, amount: int) -> None:
        if amount == 0:
            return
        self._assets.transfer_in(asset, sender, amount)
        self._record(
            f"refund {amount} of {asset} to {sender}",
            lambda: self._assets.transfer_out(asset, sender, amount),
        )

    def transfer_out(self, asset: str, recipient: str, amount: int) -> None:
        if amount == 0:
            return
        self._assets.transfer_out(asset, recipient, amount)
        self._record(
            f"reclaim {amount} of {asset} from {recipient}",
            lambda: self._assets.transfer_in(asset, recipient, amount),
        )

    # -- PositionToken ------------------------------------------------------

    def mint(self, owner: str, token_id: int) -> None:
        self._position_token.mint(owner, token_id)
        self._record(f"burn #{token_id}", lambda: self._position_token.burn(token_id))

    def burn(self, token_id: int) -> None:
        owner = self._position_token.owner_of(token_id)
        self._position_token.burn(token_id)
        self._record(
            f"re-mint #{token_id} to {owner}",
            lambda: self._position_token.mint(owner, token_id),
        )

    def is_owner_or_approved(self, caller: str, token_id: int) -> bool:
        return self._position_token.is_owner_or_approved(caller, token_id)

    def owner_of(self, token_id: int) -> str:
        return self._position_token.owner_of(token_id)

    # -- lifecycle ----------------------------------------------------------

    def _record(self, description: str, undo: Callable[[], None]) -> None:
        self._undo.append((description, undo))

    def begin(self) -> None:
        self._undo = []

    def commit(self) -> None:
        self._undo = []

    def compensate(self) -> List[str]:
        """
        Undo every recorded effect, newest first.

        A failed undo is logged as critical and the remaining undos still
        run. Returns the descriptions of the undos that failed; a non-empty
        result means assets left custody and could not be reclaimed.
        """
        failed: List[str] = []
        while self._undo:
            description, undo = self._undo.pop()
            try:
                undo()
            except Exception:
                logger.critical("Compensation failed: %s", description, exc_info=True)
                failed.append(description)
            else:
                logger.warning("Compensated: %s", description)
        return failed

    def __len__(self) -> int:
        return len(self._undo)
