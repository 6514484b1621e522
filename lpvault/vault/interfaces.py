"""
Collaborator interfaces

The vault never touches balances or ownership records directly. It talks
to an asset custodian, an ownership registry and a signature verifier
through these structural protocols, so any implementation with the right
methods can be plugged in.
"""

from typing import Protocol, runtime_checkable


# ---------------------------------------------------------------------------
# Asset custody
# ---------------------------------------------------------------------------

@runtime_checkable
class AssetTransfer(Protocol):
    """
    Moves fungible assets between the vault and its counterparties.

    Both methods raise a TransferError subclass (InsufficientBalance,
    InsufficientAllowance, TransferRejected) when the move cannot happen.
    """

    def transfer_in(self, asset: str, sender: str, amount: int) -> None: ...
    def transfer_out(self, asset: str, recipient: str, amount: int) -> None: ...


# ---------------------------------------------------------------------------
# Ownership registry
# ---------------------------------------------------------------------------

@runtime_checkable
class PositionToken(Protocol):
    """Transferable ownership token, one per position id."""

    def mint(self, owner: str, token_id: int) -> None: ...
    def burn(self, token_id: int) -> None: ...
    def is_owner_or_approved(self, caller: str, token_id: int) -> bool: ...
    def owner_of(self, token_id: int) -> str: ...


@runtime_checkable
class AuthorizationProvider(Protocol):
    """Answers whether *caller* may act on a resource."""

    def can_act(self, caller: str, resource_id: int) -> bool: ...


class PositionTokenAuthorization:
    """AuthorizationProvider backed by a PositionToken's owner-or-approved check."""

    def __init__(self, position_token: PositionToken):
        self._position_token = position_token

    def can_act(self, caller: str, resource_id: int) -> bool:
        return self._position_token.is_owner_or_approved(caller, resource_id)


# ---------------------------------------------------------------------------
# Signatures
# ---------------------------------------------------------------------------

@runtime_checkable
class SignatureVerifier(Protocol):
    """
    Recovers the signer address of a 32-byte digest.

    Raises MalformedSignature or RecoveryFailed.
    """

    def recover(self, message_hash: bytes, signature: bytes) -> str: ...
