"""
LP Vault Exceptions

Every vault operation either completes or raises one of these; a raised
error means no state change from that operation is observable.
"""


class VaultError(Exception):
    """Base exception for the vault."""
    pass


class InvalidAmount(VaultError):
    """An amount is negative, not an integer, or zero where it must be positive."""
    pass


class InvalidDeposit(InvalidAmount):
    """Deposit amounts are both zero, negative or not integers."""
    pass


class PositionNotFound(VaultError):
    """Position id was never minted or has already been closed."""

    def __init__(self, position_id: int):
        self.position_id = position_id
        super().__init__(f"Position #{position_id} not found")


class Unauthorized(VaultError):
    """Caller is neither the owner nor an approved operator."""
    pass


class InvalidAssetPair(VaultError):
    """Swap assets are not the vault's fixed pair."""
    pass


class SlippageExceeded(VaultError):
    """Computed buy amount is below the order's minimum."""

    def __init__(self, buy_amount: int, min_buy_amount: int):
        self.buy_amount = buy_amount
        self.min_buy_amount = min_buy_amount
        super().__init__(f"Slippage exceeded: got {buy_amount}, minimum {min_buy_amount}")


class InvalidAuthorization(VaultError):
    """Order signature is invalid, malformed, or signed by someone else."""
    pass


class MalformedSignature(InvalidAuthorization):
    """Signature bytes have the wrong length or an unknown recovery id."""
    pass


class RecoveryFailed(InvalidAuthorization):
    """Signer could not be recovered from an otherwise well-formed signature."""
    pass


class OrderExpired(VaultError):
    """Order deadline is in the past."""

    def __init__(self, valid_to: int, now: int):
        self.valid_to = valid_to
        self.now = now
        super().__init__(f"Order expired at {valid_to} (now {now})")


class EmptyReserve(VaultError):
    """A reserve involved in pricing or fee accrual is zero."""
    pass


class ArithmeticOverflow(VaultError):
    """A value left the unsigned 256-bit domain."""
    pass


class Reentrant(VaultError):
    """A mutating call arrived while another one was in flight."""
    pass


class InvalidFeeRate(VaultError):
    """Swap fee rate is outside the allowed bounds."""
    pass


class InvariantViolation(VaultError):
    """Internal accounting is inconsistent. Never caused by caller input."""
    pass


class TransferError(VaultError):
    """Asset custody collaborator refused a transfer."""
    pass


class InsufficientBalance(TransferError):
    """Sender balance is too low."""
    pass


class InsufficientAllowance(TransferError):
    """Spender allowance is too low."""
    pass


class TransferRejected(TransferError):
    """Transfer refused for any other reason."""
    pass


class ConfigurationError(VaultError):
    """Configuration error."""
    pass


class DuplicateVault(VaultError):
    """A vault already exists for this token pair."""
    pass
