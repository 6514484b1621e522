"""
LP Vault Core

Position ledger, fee-growth accumulator, constant-product swap engine and
signed-order authentication for a two-asset liquidity vault.
"""

from .authenticator import EcdsaSignatureVerifier, OrderAuthenticator
from .core import Vault
from .events import (
    EventLog,
    FeeRateUpdated,
    FeesCollected,
    PositionClosed,
    PositionOpened,
    SwapExecuted,
    VaultCreated,
)
from .factory import VaultFactory, compute_vault_address, sort_tokens
from .fees import accrue_fee, settle, unclaimed_fees
from .interfaces import (
    AssetTransfer,
    AuthorizationProvider,
    PositionToken,
    PositionTokenAuthorization,
    SignatureVerifier,
)
from .journal import TransferJournal
from .ledger import PositionLedger
from .order import (
    BALANCE_ERC20,
    KIND_SELL,
    ORDER_TYPE_HASH,
    ZERO_APP_DATA,
    Order,
    sign_order,
)
from .state import Position, PositionView, VaultState
from .swap import SwapEngine, SwapResult, calculate_fee, quote_exact_in

__all__ = [
    # Facade
    "Vault",
    "VaultFactory",
    "compute_vault_address",
    "sort_tokens",
    # State
    "VaultState",
    "Position",
    "PositionView",
    # Components
    "PositionLedger",
    "SwapEngine",
    "SwapResult",
    "OrderAuthenticator",
    "EcdsaSignatureVerifier",
    "TransferJournal",
    # Fees and pricing
    "accrue_fee",
    "settle",
    "unclaimed_fees",
    "calculate_fee",
    "quote_exact_in",
    # Orders
    "Order",
    "sign_order",
    "ORDER_TYPE_HASH",
    "KIND_SELL",
    "BALANCE_ERC20",
    "ZERO_APP_DATA",
    # Interfaces
    "AssetTransfer",
    "PositionToken",
    "AuthorizationProvider",
    "PositionTokenAuthorization",
    "SignatureVerifier",
    # Events
    "EventLog",
    "PositionOpened",
    "FeesCollected",
    "PositionClosed",
    "SwapExecuted",
    "FeeRateUpdated",
    "VaultCreated",
]
