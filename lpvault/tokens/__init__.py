"""
In-memory reference collaborators for the vault: fungible tokens with a
custody adapter, and the position ownership registry.
"""

from .erc20 import MINT_SOURCE, ApprovalEvent, Token, TokenBank, TransferEvent
from .position_nft import PositionNFT

__all__ = [
    "Token",
    "TokenBank",
    "TransferEvent",
    "ApprovalEvent",
    "MINT_SOURCE",
    "PositionNFT",
]
