"""
LP Vault Package

Two-asset AMM liquidity vault with transferable positions, fee-growth
accounting and signed-order swaps.

Core imports are lazily loaded. For direct module access, import from
submodules:

    from lpvault.vault import Vault, Order, sign_order
    from lpvault.crypto import PrivateKey
    from lpvault.tokens import Token, TokenBank, PositionNFT
"""

__version__ = "0.1.0"


# Lazy imports to avoid loading everything at package import
def __getattr__(name):
    """Lazy module loading."""
    if name == 'Vault':
        from .vault import Vault
        return Vault
    elif name == 'VaultFactory':
        from .vault import VaultFactory
        return VaultFactory
    elif name == 'VaultError':
        from .exceptions import VaultError
        return VaultError
    raise AttributeError(f"module 'lpvault' has no attribute {name!r}")

__all__ = ['Vault', 'VaultFactory', 'VaultError']
