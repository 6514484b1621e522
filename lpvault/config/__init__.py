"""
LP Vault Configuration

Loads the [vault] table of lpvault.toml.
Environment variables override TOML values.
"""

from .loader import VaultConfig, load_config

__all__ = [
    "VaultConfig",
    "load_config",
]
