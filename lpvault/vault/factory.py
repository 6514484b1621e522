"""
Vault factory: one vault per unordered token pair.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from ..config import VaultConfig
from ..crypto.address import normalize_address, same_address
from ..crypto.hashing import keccak256
from ..exceptions import DuplicateVault, InvalidAssetPair
from ..logger import get_logger
from .core import Vault
from .events import VaultCreated
from .interfaces import AssetTransfer, PositionToken

logger = get_logger(__name__)


def sort_tokens(token_a: str, token_b: str) -> Tuple[str, str]:
    """Canonical pair ordering: numerically smaller address first."""
    token_a = normalize_address(token_a)
    token_b = normalize_address(token_b)
    if same_address(token_a, token_b):
        raise InvalidAssetPair("Vault tokens must differ")
    if int(token_a, 16) > int(token_b, 16):
        token_a, token_b = token_b, token_a
    return token_a, token_b


def compute_vault_address(factory: str, token0: str, token1: str, vault_id: int) -> str:
    """Last 20 bytes of keccak256(factory || token0 || token1 || vault_id)."""
    payload = (
        bytes.fromhex(factory[2:])
        + bytes.fromhex(token0[2:])
        + bytes.fromhex(token1[2:])
        + vault_id.to_bytes(32, "big")
    )
    return normalize_address("0x" + keccak256(payload)[-20:].hex())


class VaultFactory:
    """
    Creates and indexes vaults.

    Each vault gets its own custody and ownership registry, built by the
    two factory callables from the new vault's address.
    """

    def __init__(
        self,
        address: str,
        owner: str,
        assets_factory: Callable[[str], AssetTransfer],
        position_token_factory: Callable[[str], PositionToken],
        config: Optional[VaultConfig] = None,
    ) -> None:
        self.address = normalize_address(address)
        self.owner = normalize_address(owner)
        self.config = config or VaultConfig()
        self._assets_factory = assets_factory
        self._position_token_factory = position_token_factory
        self._vaults: Dict[str, Vault] = {}
        self._pair_index: Dict[Tuple[str, str], str] = {}
        self._vault_sequence: int = 0
        self._events: List[VaultCreated] = []

    @property
    def vault_count(self) -> int:
        return len(self._vaults)

    @property
    def events(self) -> List[VaultCreated]:
        return list(self._events)

    def create_vault(self, token_a: str, token_b: str, fee_collector: Optional[str] = None, **vault_kwargs) -> Vault:
        """
        Deploy a vault for the pair (in either order).

        Raises:
            InvalidAssetPair: tokens are identical
            DuplicateVault: the pair already has a vault
        """
        token0, token1 = sort_tokens(token_a, token_b)
        pair_key = (token0, token1)
        if pair_key in self._pair_index:
            raise DuplicateVault(f"Vault already exists for {token0}/{token1}")

        vault_id = self._vault_sequence + 1
        vault_address = compute_vault_address(self.address, token0, token1, vault_id)

        vault = Vault(
            token0,
            token1,
            assets=self._assets_factory(vault_address),
            position_token=self._position_token_factory(vault_address),
            owner=self.owner,
            fee_collector=fee_collector or self.owner,
            config=self.config,
            address=vault_address,
            **vault_kwargs,
        )

        self._vault_sequence = vault_id
        self._vaults[vault_address] = vault
        self._pair_index[pair_key] = vault_address
        self._events.append(VaultCreated(vault_address, token0, token1, vault_id))

        logger.info("Vault %s created: %s/%s id=%d", vault_address, token0, token1, vault_id)
        return vault

    def get_vault(self, token_a: str, token_b: str) -> Optional[Vault]:
        pair_key = sort_tokens(token_a, token_b)
        vault_address = self._pair_index.get(pair_key)
        return self._vaults.get(vault_address) if vault_address else None

    def get_vault_by_address(self, vault_address: str) -> Optional[Vault]:
        return self._vaults.get(normalize_address(vault_address))

    def all_vaults(self) -> List[Vault]:
        return list(self._vaults.values())
