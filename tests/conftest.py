"""
Shared fixtures for the LP vault test suite.

VaultEnv wires a vault to in-memory tokens, a custody bank and a position
NFT, with a fixed clock so order deadlines are deterministic.
"""

import pytest

from lpvault.crypto import PrivateKey, normalize_address
from lpvault.tokens import PositionNFT, Token, TokenBank
from lpvault.vault import Order, Vault, sign_order

VAULT_ADDRESS = normalize_address("0x" + "aa" * 20)
TOKEN0_ADDRESS = "0x" + "11" * 20
TOKEN1_ADDRESS = "0x" + "22" * 20
OWNER = normalize_address("0x" + "0f" * 20)
ALICE = normalize_address("0x" + "a1" * 20)
BOB = normalize_address("0x" + "b0" * 20)
CAROL = normalize_address("0x" + "c0" * 20)

NOW = 1_700_000_000
VALID_TO = NOW + 3600
UNLIMITED = 2**255


class FixedClock:
    """Deterministic unix-time source."""

    def __init__(self, now: int = NOW):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


class VaultEnv:
    """A vault plus every collaborator it needs."""

    def __init__(self, fee_rate: int = 30, verifier=None, config=None):
        self.clock = FixedClock()
        self.token0 = Token(TOKEN0_ADDRESS, "Token Zero", "TK0")
        self.token1 = Token(TOKEN1_ADDRESS, "Token One", "TK1")
        self.bank = TokenBank(VAULT_ADDRESS, [self.token0, self.token1])
        self.nft = PositionNFT()
        self.vault = Vault(
            TOKEN0_ADDRESS,
            TOKEN1_ADDRESS,
            assets=self.bank,
            position_token=self.nft,
            owner=OWNER,
            swap_fee_rate=fee_rate,
            verifier=verifier,
            clock=self.clock,
            config=config,
            address=VAULT_ADDRESS,
        )

    def fund(self, account: str, amount0: int = 0, amount1: int = 0) -> None:
        """Mint to *account* and approve the vault for both tokens."""
        if amount0:
            self.token0.mint(account, amount0)
        if amount1:
            self.token1.mint(account, amount1)
        self.token0.approve(account, VAULT_ADDRESS, UNLIMITED)
        self.token1.approve(account, VAULT_ADDRESS, UNLIMITED)

    def deposit(self, account: str, amount0: int, amount1: int) -> int:
        self.fund(account, amount0, amount1)
        return self.vault.open_position(amount0, amount1, account)

    def token(self, address: str) -> Token:
        return self.token0 if address == TOKEN0_ADDRESS else self.token1

    def other(self, address: str) -> str:
        return TOKEN1_ADDRESS if address == TOKEN0_ADDRESS else TOKEN0_ADDRESS

    def sign(self, key: PrivateKey, sell_token: str, sell_amount: int, min_buy: int = 0,
             valid_to: int = VALID_TO, receiver: str = None) -> bytes:
        order = Order.sell(
            sell_token,
            self.other(sell_token),
            receiver or key.address,
            sell_amount,
            min_buy,
            valid_to,
        )
        return sign_order(order, key)

    def swap(self, key: PrivateKey, sell_token: str, sell_amount: int, min_buy: int = 0,
             valid_to: int = VALID_TO):
        """Fund *key*'s address with the sell amount, sign and execute."""
        if sell_token == TOKEN0_ADDRESS:
            self.fund(key.address, sell_amount, 0)
        else:
            self.fund(key.address, 0, sell_amount)
        signature = self.sign(key, sell_token, sell_amount, min_buy, valid_to)
        return self.vault.swap(
            sell_token,
            self.other(sell_token),
            sell_amount,
            min_buy,
            valid_to,
            signature,
            key.address,
        )

    def vault_balances(self):
        return (
            self.token0.balance_of(VAULT_ADDRESS),
            self.token1.balance_of(VAULT_ADDRESS),
        )


@pytest.fixture
def env():
    return VaultEnv()


@pytest.fixture
def trader_key():
    return PrivateKey.from_int(0x7A11CE)


@pytest.fixture
def other_key():
    return PrivateKey.from_int(0xB0B0B0)
