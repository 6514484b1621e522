"""
Configuration loader tests.
"""

import logging

import pytest

from lpvault.config import VaultConfig, load_config
from lpvault.constants import DEFAULT_SWAP_FEE_RATE, MAX_SWAP_FEE_RATE
from lpvault.exceptions import ConfigurationError

ENV_VARS = (
    "LPVAULT_CONFIG",
    "LPVAULT_SWAP_FEE_RATE",
    "LPVAULT_LOG_LEVEL",
    "LPVAULT_ORDER_CLOCK_SKEW",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def restore_log_level():
    root = logging.getLogger()
    levels = [(h, h.level) for h in root.handlers]
    root_level = root.level
    yield
    root.setLevel(root_level)
    for handler, level in levels:
        handler.setLevel(level)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "lpvault.toml"
    path.write_text(
        "[vault]\n"
        "swap_fee_rate = 5\n"
        "max_swap_fee_rate = 50\n"
        'log_level = "DEBUG"\n'
        "order_clock_skew = 15\n"
    )
    return path


class TestDefaults:

    def test_defaults(self):
        cfg = VaultConfig()
        assert cfg.swap_fee_rate == DEFAULT_SWAP_FEE_RATE
        assert cfg.max_swap_fee_rate == MAX_SWAP_FEE_RATE
        assert cfg.log_level == "INFO"
        assert cfg.order_clock_skew == 0
        assert cfg.validate()

    def test_from_dict_partial(self):
        cfg = VaultConfig.from_dict({"swap_fee_rate": 10})
        assert cfg.swap_fee_rate == 10
        assert cfg.max_swap_fee_rate == MAX_SWAP_FEE_RATE

    def test_to_dict(self):
        assert VaultConfig().to_dict()["vault"]["swap_fee_rate"] == DEFAULT_SWAP_FEE_RATE


class TestFromFile:

    def test_load(self, config_file):
        cfg = VaultConfig.from_file(str(config_file))
        assert cfg.swap_fee_rate == 5
        assert cfg.max_swap_fee_rate == 50
        assert cfg.log_level == "DEBUG"
        assert cfg.order_clock_skew == 15

    def test_missing_file_uses_defaults(self, tmp_path):
        cfg = VaultConfig.from_file(str(tmp_path / "absent.toml"))
        assert cfg == VaultConfig()

    def test_missing_table_uses_defaults(self, tmp_path):
        path = tmp_path / "lpvault.toml"
        path.write_text("[other]\nkey = 1\n")
        assert VaultConfig.from_file(str(path)) == VaultConfig()

    def test_malformed(self, tmp_path):
        path = tmp_path / "lpvault.toml"
        path.write_text("[vault\nswap_fee_rate = ")
        with pytest.raises(ConfigurationError, match="Malformed"):
            VaultConfig.from_file(str(path))


class TestEnvOverrides:

    def test_env_wins_over_file(self, config_file, monkeypatch):
        monkeypatch.setenv("LPVAULT_SWAP_FEE_RATE", "7")
        monkeypatch.setenv("LPVAULT_LOG_LEVEL", "warning")
        monkeypatch.setenv("LPVAULT_ORDER_CLOCK_SKEW", "60")

        cfg = VaultConfig.from_file(str(config_file))
        assert cfg.swap_fee_rate == 7
        assert cfg.log_level == "WARNING"
        assert cfg.order_clock_skew == 60

    def test_non_integer(self, config_file, monkeypatch):
        monkeypatch.setenv("LPVAULT_SWAP_FEE_RATE", "thirty")
        with pytest.raises(ConfigurationError, match="LPVAULT_SWAP_FEE_RATE"):
            VaultConfig.from_file(str(config_file))

    def test_config_path_from_env(self, config_file, monkeypatch):
        monkeypatch.setenv("LPVAULT_CONFIG", str(config_file))
        assert load_config().swap_fee_rate == 5

    def test_explicit_path_wins(self, config_file, tmp_path, monkeypatch):
        monkeypatch.setenv("LPVAULT_CONFIG", str(tmp_path / "absent.toml"))
        assert load_config(str(config_file)).order_clock_skew == 15


class TestValidation:

    @pytest.mark.parametrize("overrides", [
        {"swap_fee_rate": -1},
        {"swap_fee_rate": MAX_SWAP_FEE_RATE + 1},
        {"swap_fee_rate": 60, "max_swap_fee_rate": 50},
        {"max_swap_fee_rate": MAX_SWAP_FEE_RATE + 1},
        {"order_clock_skew": -5},
        {"log_level": "LOUD"},
        {"swap_fee_rate": "30"},
        {"swap_fee_rate": True},
    ])
    def test_invalid(self, overrides):
        with pytest.raises(ConfigurationError):
            VaultConfig(**overrides).validate()

    def test_load_config_validates(self, tmp_path):
        path = tmp_path / "lpvault.toml"
        path.write_text("[vault]\nswap_fee_rate = 500\n")
        with pytest.raises(ConfigurationError):
            load_config(str(path))


class TestLogLevel:

    def test_load_config_applies_log_level(self, config_file):
        load_config(str(config_file))
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert all(h.level == logging.DEBUG for h in root.handlers)
        assert logging.getLogger("lpvault.vault").isEnabledFor(logging.DEBUG)

    def test_env_log_level_applied(self, config_file, monkeypatch):
        monkeypatch.setenv("LPVAULT_LOG_LEVEL", "error")
        load_config(str(config_file))
        assert logging.getLogger().level == logging.ERROR
