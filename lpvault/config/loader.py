"""
LP Vault TOML Configuration Loader

Loads the ``[vault]`` table of lpvault.toml with environment variable
overrides (dataclass + from_dict + from_file).

Environment variable mapping:
    swap_fee_rate    → LPVAULT_SWAP_FEE_RATE
    log_level        → LPVAULT_LOG_LEVEL
    order_clock_skew → LPVAULT_ORDER_CLOCK_SKEW
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from ..constants import DEFAULT_SWAP_FEE_RATE, MAX_SWAP_FEE_RATE
from ..exceptions import ConfigurationError
from ..logger import set_log_level

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "lpvault.toml"
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class VaultConfig:
    """[vault] section."""
    swap_fee_rate: int = DEFAULT_SWAP_FEE_RATE
    max_swap_fee_rate: int = MAX_SWAP_FEE_RATE
    log_level: str = "INFO"
    order_clock_skew: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VaultConfig":
        return cls(
            swap_fee_rate=data.get("swap_fee_rate", DEFAULT_SWAP_FEE_RATE),
            max_swap_fee_rate=data.get("max_swap_fee_rate", MAX_SWAP_FEE_RATE),
            log_level=data.get("log_level", "INFO"),
            order_clock_skew=data.get("order_clock_skew", 0),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "VaultConfig":
        """
        Load configuration from a TOML file.

        Args:
            config_path: Path to lpvault.toml

        Returns:
            VaultConfig instance
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning("Config file not found: %s, using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            return cfg

        try:
            with open(path, "rb") as f:
                raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Malformed config file {config_path}: {e}") from e

        cfg = cls.from_dict(raw.get("vault", {}))
        cfg.apply_env()
        return cfg

    # --- env overrides ----------------------------------------------------

    def apply_env(self) -> None:
        """Override from environment variables."""
        if v := os.environ.get("LPVAULT_SWAP_FEE_RATE"):
            self.swap_fee_rate = _parse_int("LPVAULT_SWAP_FEE_RATE", v)
        if v := os.environ.get("LPVAULT_LOG_LEVEL"):
            self.log_level = v.upper()
        if v := os.environ.get("LPVAULT_ORDER_CLOCK_SKEW"):
            self.order_clock_skew = _parse_int("LPVAULT_ORDER_CLOCK_SKEW", v)

    # --- validation -------------------------------------------------------

    def validate(self) -> bool:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: on invalid config
        """
        for name in ("swap_fee_rate", "max_swap_fee_rate", "order_clock_skew"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
        if not 0 <= self.max_swap_fee_rate <= MAX_SWAP_FEE_RATE:
            raise ConfigurationError(
                f"max_swap_fee_rate must be within [0, {MAX_SWAP_FEE_RATE}], got {self.max_swap_fee_rate}"
            )
        if not 0 <= self.swap_fee_rate <= self.max_swap_fee_rate:
            raise ConfigurationError(
                f"swap_fee_rate must be within [0, {self.max_swap_fee_rate}], got {self.swap_fee_rate}"
            )
        if self.order_clock_skew < 0:
            raise ConfigurationError("order_clock_skew must be >= 0")
        if self.log_level not in _LOG_LEVELS:
            raise ConfigurationError(f"Invalid log_level: {self.log_level}")
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vault": {
                "swap_fee_rate": self.swap_fee_rate,
                "max_swap_fee_rate": self.max_swap_fee_rate,
                "log_level": self.log_level,
                "order_clock_skew": self.order_clock_skew,
            },
        }


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


# -----------------------------------------------------------------------
# Convenience function
# -----------------------------------------------------------------------

def load_config(path: Optional[str] = None) -> VaultConfig:
    """
    Load vault configuration.

    Resolution order:
        1. Explicit *path* argument
        2. LPVAULT_CONFIG env var
        3. ./lpvault.toml in current directory
        4. Defaults (with env overrides)

    The validated log_level is applied to the process-wide logging setup.
    """
    if path is None:
        path = os.environ.get("LPVAULT_CONFIG", DEFAULT_CONFIG_FILE)

    cfg = VaultConfig.from_file(path)
    cfg.validate()
    set_log_level(cfg.log_level)
    return cfg
