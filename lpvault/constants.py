"""
LP Vault Constants

This module consolidates the global constants and environment configuration
used throughout the codebase. Constants are organized by category for easy
reference and maintenance.
"""
import ast
from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
# Load environment variables once at module import
_config = dotenv_values(".env")

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                       'INFO',
    'LOG_FORMAT':                      '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':                 '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING':        'True',
    'LOG_FILE_OUTPUT':                 'False',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_BACKUP_COUNT = 5


# WARNING: THE VALUES BELOW ARE PART OF THE VAULT'S ACCOUNTING AND SIGNATURE CONTRACT.
# CHANGING THEM CHANGES FEE ARITHMETIC OR INVALIDATES EXISTING ORDER SIGNATURES.

# ==================================================================================
# NUMERIC DOMAIN
# ==================================================================================
UINT256_MAX = 2**256 - 1
UINT32_MAX = 2**32 - 1


# ==================================================================================
# FEE PARAMETERS
# ==================================================================================
FEE_GROWTH_SCALE = 10**18  # fixed-point scale of the fee-growth accumulators
BPS_DENOMINATOR = 10_000
DEFAULT_SWAP_FEE_RATE = 30  # 0.30%
MAX_SWAP_FEE_RATE = 100  # 1.00%


# ==================================================================================
# POSITION LEDGER
# ==================================================================================
FIRST_POSITION_ID = 1


# ==================================================================================
# SIGNATURES
# ==================================================================================
SIGNATURE_LENGTH = 65
PERSONAL_SIGN_PREFIX = b'\x19Ethereum Signed Message:\n32'


# ==================================================================================
# CONFIGURATION WRAPPERS
# ==================================================================================
class ConfigString(str):
    """
    String subclass that stores a default value.
    """
    def __new__(cls, value, default):
        obj = str.__new__(cls, value)
        obj._default = default
        return obj

    def default(self):
        return self._default

class ConfigBool(int):
    """
    Int subclass acting as a boolean that stores a default value.
    """
    def __new__(cls, value, default):
        obj = int.__new__(cls, bool(value))
        obj._default = default
        return obj

    def default(self):
        return self._default

    def __repr__(self):
        return str(bool(self))

    def __str__(self):
        return str(bool(self))

    def __eq__(self, other):
        return bool(self) == other

    def __hash__(self):
        return hash(bool(self))


# ==================================================================================
# DYNAMIC CONFIGURATION LOADING
# ==================================================================================
namespace = globals()

def parse_bool(v):
    """
    Convert "True"/"False" (any casing, with surrounding whitespace) into bool.
    Avoids exceptions by only calling ast.literal_eval for known literals.
    """
    if not isinstance(v, str):
        return v
    s = v.strip()
    if not s:
        return v
    if s.casefold() in {"true", "false"}:
        return ast.literal_eval(s.title())
    return v

for key, default_raw in LOGGER_DEFAULTS.items():
    # dotenv_values returns strings or None. None is treated as missing.
    raw = _config.get(key)
    value_raw = default_raw if raw is None else raw

    value = parse_bool(value_raw)
    default_val = parse_bool(default_raw)

    if isinstance(value, bool):
        namespace[key] = ConfigBool(value, default_val)
    else:
        namespace[key] = ConfigString(value_raw, default_val)
