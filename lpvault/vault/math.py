"""
Checked unsigned 256-bit arithmetic.

Python ints never wrap, so every helper here validates that both operands
and the result stay inside [0, 2**256 - 1] and raises ArithmeticOverflow
otherwise. Products are computed at full precision before the floor
division, which is what a 512-bit intermediate buys on the EVM.
"""

from ..constants import UINT256_MAX
from ..exceptions import ArithmeticOverflow


def require_uint256(value: int, name: str = "value") -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0 or value > UINT256_MAX:
        raise ArithmeticOverflow(f"{name} out of uint256 range: {value}")
    return value


def checked_add(a: int, b: int) -> int:
    result = a + b
    if result > UINT256_MAX:
        raise ArithmeticOverflow(f"uint256 overflow: {a} + {b}")
    return result


def checked_sub(a: int, b: int) -> int:
    if b > a:
        raise ArithmeticOverflow(f"uint256 underflow: {a} - {b}")
    return a - b


def mul_div(a: int, b: int, denominator: int) -> int:
    """floor(a * b / denominator) with a full-width intermediate."""
    if denominator == 0:
        raise ZeroDivisionError("mul_div denominator is zero")
    result = (a * b) // denominator
    if result > UINT256_MAX:
        raise ArithmeticOverflow(f"uint256 overflow: {a} * {b} / {denominator}")
    return result
