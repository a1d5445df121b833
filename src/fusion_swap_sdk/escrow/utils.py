"""Utility functions and constants for the fusion swap escrows."""

from .errors import ArithmeticOverflowError

# Fee and rate-bump bases
BASE_1E2 = 100
BASE_1E5 = 100_000

U64_MAX = 2**64 - 1

# Sentinel identity for the chain's native asset
NATIVE_ASSET = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"

# Zero address
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def _checked(value: int) -> int:
    if value < 0 or value > U64_MAX:
        raise ArithmeticOverflowError(f"Value out of uint64 range: {value}")
    return value


def mul_div_floor(value: int, numerator: int, denominator: int) -> int:
    """Compute ``floor(value * numerator / denominator)`` within uint64.

    The intermediate product is unbounded; only the result is range-checked,
    matching a 128-bit intermediate on-chain.

    Raises:
        ArithmeticOverflowError: If the result does not fit in uint64
    """
    return _checked(value * numerator // denominator)


def mul_div_ceil(value: int, numerator: int, denominator: int) -> int:
    """Compute ``ceil(value * numerator / denominator)`` within uint64.

    Raises:
        ArithmeticOverflowError: If the result does not fit in uint64
    """
    return _checked(-(-value * numerator // denominator))


def format_fee(fee: int) -> str:
    """Format a fee in parts-per-100,000 to a percentage string.

    Args:
        fee: Fee where 100000 = 100% (e.g., 250 = 0.25%)

    Returns:
        Percentage string (e.g., "0.25%")
    """
    return f"{fee * 100 / BASE_1E5:g}%"


def percent_to_fee(percent: float) -> int:
    """Convert a percentage to parts-per-100,000.

    Args:
        percent: Percentage (e.g., 0.25 for 0.25%)

    Returns:
        Fee value (e.g., 250)
    """
    return round(percent * BASE_1E5 / 100)
