"""
S3 request cost and size conversion utilities.

Cost formula: cost = api_calls * (0.005 / 1000), rounded to 6 places.
Sizes are reported in decimal gigabytes (1 GB = 1,000,000,000 bytes),
not GiB, so figures stay comparable across runs.
"""

from decimal import ROUND_HALF_UP, Decimal

from .config import LIST_PRICE_PER_1000

BYTES_PER_DECIMAL_GB = 1000 * 1000 * 1000

_COST_QUANTUM = Decimal("0.000001")
_GB_QUANTUM = Decimal("0.0001")


def estimate_cost_usd(api_calls: int) -> Decimal:
    """
    Estimate the USD cost of a number of ListObjectsV2 requests.

    Args:
        api_calls: Number of list requests issued

    Returns:
        Decimal: Cost rounded to 6 decimal places

    Raises:
        ValueError: If api_calls is negative
    """
    if api_calls < 0:
        raise ValueError(f"api_calls must be non-negative, got {api_calls}")
    cost = Decimal(api_calls) * (Decimal(LIST_PRICE_PER_1000) / Decimal(1000))
    return cost.quantize(_COST_QUANTUM, rounding=ROUND_HALF_UP)


def bytes_to_decimal_gb(num_bytes: int) -> Decimal:
    """
    Convert a byte count to decimal gigabytes rounded to 4 places.

    Raises:
        ValueError: If num_bytes is negative
    """
    if num_bytes < 0:
        raise ValueError(f"num_bytes must be non-negative, got {num_bytes}")
    gigabytes = Decimal(num_bytes) / Decimal(BYTES_PER_DECIMAL_GB)
    return gigabytes.quantize(_GB_QUANTUM, rounding=ROUND_HALF_UP)
