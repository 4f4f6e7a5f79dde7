"""Saturating unsigned 64-bit arithmetic for collateral and token amounts.

All pools, deposits, tokens and rewards are int base units in [0, U64_MAX].
No float, no Decimal. Results clamp to the representable range instead of wrapping;
products are formed at 128-bit width before dividing.
"""

from src.pm_common.errors import InvalidAmountError

U64_MAX = (1 << 64) - 1
U128_MAX = (1 << 128) - 1


def is_valid_amount(amount: int) -> bool:
    """Strictly positive and representable as u64."""
    return 0 < amount <= U64_MAX


def saturating_add(a: int, b: int) -> int:
    return min(a + b, U64_MAX)


def saturating_sub(a: int, b: int) -> int:
    return max(a - b, 0)


def mul_div_floor(a: int, b: int, divisor: int) -> int:
    """floor(a * b / divisor) with a saturating 128-bit product, clamped to u64."""
    if divisor <= 0:
        raise ValueError(f"divisor must be positive, got {divisor}")
    product = min(a * b, U128_MAX)
    return min(product // divisor, U64_MAX)


def ceil_div(numerator: int, divisor: int) -> int:
    """Integer ceiling division: (a + b - 1) // b."""
    return (numerator + divisor - 1) // divisor


def validate_amount(amount: int) -> None:
    """Raise InvalidAmountError unless 0 < amount <= U64_MAX."""
    if not is_valid_amount(amount):
        raise InvalidAmountError(amount)
