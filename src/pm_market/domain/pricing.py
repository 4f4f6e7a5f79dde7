"""PricingEngine — constant-product output for a single-sided deposit.

    tokens_out = floor(amount * P / (P + amount))

where P is the chosen side's pool before the deposit. Pure functions, no state.

Curve bounds: tokens_out < P + amount always; tokens_out -> P as amount grows;
tokens_out -> 0 as amount shrinks. An empty pool (P = 0) yields 0 for any deposit,
so a market seeded with zero liquidity cannot be bootstrapped.
"""

from src.pm_common.units import mul_div_floor, saturating_add, validate_amount


def tokens_out(pool: int, amount: int) -> int:
    validate_amount(amount)
    denominator = saturating_add(pool, amount)
    return mul_div_floor(amount, pool, denominator)


def implied_yes_probability(yes_pool: int, no_pool: int) -> float | None:
    """Share of the reservoir backing YES; None for an empty market."""
    total = yes_pool + no_pool
    if total == 0:
        return None
    return yes_pool / total
