"""Market conservation invariants.

INV-1: yes_pool, no_pool, fee_collected, total_paid_out are all >= 0
INV-2: total_paid_out <= yes_pool + no_pool  (no payout beyond the reservoir)
INV-3: pools never change after resolution  (checked by callers holding a snapshot)
INV-4: vault_balance == yes_pool + no_pool + fee_collected - total_paid_out
       (every unit in escrow is backed by a pool, the fee treasury, or was paid out)
"""

import logging

from src.pm_market.domain.models import Market

logger = logging.getLogger(__name__)


def check_market_invariants(market: Market, vault_balance: int | None = None) -> list[str]:
    """Return a list of violation strings (empty when consistent)."""
    violations: list[str] = []
    for name in ("yes_pool", "no_pool", "fee_collected", "total_paid_out"):
        value = getattr(market, name)
        if value < 0:
            violations.append(f"INV-1 violated: {name}={value} < 0")

    reservoir = market.yes_pool + market.no_pool
    if market.total_paid_out > reservoir:
        violations.append(
            f"INV-2 violated: total_paid_out={market.total_paid_out} > reservoir={reservoir}"
        )

    if vault_balance is not None:
        expected = reservoir + market.fee_collected - market.total_paid_out
        if vault_balance != expected:
            violations.append(
                f"INV-4 violated: vault={vault_balance} != pools({reservoir}) + "
                f"fees({market.fee_collected}) - paid({market.total_paid_out}) = {expected}"
            )
    return violations


def verify_market_invariants(market: Market, vault_balance: int | None = None) -> None:
    """Raise AssertionError on any violation; called before commit."""
    violations = check_market_invariants(market, vault_balance)
    if violations:
        for msg in violations:
            logger.error("market=%s %s", market.id, msg)
        raise AssertionError("; ".join(violations))
    logger.debug(
        "Invariants OK: market=%s, yes=%d, no=%d, fees=%d, paid=%d",
        market.id, market.yes_pool, market.no_pool,
        market.fee_collected, market.total_paid_out,
    )
