"""
Amount Calculator -- dual-criteria "higher value wins".

Given a base amount and a rate rule (percentage + fixed minimum):
- percentage_amount = base_amount * percentage / 100
- If percentage_amount >= minimum, the percentage wins and the effective
  percentage is the configured one.
- Otherwise the minimum wins and the effective percentage is back-computed
  as minimum / base_amount * 100 (0 for a non-positive base).
- The resulting amount is never negative.

Also hosts the inverse used for quoting (revenue needed to hit a target
margin) and the cost derived from a revenue/margin pair.

Calculations keep full ``Decimal`` precision; rounding for display happens
at the API layer.  The quoted target revenue is the exception: it is rounded
up onto the money grid so the quote always covers the target margin.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_CEILING, Decimal, localcontext

from rate_engine.models import Criterion

ZERO = Decimal("0")
HUNDRED = Decimal("100")
MONEY_QUANTUM = Decimal("0.01")


@dataclass(frozen=True)
class DualRateResult:
    amount: Decimal
    effective_percentage: Decimal
    criterion: Criterion
    percentage_amount: Decimal
    minimum_amount: Decimal


def apply_dual_rate(
    base_amount: Decimal,
    percentage: Decimal,
    minimum_amount: Decimal,
) -> DualRateResult:
    """Apply the higher-wins rule to one base amount.

    Args:
        base_amount: Revenue (or margin) the percentage applies to.
        percentage: Configured percentage, 0-100.
        minimum_amount: Configured fixed minimum, in currency units.

    Returns:
        A ``DualRateResult``.  Never raises for numeric input; a zero base
        yields an effective percentage of 0.
    """
    percentage_amount = base_amount * percentage / HUNDRED

    if percentage_amount >= minimum_amount:
        amount = percentage_amount
        criterion = Criterion.PERCENTAGE
        effective_percentage = percentage
    else:
        amount = minimum_amount
        criterion = Criterion.MINIMUM
        if base_amount > ZERO:
            effective_percentage = minimum_amount / base_amount * HUNDRED
        else:
            effective_percentage = ZERO

    return DualRateResult(
        amount=max(amount, ZERO),
        effective_percentage=effective_percentage,
        criterion=criterion,
        percentage_amount=percentage_amount,
        minimum_amount=minimum_amount,
    )


def revenue_for_target_margin(
    cost: Decimal,
    percentage: Decimal,
    minimum_amount: Decimal,
    quantum: Decimal = MONEY_QUANTUM,
) -> Decimal:
    """Smallest revenue on the ``quantum`` grid whose margin satisfies both criteria.

    The division and the final quantize both round toward +infinity, so
    applying ``apply_dual_rate`` to the result never yields less than the
    target margin.

    Raises:
        ValueError: If ``percentage`` is 100 or more; no finite revenue
            leaves that share of itself as margin.
    """
    if percentage >= HUNDRED:
        raise ValueError("Target margin percentage must be below 100")

    with localcontext() as ctx:
        ctx.rounding = ROUND_CEILING
        percentage_revenue = cost / (Decimal("1") - percentage / HUNDRED)
        minimum_revenue = cost + minimum_amount
        return max(percentage_revenue, minimum_revenue).quantize(quantum)


def cost_from_margin(revenue: Decimal, margin_amount: Decimal) -> Decimal:
    """Cost implied by a revenue and its margin, floored at zero."""
    return max(revenue - margin_amount, ZERO)
