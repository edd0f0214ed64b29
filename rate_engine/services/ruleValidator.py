"""
Rule Validator -- consistency checks gating activation of a rule.

Every check runs and every violation is collected, so an operator sees the
whole list in one pass.  An empty list means valid.  Nothing here mutates
or stores the candidate.
"""

from __future__ import annotations

from decimal import Decimal

from rate_engine.models import (
    CalculationMethod,
    CommissionRule,
    CommissionType,
    RateRule,
    ScopedRuleSet,
)
from rate_engine.services.tierResolver import find_tier_overlaps, sort_tiers

ZERO = Decimal("0")
HUNDRED = Decimal("100")

_PERCENTAGE_TYPES = frozenset(
    {CommissionType.MARGIN_PERCENTAGE, CommissionType.REVENUE_PERCENTAGE}
)


def _rate_violations(label: str, rate: RateRule) -> list[str]:
    errors: list[str] = []
    if rate.percentage < ZERO:
        errors.append(f"{label} percentage must be a positive number")
    elif rate.percentage > HUNDRED:
        errors.append(f"{label} percentage must not exceed 100")
    if rate.minimum_amount < ZERO:
        errors.append(f"{label} minimum amount must not be negative")
    return errors


# ---------------------------------------------------------------------------
# Margin rule sets
# ---------------------------------------------------------------------------


def validate_rule_set(rule_set: ScopedRuleSet) -> list[str]:
    """Validate a candidate margin rule set.

    Returns:
        Human-readable violations, empty when the set may be activated.
    """
    errors: list[str] = []

    if rule_set.default_rate is None:
        errors.append("Default margin rate is required")
    else:
        errors.extend(_rate_violations("Default margin", rule_set.default_rate))

    for service_type, rate in rule_set.service_rates.items():
        errors.extend(_rate_violations(f"Service margin ({service_type.value})", rate))

    for index, route in enumerate(rule_set.route_rates, start=1):
        if not route.origin.strip() or not route.destination.strip():
            errors.append(f"Route margin {index} must have origin and destination")
        errors.extend(_rate_violations(f"Route margin {index}", route.rate))

    ordered = sort_tiers(rule_set.volume_tiers)
    for index, tier in enumerate(ordered, start=1):
        if tier.min_count < 0:
            errors.append(f"Volume tier {index} minimum count must not be negative")
        if tier.max_count is not None and tier.max_count < tier.min_count:
            errors.append(f"Volume tier {index} maximum count is below its minimum count")
        errors.extend(_rate_violations(f"Volume tier {index}", tier.rate))
    for lower, upper in find_tier_overlaps(ordered):
        errors.append(f"Volume tier {lower} overlaps with tier {upper}")

    if (
        rule_set.effective_date is not None
        and rule_set.expiry_date is not None
        and rule_set.expiry_date < rule_set.effective_date
    ):
        errors.append("Expiry date must not be before the effective date")

    if rule_set.calculation_method != CalculationMethod.HIGHER_WINS:
        errors.append(
            f"Calculation method {rule_set.calculation_method.value} is not supported; "
            "use higher_wins"
        )

    return errors


# ---------------------------------------------------------------------------
# Commission rules
# ---------------------------------------------------------------------------


def validate_commission_rule(rule: CommissionRule) -> list[str]:
    """Validate a candidate commission rule; same contract as ``validate_rule_set``."""
    errors: list[str] = []

    if not rule.name.strip():
        errors.append("Commission rule name is required")

    if rule.type == CommissionType.TIERED:
        if not rule.tiers:
            errors.append("Tiered commission rules need at least one tier")
        ordered = sort_tiers(rule.tiers)
        for index, tier in enumerate(ordered, start=1):
            if tier.min_amount < ZERO:
                errors.append(f"Commission tier {index} minimum amount must not be negative")
            if tier.max_amount is not None and tier.max_amount < tier.min_amount:
                errors.append(f"Commission tier {index} maximum amount is below its minimum amount")
            if tier.rate < ZERO:
                errors.append(f"Commission tier {index} rate must not be negative")
            elif tier.rate > HUNDRED:
                errors.append(f"Commission tier {index} rate must not exceed 100")
        for lower, upper in find_tier_overlaps(ordered):
            errors.append(f"Commission tier {lower} overlaps with tier {upper}")
    elif rule.rate is None:
        errors.append(f"Commission rate is required for {rule.type.value} rules")
    elif rule.rate < ZERO:
        errors.append("Commission rate must not be negative")
    elif rule.type in _PERCENTAGE_TYPES and rule.rate > HUNDRED:
        errors.append("Commission rate must not exceed 100")

    thresholds = (
        ("Minimum margin percentage", rule.min_margin_percentage),
        ("Minimum order value", rule.min_order_value),
        ("Minimum commission amount", rule.min_commission_amount),
    )
    for label, value in thresholds:
        if value is not None and value < ZERO:
            errors.append(f"{label} must not be negative")

    if rule.effective_to is not None and rule.effective_to < rule.effective_from:
        errors.append("Effective end date must not be before the start date")

    return errors
