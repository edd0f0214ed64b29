"""
Commission Engine -- employee commission per revenue event.

Commission types:
- margin_percentage:  rate% of the margin (revenue - cost)
- revenue_percentage: rate% of the revenue
- fixed_amount:       flat ``rate`` per qualifying event
- tiered:             revenue is placed in a tier, tier.rate% of the revenue

Eligibility (all must hold, otherwise the rule is skipped):
- rule is active and scoped to the employee (or unscoped)
- effective_from <= as_of <= effective_to (open end allowed)
- service type / category / product allow-lists contain the context value
  when both sides are present
- margin percentage and order value meet the rule's thresholds

Candidates are tried highest priority first; the first eligible rule wins.
An optional ``min_commission_amount`` acts as a floor through the same
higher-wins rule used for margins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Callable, Optional, Sequence, TypeVar

from rate_engine.core.config import settings
from rate_engine.models import (
    CommissionContext,
    CommissionRule,
    CommissionTier,
    CommissionType,
    Criterion,
)
from rate_engine.services.amountCalculator import apply_dual_rate
from rate_engine.services.ruleMatcher import ResolutionLevel, cascade
from rate_engine.services.tierResolver import find_tier

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Data transfer objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CommissionBasis:
    """What a commission type computes before the floor is applied."""

    base_amount: Decimal
    commission_rate: Decimal
    is_fixed: bool = False
    applied_tier: Optional[CommissionTier] = None


@dataclass(frozen=True)
class CommissionCalculation:
    rule_id: str
    commission_type: CommissionType
    base_amount: Decimal
    margin: Optional[Decimal]
    margin_percentage: Optional[Decimal]
    commission_rate: Decimal
    commission_amount: Decimal
    applied_tier: Optional[CommissionTier]
    minimum_applied: bool
    auto_approve: bool


# ---------------------------------------------------------------------------
# Eligibility
# ---------------------------------------------------------------------------


def _allowed(allow_list: Optional[Sequence[T]], value: Optional[T]) -> bool:
    if not allow_list or value is None:
        return True
    return value in allow_list


def _today() -> date:
    return datetime.now(timezone.utc).date()


def does_rule_match(
    rule: CommissionRule,
    context: CommissionContext,
    as_of: Optional[date] = None,
) -> bool:
    """Return True when ``rule`` may be applied to ``context`` on ``as_of``.

    An empty allow-list places no restriction.  A margin threshold cannot be
    met when the context carries no cost.
    """
    as_of = as_of or _today()

    if not rule.is_active:
        return False
    if rule.employee_id is not None and rule.employee_id != context.employee_id:
        return False
    if rule.effective_from > as_of:
        return False
    if rule.effective_to is not None and rule.effective_to < as_of:
        return False

    if not _allowed(rule.service_types, context.service_type):
        return False
    if not _allowed(rule.applicable_categories, context.category):
        return False
    if not _allowed(rule.applicable_products, context.product):
        return False

    if rule.min_margin_percentage is not None:
        margin_percentage = context.margin_percentage
        if margin_percentage is None or margin_percentage < rule.min_margin_percentage:
            return False
    if rule.min_order_value is not None and context.revenue < rule.min_order_value:
        return False

    return True


# ---------------------------------------------------------------------------
# Per-type bases
# ---------------------------------------------------------------------------


def _margin_basis(rule: CommissionRule, context: CommissionContext) -> CommissionBasis:
    margin = context.margin
    if margin is None:
        logger.warning(
            "Rule %s pays on margin but no cost was supplied; commission base is 0",
            rule.id,
        )
        margin = ZERO
    return CommissionBasis(base_amount=margin, commission_rate=rule.rate or ZERO)


def _revenue_basis(rule: CommissionRule, context: CommissionContext) -> CommissionBasis:
    return CommissionBasis(base_amount=context.revenue, commission_rate=rule.rate or ZERO)


def _fixed_basis(rule: CommissionRule, context: CommissionContext) -> CommissionBasis:
    return CommissionBasis(
        base_amount=context.revenue,
        commission_rate=rule.rate or ZERO,
        is_fixed=True,
    )


def _tiered_basis(rule: CommissionRule, context: CommissionContext) -> CommissionBasis:
    tier = find_tier(rule.tiers, context.revenue)
    if tier is None:
        logger.debug("Revenue %s falls outside every tier of rule %s", context.revenue, rule.id)
        return CommissionBasis(base_amount=context.revenue, commission_rate=ZERO)
    return CommissionBasis(
        base_amount=context.revenue,
        commission_rate=tier.rate,
        applied_tier=tier,
    )


_BASIS_BY_TYPE: dict[CommissionType, Callable[[CommissionRule, CommissionContext], CommissionBasis]] = {
    CommissionType.MARGIN_PERCENTAGE: _margin_basis,
    CommissionType.REVENUE_PERCENTAGE: _revenue_basis,
    CommissionType.FIXED_AMOUNT: _fixed_basis,
    CommissionType.TIERED: _tiered_basis,
}

_unhandled = set(CommissionType) - set(_BASIS_BY_TYPE)
if _unhandled:
    raise RuntimeError(f"Commission types without a calculator: {sorted(t.value for t in _unhandled)}")


# ---------------------------------------------------------------------------
# Calculation
# ---------------------------------------------------------------------------


def calculate_commission(
    rule: CommissionRule,
    context: CommissionContext,
) -> CommissionCalculation:
    """Apply one commission rule to a revenue event.

    Eligibility is not checked here; see ``does_rule_match`` and
    ``resolve_commission``.  The resulting amount is never negative.
    """
    basis = _BASIS_BY_TYPE[rule.type](rule, context)
    floor = rule.min_commission_amount if rule.min_commission_amount is not None else ZERO

    if basis.is_fixed:
        amount = max(basis.commission_rate, floor, ZERO)
        minimum_applied = floor > basis.commission_rate
    else:
        applied = apply_dual_rate(basis.base_amount, basis.commission_rate, floor)
        amount = applied.amount
        minimum_applied = (
            rule.min_commission_amount is not None
            and applied.criterion == Criterion.MINIMUM
        )

    return CommissionCalculation(
        rule_id=rule.id,
        commission_type=rule.type,
        base_amount=basis.base_amount,
        margin=context.margin,
        margin_percentage=context.margin_percentage,
        commission_rate=basis.commission_rate,
        commission_amount=amount,
        applied_tier=basis.applied_tier,
        minimum_applied=minimum_applied,
        auto_approve=rule.auto_approve,
    )


def rank_rules(rules: Sequence[CommissionRule]) -> list[CommissionRule]:
    """Order candidate rules by descending priority, keeping input order on ties."""
    return sorted(rules, key=lambda rule: -rule.priority)


def select_commission_rule(
    rules: Sequence[CommissionRule],
    context: CommissionContext,
    as_of: Optional[date] = None,
    default_rule: Optional[CommissionRule] = None,
) -> Optional[CommissionRule]:
    """Pick the highest-priority eligible rule, else ``default_rule``."""
    as_of = as_of or _today()

    def eligible(rule: CommissionRule) -> Callable[[], Optional[CommissionRule]]:
        return lambda: rule if does_rule_match(rule, context, as_of) else None

    selected, _ = cascade(
        [ResolutionLevel(rule.id, eligible(rule)) for rule in rank_rules(rules)],
        default=default_rule,
        default_origin=None,
    )
    return selected


def resolve_commission(
    rules: Sequence[CommissionRule],
    context: CommissionContext,
    as_of: Optional[date] = None,
    default_rule: Optional[CommissionRule] = None,
) -> Optional[CommissionCalculation]:
    """Select a rule for the context and calculate its commission.

    Returns:
        The calculation, or ``None`` when no candidate is eligible and no
        default rule was given.
    """
    rule = select_commission_rule(rules, context, as_of, default_rule)
    if rule is None:
        logger.info("No eligible commission rule for employee %s", context.employee_id)
        return None
    return calculate_commission(rule, context)


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------


def _plain(value: Decimal) -> str:
    return f"{value.normalize():f}"


def format_rule_type(
    rule_type: CommissionType,
    rate: Optional[Decimal] = None,
    tiers: Sequence[CommissionTier] = (),
    currency: Optional[str] = None,
) -> str:
    """Short human-readable label for a commission rule."""
    currency = currency or settings.currency
    if rule_type == CommissionType.TIERED:
        noun = "tier" if len(tiers) == 1 else "tiers"
        return f"Tiered ({len(tiers)} {noun})"
    if rate is None:
        return rule_type.value.replace("_", " ").capitalize()
    if rule_type == CommissionType.MARGIN_PERCENTAGE:
        return f"{_plain(rate)}% of margin"
    if rule_type == CommissionType.REVENUE_PERCENTAGE:
        return f"{_plain(rate)}% of revenue"
    return f"{_plain(rate)} {currency} fixed"
