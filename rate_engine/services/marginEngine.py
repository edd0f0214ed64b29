"""
Margin Engine -- end-to-end margin calculation for one revenue event.

Pipeline: Rule Matcher -> Amount Calculator.  The caller supplies the active
rule set for the customer; fetching it is not this module's concern.

Also provides per-service margin suggestions used when onboarding a new
customer:
- standard:      15% / min 30
- express:       20% / min 50
- overnight:     25% / min 75
- international: 18% / min 60
- freight:       12% / min 100
- anything else: configured default (15% / min 50)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from rate_engine.core.config import settings
from rate_engine.models import (
    CalculationContext,
    CalculationMethod,
    Criterion,
    RateRule,
    RuleOrigin,
    ScopedRuleSet,
    ServiceType,
)
from rate_engine.services.amountCalculator import apply_dual_rate
from rate_engine.services.ruleMatcher import resolve_rate_rule

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MARGIN_SUGGESTIONS: dict[ServiceType, RateRule] = {
    ServiceType.STANDARD: RateRule(Decimal("15"), Decimal("30")),
    ServiceType.EXPRESS: RateRule(Decimal("20"), Decimal("50")),
    ServiceType.OVERNIGHT: RateRule(Decimal("25"), Decimal("75")),
    ServiceType.INTERNATIONAL: RateRule(Decimal("18"), Decimal("60")),
    ServiceType.FREIGHT: RateRule(Decimal("12"), Decimal("100")),
}


# ---------------------------------------------------------------------------
# Data transfer objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MarginCalculation:
    """Result of a margin calculation, including the detail block."""

    subject_id: str
    base_amount: Decimal
    margin_amount: Decimal
    effective_percentage: Decimal
    applied_rule_origin: RuleOrigin
    applied_criterion: Criterion
    resolved_rate_rule: RateRule
    percentage_amount: Decimal
    calculation_method: CalculationMethod

    @property
    def configured_percentage(self) -> Decimal:
        return self.resolved_rate_rule.percentage

    @property
    def configured_minimum(self) -> Decimal:
        return self.resolved_rate_rule.minimum_amount


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def calculate_margin(
    rule_set: ScopedRuleSet,
    context: CalculationContext,
) -> MarginCalculation:
    """Resolve the applicable rate rule and apply it to the base amount.

    Args:
        rule_set: The customer's active, validated rule set.
        context: The revenue event.

    Returns:
        A ``MarginCalculation``.

    Raises:
        ValueError: If the rule set uses a calculation method other than
            ``higher_wins`` (it would have failed validation).
    """
    if rule_set.calculation_method != CalculationMethod.HIGHER_WINS:
        raise ValueError(
            f"Calculation method {rule_set.calculation_method.value} is not supported "
            f"for subject {rule_set.subject_id}"
        )

    rate_rule, origin = resolve_rate_rule(rule_set, context)
    applied = apply_dual_rate(
        context.base_amount,
        rate_rule.percentage,
        rate_rule.minimum_amount,
    )
    logger.debug(
        "Margin for subject %s: %s via %s criterion",
        context.subject_id,
        applied.amount,
        applied.criterion.value,
    )

    return MarginCalculation(
        subject_id=context.subject_id,
        base_amount=context.base_amount,
        margin_amount=applied.amount,
        effective_percentage=applied.effective_percentage,
        applied_rule_origin=origin,
        applied_criterion=applied.criterion,
        resolved_rate_rule=rate_rule,
        percentage_amount=applied.percentage_amount,
        calculation_method=CalculationMethod.HIGHER_WINS,
    )


def suggest_margin(service_type: Optional[ServiceType]) -> RateRule:
    """Suggested starting margin for a service type."""
    suggestion = MARGIN_SUGGESTIONS.get(service_type) if service_type else None
    if suggestion is not None:
        return suggestion
    return RateRule(
        settings.default_margin_percentage,
        settings.default_minimum_margin,
    )
