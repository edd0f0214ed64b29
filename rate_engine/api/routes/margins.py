"""
Margin API routes
=================

Stateless preview endpoints: the caller sends the customer's rule set along
with the request, the engine never stores anything.

  POST /api/v1/margins/calculate                   -- Resolve and apply a margin
  POST /api/v1/margins/validate                    -- Validate a rule set
  POST /api/v1/margins/target-revenue              -- Revenue needed for a target margin
  GET  /api/v1/margins/suggestions/{service_type}  -- Suggested margin for a service
"""

from __future__ import annotations

import logging
from decimal import Decimal

from fastapi import APIRouter, HTTPException, status

from rate_engine.api.deps import AppSettings
from rate_engine.api.schemas.margin import (
    MarginCalculateRequest,
    MarginCalculationOut,
    MarginSuggestionOut,
    RuleSetValidateRequest,
    TargetRevenueOut,
    TargetRevenueRequest,
    ValidationOut,
)
from rate_engine.core.money import quantize
from rate_engine.models import ServiceType
from rate_engine.services.amountCalculator import cost_from_margin, revenue_for_target_margin
from rate_engine.services.marginEngine import calculate_margin, suggest_margin
from rate_engine.services.ruleValidator import validate_rule_set

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/margins", tags=["Margins"])


# ---------------------------------------------------------------------------
# POST /api/v1/margins/calculate
# ---------------------------------------------------------------------------

@router.post(
    "/calculate",
    response_model=MarginCalculationOut,
    summary="Calculate the margin for a revenue event",
    description=(
        "Validates the supplied rule set, selects the applicable rate "
        "(route > service > volume tier > default) and applies the "
        "higher-wins rule between the percentage and the fixed minimum.  "
        "An invalid rule set is rejected with every violation listed."
    ),
)
async def calculate(
    body: MarginCalculateRequest,
    settings: AppSettings,
) -> MarginCalculationOut:
    rule_set = body.rule_set.to_rule_set()
    violations = validate_rule_set(rule_set)
    if violations:
        logger.info(
            "Rejected margin calculation for subject %s: %d violation(s)",
            rule_set.subject_id,
            len(violations),
        )
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": "Rule set is invalid", "violations": violations},
        )

    result = calculate_margin(rule_set, body.context.to_context(rule_set.subject_id))
    amount_quantum = settings.amount_quantum

    return MarginCalculationOut(
        subject_id=result.subject_id,
        base_amount=quantize(result.base_amount, amount_quantum),
        margin_amount=quantize(result.margin_amount, amount_quantum),
        implied_cost=quantize(
            cost_from_margin(result.base_amount, result.margin_amount), amount_quantum
        ),
        effective_percentage=quantize(result.effective_percentage, settings.percentage_quantum),
        applied_rule_origin=result.applied_rule_origin,
        applied_criterion=result.applied_criterion,
        configured_percentage=result.configured_percentage,
        configured_minimum=result.configured_minimum,
        percentage_amount=quantize(result.percentage_amount, amount_quantum),
        calculation_method=result.calculation_method,
    )


# ---------------------------------------------------------------------------
# POST /api/v1/margins/validate
# ---------------------------------------------------------------------------

@router.post(
    "/validate",
    response_model=ValidationOut,
    summary="Validate a margin rule set",
)
async def validate(body: RuleSetValidateRequest) -> ValidationOut:
    violations = validate_rule_set(body.rule_set.to_rule_set())
    return ValidationOut(valid=not violations, violations=violations)


# ---------------------------------------------------------------------------
# POST /api/v1/margins/target-revenue
# ---------------------------------------------------------------------------

@router.post(
    "/target-revenue",
    response_model=TargetRevenueOut,
    summary="Revenue required to reach a target margin over a cost",
    description=(
        "The revenue is rounded up to the configured amount quantum, so the "
        "quoted price never falls short of the target margin."
    ),
)
async def target_revenue(
    body: TargetRevenueRequest,
    settings: AppSettings,
) -> TargetRevenueOut:
    try:
        revenue = revenue_for_target_margin(
            body.cost,
            body.percentage,
            body.minimum_amount,
            quantum=Decimal(settings.amount_quantum),
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        )
    return TargetRevenueOut(
        cost=quantize(body.cost, settings.amount_quantum),
        revenue=revenue,
        margin_amount=quantize(revenue - body.cost, settings.amount_quantum),
    )


# ---------------------------------------------------------------------------
# GET /api/v1/margins/suggestions/{service_type}
# ---------------------------------------------------------------------------

@router.get(
    "/suggestions/{service_type}",
    response_model=MarginSuggestionOut,
    summary="Suggested starting margin for a service type",
)
async def suggestion(service_type: ServiceType) -> MarginSuggestionOut:
    suggested = suggest_margin(service_type)
    return MarginSuggestionOut(
        service_type=service_type,
        percentage=suggested.percentage,
        minimum_amount=suggested.minimum_amount,
    )
