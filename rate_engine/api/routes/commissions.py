"""
Commission API routes
=====================

  POST /api/v1/commissions/calculate  -- Pick the eligible rule and compute commission
  POST /api/v1/commissions/validate   -- Validate a commission rule
  POST /api/v1/commissions/describe   -- Display label for a rule type
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from rate_engine.api.deps import AppSettings
from rate_engine.api.schemas.commission import (
    CommissionCalculateRequest,
    CommissionCalculationOut,
    CommissionRuleValidateRequest,
    CommissionTierOut,
    RuleTypeDescribeRequest,
    RuleTypeDescriptionOut,
)
from rate_engine.api.schemas.margin import ValidationOut
from rate_engine.core.money import quantize, quantize_optional
from rate_engine.services.commissionEngine import (
    calculate_commission,
    format_rule_type,
    select_commission_rule,
)
from rate_engine.services.ruleValidator import validate_commission_rule

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/commissions", tags=["Commissions"])


# ---------------------------------------------------------------------------
# POST /api/v1/commissions/calculate
# ---------------------------------------------------------------------------

@router.post(
    "/calculate",
    response_model=CommissionCalculationOut,
    summary="Calculate the commission for a revenue event",
    description=(
        "Candidate rules are validated, ranked by priority and checked for "
        "eligibility (validity window, allow-lists, margin and order-value "
        "thresholds).  The first eligible rule, or the supplied default, is "
        "applied.  Returns 404 when nothing applies."
    ),
)
async def calculate(
    body: CommissionCalculateRequest,
    settings: AppSettings,
) -> CommissionCalculationOut:
    candidates = [rule.to_rule() for rule in body.rules]
    default_rule = body.default_rule.to_rule() if body.default_rule else None

    violations: list[str] = []
    for rule in candidates + ([default_rule] if default_rule else []):
        violations.extend(f"{rule.id}: {error}" for error in validate_commission_rule(rule))
    if violations:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": "Commission rules are invalid", "violations": violations},
        )

    context = body.context.to_context()
    rule = select_commission_rule(candidates, context, body.as_of, default_rule)
    if rule is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No commission rule found for employee {context.employee_id}",
        )

    result = calculate_commission(rule, context)
    return CommissionCalculationOut(
        rule_id=result.rule_id,
        commission_type=result.commission_type,
        rule_label=format_rule_type(rule.type, rule.rate, rule.tiers, settings.currency),
        base_amount=quantize(result.base_amount, settings.amount_quantum),
        margin=quantize_optional(result.margin, settings.amount_quantum),
        margin_percentage=quantize_optional(result.margin_percentage, settings.percentage_quantum),
        commission_rate=result.commission_rate,
        commission_amount=quantize(result.commission_amount, settings.amount_quantum),
        applied_tier=(
            CommissionTierOut.model_validate(result.applied_tier)
            if result.applied_tier is not None
            else None
        ),
        minimum_applied=result.minimum_applied,
        auto_approve=result.auto_approve,
    )


# ---------------------------------------------------------------------------
# POST /api/v1/commissions/validate
# ---------------------------------------------------------------------------

@router.post(
    "/validate",
    response_model=ValidationOut,
    summary="Validate a commission rule",
)
async def validate(body: CommissionRuleValidateRequest) -> ValidationOut:
    violations = validate_commission_rule(body.rule.to_rule())
    return ValidationOut(valid=not violations, violations=violations)


# ---------------------------------------------------------------------------
# POST /api/v1/commissions/describe
# ---------------------------------------------------------------------------

@router.post(
    "/describe",
    response_model=RuleTypeDescriptionOut,
    summary="Human-readable label for a commission rule type",
)
async def describe(
    body: RuleTypeDescribeRequest,
    settings: AppSettings,
) -> RuleTypeDescriptionOut:
    tiers = [tier.to_tier() for tier in body.tiers]
    return RuleTypeDescriptionOut(
        label=format_rule_type(body.type, body.rate, tiers, settings.currency)
    )
