"""
Pydantic v2 schemas for the Commission API.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from rate_engine.models import (
    CommissionContext,
    CommissionRule,
    CommissionTier,
    CommissionType,
    ServiceType,
)


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class CommissionTierIn(BaseModel):
    min_amount: Decimal = Field(description="Inclusive lower revenue bound")
    max_amount: Optional[Decimal] = Field(
        default=None,
        description="Inclusive upper revenue bound; omit for an open-ended tier",
    )
    rate: Decimal = Field(description="Commission percentage for this tier")
    description: Optional[str] = None

    def to_tier(self) -> CommissionTier:
        return CommissionTier(
            min_amount=self.min_amount,
            max_amount=self.max_amount,
            rate=self.rate,
            description=self.description,
        )


class CommissionRuleIn(BaseModel):
    id: str
    name: str
    type: CommissionType
    effective_from: date
    effective_to: Optional[date] = None
    rate: Optional[Decimal] = Field(
        default=None,
        description="Percentage for percentage types, flat amount for fixed_amount",
    )
    tiers: list[CommissionTierIn] = Field(default_factory=list)
    employee_id: Optional[str] = None
    service_types: Optional[list[ServiceType]] = None
    applicable_categories: Optional[list[str]] = None
    applicable_products: Optional[list[str]] = None
    min_margin_percentage: Optional[Decimal] = None
    min_order_value: Optional[Decimal] = None
    min_commission_amount: Optional[Decimal] = None
    priority: int = 0
    auto_approve: bool = False
    is_active: bool = True

    def to_rule(self) -> CommissionRule:
        return CommissionRule(
            id=self.id,
            name=self.name,
            type=self.type,
            effective_from=self.effective_from,
            effective_to=self.effective_to,
            rate=self.rate,
            tiers=tuple(tier.to_tier() for tier in self.tiers),
            employee_id=self.employee_id,
            service_types=tuple(self.service_types) if self.service_types is not None else None,
            applicable_categories=(
                tuple(self.applicable_categories)
                if self.applicable_categories is not None
                else None
            ),
            applicable_products=(
                tuple(self.applicable_products)
                if self.applicable_products is not None
                else None
            ),
            min_margin_percentage=self.min_margin_percentage,
            min_order_value=self.min_order_value,
            min_commission_amount=self.min_commission_amount,
            priority=self.priority,
            auto_approve=self.auto_approve,
            is_active=self.is_active,
        )


class CommissionContextIn(BaseModel):
    employee_id: str
    revenue: Decimal
    cost: Optional[Decimal] = None
    service_type: Optional[ServiceType] = None
    category: Optional[str] = None
    product: Optional[str] = None

    def to_context(self) -> CommissionContext:
        return CommissionContext(
            employee_id=self.employee_id,
            revenue=self.revenue,
            cost=self.cost,
            service_type=self.service_type,
            category=self.category,
            product=self.product,
        )


class CommissionCalculateRequest(BaseModel):
    rules: list[CommissionRuleIn] = Field(
        default_factory=list,
        description="Candidate rules; tried highest priority first",
    )
    context: CommissionContextIn
    as_of: Optional[date] = Field(
        default=None,
        description="Evaluation date (YYYY-MM-DD). If omitted, defaults to today.",
    )
    default_rule: Optional[CommissionRuleIn] = Field(
        default=None,
        description="Fallback applied when no candidate is eligible",
    )


class CommissionRuleValidateRequest(BaseModel):
    rule: CommissionRuleIn


class RuleTypeDescribeRequest(BaseModel):
    type: CommissionType
    rate: Optional[Decimal] = None
    tiers: list[CommissionTierIn] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class CommissionTierOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    min_amount: Decimal
    max_amount: Optional[Decimal] = None
    rate: Decimal
    description: Optional[str] = None


class CommissionCalculationOut(BaseModel):
    rule_id: str
    commission_type: CommissionType
    rule_label: str
    base_amount: Decimal
    margin: Optional[Decimal] = None
    margin_percentage: Optional[Decimal] = None
    commission_rate: Decimal
    commission_amount: Decimal
    applied_tier: Optional[CommissionTierOut] = None
    minimum_applied: bool
    auto_approve: bool


class RuleTypeDescriptionOut(BaseModel):
    label: str
