"""
Pydantic v2 schemas for the Margin API.

Covers:
- Rule set and calculation context payloads (converted to domain records)
- Margin calculation, validation and target-revenue responses
- Per-service margin suggestions

Numeric range checks on rates are deliberately left to the rule validator so
that every violation is reported together rather than one field at a time.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from rate_engine.models import (
    CalculationContext,
    CalculationMethod,
    Criterion,
    RateRule,
    RouteRate,
    RuleOrigin,
    ScopedRuleSet,
    ServiceType,
    VolumeTier,
)


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class RateRuleIn(BaseModel):
    """A percentage margin with a fixed minimum."""

    percentage: Decimal = Field(description="Margin percentage (0-100)")
    minimum_amount: Decimal = Field(description="Fixed minimum margin in currency units")
    description: Optional[str] = None

    def to_rate_rule(self) -> RateRule:
        return RateRule(
            percentage=self.percentage,
            minimum_amount=self.minimum_amount,
            description=self.description,
        )


class RouteRateIn(RateRuleIn):
    origin: str = Field(description="Origin city or full location")
    destination: str = Field(description="Destination city or full location")
    route_id: Optional[str] = None

    def to_route_rate(self) -> RouteRate:
        return RouteRate(
            origin=self.origin,
            destination=self.destination,
            rate=self.to_rate_rule(),
            route_id=self.route_id,
        )


class VolumeTierIn(RateRuleIn):
    min_count: int = Field(description="Inclusive lower bound on period shipment count")
    max_count: Optional[int] = Field(
        default=None,
        description="Inclusive upper bound; omit for an open-ended tier",
    )

    def to_volume_tier(self) -> VolumeTier:
        return VolumeTier(
            min_count=self.min_count,
            max_count=self.max_count,
            rate=self.to_rate_rule(),
        )


class RuleSetIn(BaseModel):
    """A customer's margin rule set as supplied by the caller's store."""

    subject_id: str = Field(description="Customer the rule set belongs to")
    default_rate: Optional[RateRuleIn] = None
    service_rates: dict[ServiceType, RateRuleIn] = Field(default_factory=dict)
    route_rates: list[RouteRateIn] = Field(default_factory=list)
    volume_tiers: list[VolumeTierIn] = Field(default_factory=list)
    is_active: bool = True
    calculation_method: CalculationMethod = CalculationMethod.HIGHER_WINS
    effective_date: Optional[date] = None
    expiry_date: Optional[date] = None
    last_review_date: Optional[date] = None
    next_review_date: Optional[date] = None
    notes: Optional[str] = None

    def to_rule_set(self) -> ScopedRuleSet:
        return ScopedRuleSet(
            subject_id=self.subject_id,
            default_rate=self.default_rate.to_rate_rule() if self.default_rate else None,
            service_rates={
                service_type: rate.to_rate_rule()
                for service_type, rate in self.service_rates.items()
            },
            route_rates=tuple(route.to_route_rate() for route in self.route_rates),
            volume_tiers=tuple(tier.to_volume_tier() for tier in self.volume_tiers),
            is_active=self.is_active,
            calculation_method=self.calculation_method,
            effective_date=self.effective_date,
            expiry_date=self.expiry_date,
            last_review_date=self.last_review_date,
            next_review_date=self.next_review_date,
            notes=self.notes,
        )


class CalculationContextIn(BaseModel):
    base_amount: Decimal = Field(description="Revenue the margin applies to")
    service_type: Optional[ServiceType] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    period_volume_count: Optional[int] = Field(
        default=None,
        ge=0,
        description="Shipments for the customer in the current period",
    )
    margin_percentage: Optional[Decimal] = None

    def to_context(self, subject_id: str) -> CalculationContext:
        return CalculationContext(
            subject_id=subject_id,
            base_amount=self.base_amount,
            service_type=self.service_type,
            origin=self.origin,
            destination=self.destination,
            period_volume_count=self.period_volume_count,
            margin_percentage=self.margin_percentage,
        )


class MarginCalculateRequest(BaseModel):
    rule_set: RuleSetIn
    context: CalculationContextIn


class RuleSetValidateRequest(BaseModel):
    rule_set: RuleSetIn


class TargetRevenueRequest(BaseModel):
    cost: Decimal = Field(ge=0, description="Cost to be covered")
    percentage: Decimal = Field(ge=0, description="Target margin percentage")
    minimum_amount: Decimal = Field(ge=0, description="Target minimum margin")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class MarginCalculationOut(BaseModel):
    """Margin calculation with the detail block."""

    model_config = ConfigDict(from_attributes=True)

    subject_id: str
    base_amount: Decimal
    margin_amount: Decimal
    implied_cost: Decimal = Field(description="Base amount minus margin, floored at 0")
    effective_percentage: Decimal
    applied_rule_origin: RuleOrigin
    applied_criterion: Criterion
    configured_percentage: Decimal
    configured_minimum: Decimal
    percentage_amount: Decimal
    calculation_method: CalculationMethod


class ValidationOut(BaseModel):
    valid: bool
    violations: list[str]


class TargetRevenueOut(BaseModel):
    cost: Decimal
    revenue: Decimal
    margin_amount: Decimal


class MarginSuggestionOut(BaseModel):
    service_type: ServiceType
    percentage: Decimal
    minimum_amount: Decimal
