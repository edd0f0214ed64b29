"""
Domain records for customer margin rule sets.

A ``ScopedRuleSet`` belongs to one subject (a customer) and carries a default
rate plus optional per-service, per-route and per-volume-tier overrides.
All records are frozen so one fetched rule set can be shared by concurrent
calculations without copying.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional


class ServiceType(str, enum.Enum):
    STANDARD = "standard"
    EXPRESS = "express"
    OVERNIGHT = "overnight"
    INTERNATIONAL = "international"
    FREIGHT = "freight"
    OTHER = "other"


class CalculationMethod(str, enum.Enum):
    HIGHER_WINS = "higher_wins"
    PERCENTAGE_ONLY = "percentage_only"
    MINIMUM_ONLY = "minimum_only"
    CUSTOM = "custom"


class RuleOrigin(str, enum.Enum):
    """Which resolution level produced the applied rate rule."""

    ROUTE = "route"
    SERVICE = "service"
    VOLUME_TIER = "volume_tier"
    DEFAULT = "default"


class Criterion(str, enum.Enum):
    """Which side of the dual-criteria comparison won."""

    PERCENTAGE = "percentage"
    MINIMUM = "minimum"


@dataclass(frozen=True)
class RateRule:
    percentage: Decimal
    minimum_amount: Decimal
    description: Optional[str] = None


@dataclass(frozen=True)
class RouteRate:
    origin: str
    destination: str
    rate: RateRule
    route_id: Optional[str] = None


@dataclass(frozen=True)
class VolumeTier:
    """Rate applied when the subject's period shipment count falls in
    ``[min_count, max_count]`` (both inclusive, open-ended if no max)."""

    min_count: int
    rate: RateRule
    max_count: Optional[int] = None

    @property
    def lower_bound(self) -> int:
        return self.min_count

    @property
    def upper_bound(self) -> Optional[int]:
        return self.max_count


@dataclass(frozen=True)
class ScopedRuleSet:
    subject_id: str
    default_rate: Optional[RateRule]
    service_rates: dict[ServiceType, RateRule] = field(default_factory=dict)
    route_rates: tuple[RouteRate, ...] = ()
    volume_tiers: tuple[VolumeTier, ...] = ()
    is_active: bool = True
    calculation_method: CalculationMethod = CalculationMethod.HIGHER_WINS
    effective_date: Optional[date] = None
    expiry_date: Optional[date] = None
    last_review_date: Optional[date] = None
    next_review_date: Optional[date] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class CalculationContext:
    """Everything the matcher needs about one revenue event.

    ``period_volume_count`` is precomputed by the caller; the engine never
    counts shipments itself.
    """

    subject_id: str
    base_amount: Decimal
    service_type: Optional[ServiceType] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    period_volume_count: Optional[int] = None
    margin_percentage: Optional[Decimal] = None
