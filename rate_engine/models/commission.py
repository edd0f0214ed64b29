"""
Domain records for employee commission rules.

Commission rules are keyed by commission type rather than by route/service,
and carry an eligibility envelope (validity window, allow-lists, thresholds)
evaluated before a rule is applied.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from .rules import ServiceType


class CommissionType(str, enum.Enum):
    MARGIN_PERCENTAGE = "margin_percentage"
    REVENUE_PERCENTAGE = "revenue_percentage"
    FIXED_AMOUNT = "fixed_amount"
    TIERED = "tiered"


@dataclass(frozen=True)
class CommissionTier:
    """Revenue bracket ``[min_amount, max_amount]`` paying ``rate`` percent."""

    min_amount: Decimal
    rate: Decimal
    max_amount: Optional[Decimal] = None
    description: Optional[str] = None

    @property
    def lower_bound(self) -> Decimal:
        return self.min_amount

    @property
    def upper_bound(self) -> Optional[Decimal]:
        return self.max_amount


@dataclass(frozen=True)
class CommissionRule:
    id: str
    name: str
    type: CommissionType
    effective_from: date
    rate: Optional[Decimal] = None
    tiers: tuple[CommissionTier, ...] = ()
    employee_id: Optional[str] = None
    service_types: Optional[tuple[ServiceType, ...]] = None
    applicable_categories: Optional[tuple[str, ...]] = None
    applicable_products: Optional[tuple[str, ...]] = None
    min_margin_percentage: Optional[Decimal] = None
    min_order_value: Optional[Decimal] = None
    min_commission_amount: Optional[Decimal] = None
    priority: int = 0
    auto_approve: bool = False
    effective_to: Optional[date] = None
    is_active: bool = True


@dataclass(frozen=True)
class CommissionContext:
    employee_id: str
    revenue: Decimal
    cost: Optional[Decimal] = None
    service_type: Optional[ServiceType] = None
    category: Optional[str] = None
    product: Optional[str] = None

    @property
    def margin(self) -> Optional[Decimal]:
        if self.cost is None:
            return None
        return self.revenue - self.cost

    @property
    def margin_percentage(self) -> Optional[Decimal]:
        margin = self.margin
        if margin is None:
            return None
        if self.revenue == 0:
            return Decimal("0")
        return margin / self.revenue * Decimal("100")
