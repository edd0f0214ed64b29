"""
Rate engine domain records
==========================

Central import point for margin and commission records.

Usage::

    from rate_engine.models import ScopedRuleSet, CalculationContext
"""

# -- Margin rule sets --
from .rules import (
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

# -- Commission rules --
from .commission import (
    CommissionContext,
    CommissionRule,
    CommissionTier,
    CommissionType,
)

__all__ = [
    "CalculationContext",
    "CalculationMethod",
    "CommissionContext",
    "CommissionRule",
    "CommissionTier",
    "CommissionType",
    "Criterion",
    "RateRule",
    "RouteRate",
    "RuleOrigin",
    "ScopedRuleSet",
    "ServiceType",
    "VolumeTier",
]
