"""
Shared pytest fixtures for rate engine unit tests.

Provides sample margin rule sets, calculation contexts and commission rules
that mirror what the rule store hands to the engine.
"""

from datetime import date
from decimal import Decimal

import pytest

from rate_engine.models import (
    CalculationContext,
    CommissionContext,
    CommissionRule,
    CommissionTier,
    CommissionType,
    RateRule,
    RouteRate,
    ScopedRuleSet,
    ServiceType,
    VolumeTier,
)


def make_rate(percentage: str, minimum: str) -> RateRule:
    return RateRule(percentage=Decimal(percentage), minimum_amount=Decimal(minimum))


# ---------------------------------------------------------------------------
# Margin rule sets
# ---------------------------------------------------------------------------


@pytest.fixture
def default_rate() -> RateRule:
    return make_rate("10", "50")


@pytest.fixture
def express_rate() -> RateRule:
    return make_rate("20", "30")


@pytest.fixture
def route_rate() -> RateRule:
    return make_rate("12", "40")


@pytest.fixture
def sample_rule_set(default_rate, express_rate, route_rate) -> ScopedRuleSet:
    """Customer rule set with one override on every resolution level.

    - default:  10% / min 50
    - express:  20% / min 30
    - route Berlin -> Munich: 12% / min 40
    - volume:   0-9 shipments 5% / min 20, 10+ shipments 8% / min 20
    """
    return ScopedRuleSet(
        subject_id="cust-001",
        default_rate=default_rate,
        service_rates={ServiceType.EXPRESS: express_rate},
        route_rates=(
            RouteRate(origin="Berlin", destination="Munich", rate=route_rate, route_id="r-1"),
        ),
        volume_tiers=(
            VolumeTier(min_count=10, max_count=None, rate=make_rate("8", "20")),
            VolumeTier(min_count=0, max_count=9, rate=make_rate("5", "20")),
        ),
        effective_date=date(2026, 1, 1),
    )


@pytest.fixture
def sample_context() -> CalculationContext:
    return CalculationContext(subject_id="cust-001", base_amount=Decimal("1000"))


# ---------------------------------------------------------------------------
# Commission rules
# ---------------------------------------------------------------------------


@pytest.fixture
def margin_commission_rule() -> CommissionRule:
    return CommissionRule(
        id="cr-margin",
        name="Margin share",
        type=CommissionType.MARGIN_PERCENTAGE,
        rate=Decimal("10"),
        effective_from=date(2026, 1, 1),
    )


@pytest.fixture
def tiered_commission_rule() -> CommissionRule:
    return CommissionRule(
        id="cr-tiered",
        name="Revenue tiers",
        type=CommissionType.TIERED,
        tiers=(
            CommissionTier(min_amount=Decimal("0"), max_amount=Decimal("999.99"), rate=Decimal("2")),
            CommissionTier(min_amount=Decimal("1000"), max_amount=Decimal("4999.99"), rate=Decimal("3")),
            CommissionTier(min_amount=Decimal("5000"), rate=Decimal("5")),
        ),
        effective_from=date(2026, 1, 1),
    )


@pytest.fixture
def commission_context() -> CommissionContext:
    return CommissionContext(
        employee_id="emp-7",
        revenue=Decimal("2000"),
        cost=Decimal("1500"),
        service_type=ServiceType.EXPRESS,
        category="parcel",
        product="next-day",
    )
