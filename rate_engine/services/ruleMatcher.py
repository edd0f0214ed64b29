"""
Rule Matcher -- picks exactly one rate rule per calculation.

Precedence for margin rule sets (first hit wins, no accumulation):
1. Route      -- only when origin and destination are both given.  Exact
                 case-insensitive match first; failing that, match on the
                 first word of each side (city-level).  Declaration order
                 breaks ties.
2. Service    -- exact service-type lookup.
3. Volume tier -- only when a period volume count is given.
4. Default    -- always available on a valid rule set.

The level walk itself is the generic ``cascade`` below, which the commission
engine reuses with its own levels.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, Optional, Sequence, TypeVar

from rate_engine.models import (
    CalculationContext,
    RateRule,
    RouteRate,
    RuleOrigin,
    ScopedRuleSet,
    ServiceType,
)
from rate_engine.services.tierResolver import find_tier

logger = logging.getLogger(__name__)

R = TypeVar("R")
K = TypeVar("K")


# ---------------------------------------------------------------------------
# Generic resolution core
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ResolutionLevel(Generic[K, R]):
    """One level of a precedence chain: an origin tag and a lookup."""

    origin: K
    lookup: Callable[[], Optional[R]]


def cascade(
    levels: Sequence[ResolutionLevel[K, R]],
    default: R,
    default_origin: K,
) -> tuple[R, K]:
    """Walk ``levels`` in order and return the first hit with its origin.

    Lookups are evaluated lazily, so a level is only consulted when every
    level above it missed.
    """
    for level in levels:
        found = level.lookup()
        if found is not None:
            return found, level.origin
    return default, default_origin


# ---------------------------------------------------------------------------
# Level lookups
# ---------------------------------------------------------------------------


def _first_word(value: str) -> str:
    words = value.split()
    return words[0].lower() if words else ""


def find_route_rate(
    route_rates: Sequence[RouteRate],
    origin: str,
    destination: str,
) -> Optional[RouteRate]:
    """Find the route entry for an origin/destination pair.

    Two passes over the configured routes: full-string case-insensitive
    equality, then equality of the first whitespace-delimited word of each
    side ("Berlin Mitte" matches "berlin").
    """
    origin_key, destination_key = origin.lower(), destination.lower()
    for route in route_rates:
        if route.origin.lower() == origin_key and route.destination.lower() == destination_key:
            return route

    origin_city, destination_city = _first_word(origin), _first_word(destination)
    if not origin_city or not destination_city:
        return None
    for route in route_rates:
        if (
            _first_word(route.origin) == origin_city
            and _first_word(route.destination) == destination_city
        ):
            return route
    return None


def find_service_rate(
    service_rates: dict[ServiceType, RateRule],
    service_type: ServiceType,
) -> Optional[RateRule]:
    return service_rates.get(service_type)


# ---------------------------------------------------------------------------
# Margin resolution
# ---------------------------------------------------------------------------


def _has_text(value: Optional[str]) -> bool:
    return value is not None and value.strip() != ""


def resolve_rate_rule(
    rule_set: ScopedRuleSet,
    context: CalculationContext,
) -> tuple[RateRule, RuleOrigin]:
    """Select the single applicable rate rule for a calculation.

    Args:
        rule_set: A validated rule set for the context's subject.
        context: The revenue event being priced.

    Returns:
        ``(rate_rule, origin)`` where origin tells which level matched.

    Raises:
        ValueError: If the rule set has no default rate (it would have
            failed validation).
    """
    if rule_set.default_rate is None:
        raise ValueError(f"Rule set for subject {rule_set.subject_id} has no default rate")

    def route_lookup() -> Optional[RateRule]:
        if not (_has_text(context.origin) and _has_text(context.destination)):
            return None
        if not rule_set.route_rates:
            return None
        route = find_route_rate(rule_set.route_rates, context.origin, context.destination)
        return route.rate if route is not None else None

    def service_lookup() -> Optional[RateRule]:
        if context.service_type is None:
            return None
        return find_service_rate(rule_set.service_rates, context.service_type)

    def volume_lookup() -> Optional[RateRule]:
        if context.period_volume_count is None:
            return None
        tier = find_tier(rule_set.volume_tiers, context.period_volume_count)
        return tier.rate if tier is not None else None

    rate_rule, origin = cascade(
        [
            ResolutionLevel(RuleOrigin.ROUTE, route_lookup),
            ResolutionLevel(RuleOrigin.SERVICE, service_lookup),
            ResolutionLevel(RuleOrigin.VOLUME_TIER, volume_lookup),
        ],
        default=rule_set.default_rate,
        default_origin=RuleOrigin.DEFAULT,
    )
    logger.debug(
        "Resolved %s rate for subject %s: %s%% / min %s",
        origin.value,
        context.subject_id,
        rate_rule.percentage,
        rate_rule.minimum_amount,
    )
    return rate_rule, origin
