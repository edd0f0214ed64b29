"""
Tier Resolver -- bucket lookup over ordered numeric ranges.

Shared by volume tiers (keyed on period shipment count) and commission tiers
(keyed on revenue).  A tier is anything exposing ``lower_bound`` and an
optional ``upper_bound``; both bounds are inclusive and a missing upper bound
means open-ended.

Resolution rules:
- Tiers are sorted ascending by lower bound before scanning, so declaration
  order never matters.
- The scan runs from the highest tier downward and returns the first tier
  containing the value.
- Falling outside every tier is a normal ``None`` result, not an error.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, Sequence, TypeVar, Union

Bound = Union[int, Decimal]


class Tier(Protocol):
    @property
    def lower_bound(self) -> Bound: ...

    @property
    def upper_bound(self) -> Optional[Bound]: ...


TierT = TypeVar("TierT", bound=Tier)


def sort_tiers(tiers: Sequence[TierT]) -> list[TierT]:
    """Return the tiers ordered by ascending lower bound (stable)."""
    return sorted(tiers, key=lambda tier: tier.lower_bound)


def find_tier(tiers: Sequence[TierT], value: Bound) -> Optional[TierT]:
    """Find the tier containing ``value``.

    Args:
        tiers: Tiers in any order.
        value: Count or amount to place.

    Returns:
        The containing tier, or ``None`` when no tier contains the value.
    """
    for tier in reversed(sort_tiers(tiers)):
        if value < tier.lower_bound:
            continue
        if tier.upper_bound is None or value <= tier.upper_bound:
            return tier
    return None


def find_tier_overlaps(tiers: Sequence[TierT]) -> list[tuple[int, int]]:
    """Return 1-based index pairs of adjacent sorted tiers that overlap.

    Tier *i* overlaps tier *i+1* when its upper bound is absent (open-ended)
    or not strictly below the next tier's lower bound.
    """
    ordered = sort_tiers(tiers)
    overlaps: list[tuple[int, int]] = []
    for index in range(len(ordered) - 1):
        current, following = ordered[index], ordered[index + 1]
        if current.upper_bound is None or current.upper_bound >= following.lower_bound:
            overlaps.append((index + 1, index + 2))
    return overlaps
