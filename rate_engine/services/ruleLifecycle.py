"""
Rule set lifecycle helpers.

Rule sets are immutable records; every transition here returns a new
record and leaves the input untouched.  Persisting the result (and keeping
at most one active set per subject) belongs to the caller's store.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import date, timedelta
from typing import Any, Iterable, Optional

from rate_engine.core.config import settings
from rate_engine.core.exceptions import RuleSetNotFoundError, RuleSetValidationError
from rate_engine.models import ScopedRuleSet
from rate_engine.services.ruleValidator import validate_rule_set

logger = logging.getLogger(__name__)


def _ensure_valid(rule_set: ScopedRuleSet) -> ScopedRuleSet:
    violations = validate_rule_set(rule_set)
    if violations:
        logger.info(
            "Rejected rule set for subject %s with %d violation(s)",
            rule_set.subject_id,
            len(violations),
        )
        raise RuleSetValidationError(violations)
    return rule_set


def activate_rule_set(candidate: ScopedRuleSet) -> ScopedRuleSet:
    """Validate ``candidate`` and return it marked active.

    Raises:
        RuleSetValidationError: With every violation when the candidate is
            inconsistent.
    """
    _ensure_valid(candidate)
    return dataclasses.replace(candidate, is_active=True)


def update_rule_set(rule_set: ScopedRuleSet, **changes: Any) -> ScopedRuleSet:
    """Replace fields on a rule set and re-validate the result."""
    return _ensure_valid(dataclasses.replace(rule_set, **changes))


def deactivate_rule_set(rule_set: ScopedRuleSet) -> ScopedRuleSet:
    return dataclasses.replace(rule_set, is_active=False)


def next_review_date(from_date: date, frequency_days: Optional[int] = None) -> date:
    days = settings.review_frequency_days if frequency_days is None else frequency_days
    return from_date + timedelta(days=days)


def review_rule_set(
    rule_set: ScopedRuleSet,
    reviewed_on: date,
    frequency_days: Optional[int] = None,
) -> ScopedRuleSet:
    """Record a review: stamp the review date and schedule the next one.

    Rates are left unchanged.
    """
    return dataclasses.replace(
        rule_set,
        last_review_date=reviewed_on,
        next_review_date=next_review_date(reviewed_on, frequency_days),
    )


def needs_review(rule_set: ScopedRuleSet, as_of: date) -> bool:
    return rule_set.next_review_date is not None and as_of >= rule_set.next_review_date


def is_in_effect(rule_set: ScopedRuleSet, as_of: date) -> bool:
    if rule_set.effective_date is not None and as_of < rule_set.effective_date:
        return False
    if rule_set.expiry_date is not None and as_of > rule_set.expiry_date:
        return False
    return True


def duplicate_rule_set(source: ScopedRuleSet, subject_id: str) -> ScopedRuleSet:
    """Clone a rule set onto another subject.

    The copy starts inactive with no review history, so activating it goes
    through the usual validation gate.
    """
    return dataclasses.replace(
        source,
        subject_id=subject_id,
        is_active=False,
        last_review_date=None,
        next_review_date=None,
    )


def select_active_rule_set(
    rule_sets: Iterable[ScopedRuleSet],
    subject_id: str,
) -> ScopedRuleSet:
    """Return the single active rule set for ``subject_id``.

    Raises:
        RuleSetNotFoundError: If the subject has no active rule set.
        ValueError: If more than one active rule set exists.
    """
    active = [
        rule_set
        for rule_set in rule_sets
        if rule_set.subject_id == subject_id and rule_set.is_active
    ]
    if not active:
        raise RuleSetNotFoundError(subject_id)
    if len(active) > 1:
        raise ValueError(
            f"Subject {subject_id} has {len(active)} active rule sets; expected one"
        )
    return active[0]
