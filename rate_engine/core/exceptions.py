"""
Domain errors raised one layer above the pure engine.

Both subclass ``ValueError`` so route handlers can keep the usual
``except ValueError`` mapping onto HTTP 404 / 422.
"""

from __future__ import annotations

from typing import Sequence


class RuleSetValidationError(ValueError):
    """A candidate rule set failed validation and must not be activated."""

    def __init__(self, violations: Sequence[str]) -> None:
        self.violations = list(violations)
        super().__init__("Rule set is invalid: " + "; ".join(self.violations))


class RuleSetNotFoundError(ValueError):
    """No active rule set exists for the requested subject."""

    def __init__(self, subject_id: str) -> None:
        self.subject_id = subject_id
        super().__init__(f"Active rule set for subject {subject_id} not found")
