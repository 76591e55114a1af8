"""
Activity selection policies.

A policy decides whether toggling an activity selects it, deselects it, or is
rejected because the selection is full. Policies never mutate anything.
"""

from collections.abc import Set
from enum import Enum

from .models import Activity

DEFAULT_ACTIVITY_LIMIT = 3


class ToggleDecision(str, Enum):
    SELECT = "select"
    DESELECT = "deselect"
    REJECT_LIMIT_REACHED = "reject_limit_reached"


class CappedPolicy:
    """Allow at most ``limit`` selected activities. Deselecting is always allowed."""

    def __init__(self, limit: int = DEFAULT_ACTIVITY_LIMIT) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit

    def decide(self, selected: Set[Activity], key: Activity) -> ToggleDecision:
        if key in selected:
            return ToggleDecision.DESELECT
        if len(selected) < self.limit:
            return ToggleDecision.SELECT
        return ToggleDecision.REJECT_LIMIT_REACHED


class UnlimitedPolicy:
    """Plain checkbox semantics with no cap."""

    limit: int | None = None

    def decide(self, selected: Set[Activity], key: Activity) -> ToggleDecision:
        if key in selected:
            return ToggleDecision.DESELECT
        return ToggleDecision.SELECT


ActivityPolicy = CappedPolicy | UnlimitedPolicy


def policy_for_limit(limit: int) -> ActivityPolicy:
    """Build the policy for a configured limit, where 0 means no cap."""
    if limit == 0:
        return UnlimitedPolicy()
    return CappedPolicy(limit)
