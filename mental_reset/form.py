"""
Draft state for one in-progress mental reset session.

The form keeps everything in memory until the persistence gateway is asked to
save a snapshot of it. A failed save never touches the form, so the user can
simply try again.
"""

import logging

from .errors import ActivityLimitReached
from .models import Activity, FormSnapshot, Mood, ReflectionField, ToastVariant
from .notifications import Notifier
from .policy import ActivityPolicy, CappedPolicy, ToggleDecision

logger = logging.getLogger(__name__)


class ResetForm:
    """
    In-memory store for the mood, activities and reflections of one session.

    Args:
        notifier: Where limit-reached and reset toasts are delivered
        policy: Decides whether an activity toggle is allowed
    """

    def __init__(
        self, notifier: Notifier, policy: ActivityPolicy | None = None
    ) -> None:
        self._notifier = notifier
        self.policy = policy if policy is not None else CappedPolicy()
        self._clear()

    def _clear(self) -> None:
        self.mood: Mood | None = None
        self._activities: set[Activity] = set()
        self.custom_activity = ""
        self._reflections = {field: "" for field in ReflectionField}
        self.next_step = ""

    # MARK: - Mood

    def set_mood(self, mood: Mood) -> None:
        self.mood = mood

    # MARK: - Activities

    @property
    def activities(self) -> frozenset[Activity]:
        return frozenset(self._activities)

    def selected_count(self) -> int:
        return len(self._activities)

    def toggle_activity(self, key: Activity) -> ToggleDecision:
        """
        Toggle an activity, subject to the configured policy.

        Returns:
            The decision that was applied

        Raises:
            ActivityLimitReached: If the selection is full. The form is unchanged.
        """
        decision = self.policy.decide(self._activities, key)

        if decision is ToggleDecision.REJECT_LIMIT_REACHED:
            limit = self.policy.limit or 0
            self._notifier.notify(
                "Limit Reached",
                f"You can choose up to {limit} activities. "
                "Unselect one to pick something else.",
                ToastVariant.DESTRUCTIVE,
            )
            raise ActivityLimitReached(limit)

        if decision is ToggleDecision.SELECT:
            self._activities.add(key)
        else:
            self._activities.discard(key)
        return decision

    def set_custom_activity(self, text: str) -> None:
        self.custom_activity = text

    # MARK: - Reflections

    def set_reflection(self, field: ReflectionField, text: str) -> None:
        self._reflections[field] = text

    def reflection(self, field: ReflectionField) -> str:
        return self._reflections[field]

    def set_next_step(self, text: str) -> None:
        self.next_step = text

    # MARK: - Lifecycle

    def reset(self) -> None:
        """Clear every field back to its initial value."""
        self._clear()
        logger.debug("Form reset")
        self._notifier.notify(
            "Reset Complete",
            "Your planner has been cleared. Take a moment and start fresh.",
        )

    def snapshot(self) -> FormSnapshot:
        return FormSnapshot(
            mood=self.mood,
            activities=frozenset(self._activities),
            custom_activity=self.custom_activity,
            control_answer=self._reflections[ReflectionField.CONTROL],
            not_my_job_answer=self._reflections[ReflectionField.NOT_MY_JOB],
            five_days_answer=self._reflections[ReflectionField.FIVE_DAYS],
            next_step=self.next_step,
        )
