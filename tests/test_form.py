"""
Tests for the ResetForm draft store.

These tests cover mood exclusivity, the activity cap, the free-text setters
and the reset lifecycle.
"""

import pytest

from mental_reset.errors import ActivityLimitReached
from mental_reset.form import ResetForm
from mental_reset.models import Activity, FormSnapshot, Mood, ReflectionField, ToastVariant
from mental_reset.notifications import Notifier
from mental_reset.policy import ToggleDecision, UnlimitedPolicy


class TestResetForm:
    """Test suite for ResetForm functionality."""

    def setup_method(self):
        """Set up a fresh form with the default capped policy."""
        self.notifier = Notifier()
        self.form = ResetForm(self.notifier)

    # MARK: - Mood

    def test_mood_is_exclusive(self):
        """Test that selecting angry then calm leaves only calm."""
        self.form.set_mood(Mood.ANGRY)
        self.form.set_mood(Mood.CALM)
        assert self.form.mood is Mood.CALM

    def test_last_mood_wins(self):
        """Test that any sequence of moods leaves exactly the last one."""
        sequence = [Mood.OVERWHELMED, Mood.IRRITATED, Mood.IRRITATED, Mood.ANGRY]
        for mood in sequence:
            self.form.set_mood(mood)
            assert self.form.mood is mood
            assert self.form.snapshot().mood is mood

    # MARK: - Activities

    def test_toggle_selects_and_deselects(self):
        """Test that toggling twice returns to the original state."""
        assert self.form.toggle_activity(Activity.WATER) is ToggleDecision.SELECT
        assert self.form.selected_count() == 1
        assert self.form.toggle_activity(Activity.WATER) is ToggleDecision.DESELECT
        assert self.form.selected_count() == 0

    def test_fourth_activity_rejected(self):
        """Test that a fourth selection is rejected and leaves the form unchanged."""
        for activity in (Activity.BREATHE, Activity.WATER, Activity.STRETCH):
            self.form.toggle_activity(activity)

        with pytest.raises(ActivityLimitReached) as exc_info:
            self.form.toggle_activity(Activity.MUSIC)

        assert exc_info.value.limit == 3
        assert self.form.activities == {Activity.BREATHE, Activity.WATER, Activity.STRETCH}

        toasts = self.notifier.drain()
        assert len(toasts) == 1
        assert toasts[0].title == "Limit Reached"
        assert toasts[0].variant is ToastVariant.DESTRUCTIVE

    def test_count_never_exceeds_limit(self):
        """Test that toggling every activity repeatedly never goes over 3."""
        for _ in range(3):
            for activity in Activity:
                try:
                    self.form.toggle_activity(activity)
                except ActivityLimitReached:
                    pass
                assert self.form.selected_count() <= 3

    def test_deselect_when_full(self):
        """Test that a full selection can always be reduced."""
        for activity in (Activity.TIDY, Activity.MOVE, Activity.CUSTOM):
            self.form.toggle_activity(activity)
        self.form.toggle_activity(Activity.MOVE)
        assert self.form.activities == {Activity.TIDY, Activity.CUSTOM}
        self.form.toggle_activity(Activity.OUTSIDE)
        assert self.form.selected_count() == 3

    def test_unlimited_policy(self):
        """Test that the uncapped form lets every activity be selected."""
        form = ResetForm(self.notifier, UnlimitedPolicy())
        for activity in Activity:
            form.toggle_activity(activity)
        assert form.selected_count() == len(Activity)
        assert self.notifier.drain() == []

    # MARK: - Text fields

    def test_text_setters(self):
        """Test that the free-text setters store values verbatim."""
        self.form.set_custom_activity("Pet the cat")
        self.form.set_reflection(ReflectionField.CONTROL, "My breathing")
        self.form.set_reflection(ReflectionField.FIVE_DAYS, "No")
        self.form.set_next_step("  drink tea ")

        snapshot = self.form.snapshot()
        assert snapshot.custom_activity == "Pet the cat"
        assert snapshot.control_answer == "My breathing"
        assert snapshot.not_my_job_answer == ""
        assert snapshot.five_days_answer == "No"
        assert snapshot.next_step == "  drink tea "

    # MARK: - Reset

    def test_reset_restores_initial_state(self):
        """Test that reset clears everything and raises a confirmation toast."""
        self.form.set_mood(Mood.OVERWHELMED)
        self.form.toggle_activity(Activity.BREATHE)
        self.form.toggle_activity(Activity.CUSTOM)
        self.form.set_custom_activity("Journal")
        self.form.set_reflection(ReflectionField.NOT_MY_JOB, "Other people's moods")
        self.form.set_next_step("Walk")

        self.form.reset()

        assert self.form.snapshot() == FormSnapshot()
        assert self.form.selected_count() == 0
        toasts = self.notifier.drain()
        assert [toast.title for toast in toasts] == ["Reset Complete"]

    def test_reset_is_idempotent(self):
        """Test that resetting twice gives the same state as resetting once."""
        self.form.set_mood(Mood.CALM)
        self.form.reset()
        once = self.form.snapshot()
        self.form.reset()
        assert self.form.snapshot() == once == FormSnapshot()

    def test_reset_on_fresh_form(self):
        self.form.reset()
        assert self.form.snapshot() == FormSnapshot()

    def test_snapshot_is_detached(self):
        """Test that later edits do not leak into an earlier snapshot."""
        self.form.toggle_activity(Activity.WATER)
        snapshot = self.form.snapshot()
        self.form.toggle_activity(Activity.MOVE)
        assert snapshot.activities == frozenset({Activity.WATER})
