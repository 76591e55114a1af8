"""
Shared data models for the Mental Reset Planner.

This module defines the core domain models used across multiple layers
of the application (form state, persistence, API, CLI).
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Mood(str, Enum):
    """How the user feels when they check in."""

    CALM = "calm"
    IRRITATED = "irritated"
    ANGRY = "angry"
    OVERWHELMED = "overwhelmed"


class Activity(str, Enum):
    """A reset activity. Declaration order is the canonical order."""

    BREATHE = "breathe"
    WATER = "water"
    STRETCH = "stretch"
    OUTSIDE = "outside"
    TIDY = "tidy"
    AFFIRMATION = "affirmation"
    MUSIC = "music"
    MOVE = "move"
    CUSTOM = "custom"


class ReflectionField(str, Enum):
    """The three "zoom out" prompts."""

    CONTROL = "control_answer"
    NOT_MY_JOB = "not_my_job_answer"
    FIVE_DAYS = "five_days_answer"


ACTIVITY_LABELS: dict[Activity, str] = {
    Activity.BREATHE: "Take 3 slow breaths",
    Activity.WATER: "Drink water",
    Activity.STRETCH: "Stretch for 30 seconds",
    Activity.OUTSIDE: "Step outside briefly",
    Activity.TIDY: "Tidy one small thing",
    Activity.AFFIRMATION: 'Say: "I\'m safe. I can do this."',
    Activity.MUSIC: "Put on calming music or silence",
    Activity.MOVE: "Move your body",
    Activity.CUSTOM: "Write your own",
}

REFLECTION_PROMPTS: dict[ReflectionField, str] = {
    ReflectionField.CONTROL: "What can I control right now?",
    ReflectionField.NOT_MY_JOB: "What is not my job to fix?",
    ReflectionField.FIVE_DAYS: "Will this still matter in 5 days?",
}


def canonical_order(activities: "set[Activity] | frozenset[Activity]") -> list[Activity]:
    """Return the given activities in declaration order."""
    return [activity for activity in Activity if activity in activities]


class AuthUser(BaseModel):
    """The identity behind an auth session."""

    id: str = Field(..., description="Stable user identifier")
    email: str | None = Field(None, description="Email address, if known")


class AuthSession(BaseModel):
    """The current authenticated-user context."""

    user: AuthUser
    access_token: str | None = Field(
        None, description="Bearer token forwarded to the storage backend"
    )


class FormSnapshot(BaseModel):
    """Immutable copy of the draft held by the form store."""

    model_config = ConfigDict(frozen=True)

    mood: Mood | None = None
    activities: frozenset[Activity] = frozenset()
    custom_activity: str = ""
    control_answer: str = ""
    not_my_job_answer: str = ""
    five_days_answer: str = ""
    next_step: str = ""


class SessionRecord(BaseModel):
    """A completed mental reset session as stored by the backend."""

    id: str | None = Field(None, description="Server-assigned identifier")
    created_at: datetime | None = Field(None, description="Server-assigned timestamp")
    user_id: str
    date: str = Field(..., description="Calendar day, YYYY-MM-DD")
    mood: str = Field("", description="Selected mood, empty if none was chosen")
    activities: list[str] = Field(default_factory=list)
    custom_activity: str | None = None
    control_answer: str | None = None
    not_my_job_answer: str | None = None
    five_days_answer: str | None = None
    next_step: str | None = None


class ToastVariant(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


class Toast(BaseModel):
    """A transient user-facing notification."""

    title: str
    description: str
    variant: ToastVariant = ToastVariant.DEFAULT
