"""
Saved sessions view.

Purely presentational: turns the result of ``SessionGateway.list_for_user``
into cards. Fields that were never answered are left off the card.
"""

from datetime import date
from enum import Enum

from pydantic import BaseModel, Field

from .models import ReflectionField, SessionRecord

EMPTY_MESSAGE = "No saved sessions yet. Complete a mental reset session to see it here!"
LOADING_MESSAGE = "Loading your sessions..."

# Headings used on saved cards; shorter than the prompts on the form.
REFLECTION_HEADINGS = {
    ReflectionField.CONTROL.value: "What can you control?",
    ReflectionField.NOT_MY_JOB.value: "What's not your job?",
    ReflectionField.FIVE_DAYS.value: "Will this matter in 5 days?",
    "next_step": "Next step",
}


class ViewState(str, Enum):
    LOADING = "loading"
    EMPTY = "empty"
    POPULATED = "populated"


class Reflection(BaseModel):
    heading: str
    answer: str


class SessionCard(BaseModel):
    id: str | None
    date: str = Field(..., description="Human readable calendar day")
    mood: str
    badges: list[str] = Field(default_factory=list)
    reflections: list[Reflection] = Field(default_factory=list)


class SessionsView(BaseModel):
    state: ViewState
    message: str | None = None
    cards: list[SessionCard] = Field(default_factory=list)


def format_date(value: str) -> str:
    """Format ``YYYY-MM-DD`` as e.g. "October 19, 2026"."""
    try:
        day = date.fromisoformat(value)
    except ValueError:
        return value
    return f"{day:%B} {day.day}, {day.year}"


def build_card(record: SessionRecord) -> SessionCard:
    badges = list(record.activities)
    if record.custom_activity:
        badges.append(record.custom_activity)

    reflections = [
        Reflection(heading=heading, answer=answer)
        for field, heading in REFLECTION_HEADINGS.items()
        if (answer := getattr(record, field))
    ]

    return SessionCard(
        id=record.id,
        date=format_date(record.date),
        mood=record.mood,
        badges=badges,
        reflections=reflections,
    )


def render_sessions(records: list[SessionRecord] | None) -> SessionsView:
    """Build the view; ``None`` means the fetch is still in flight."""
    if records is None:
        return SessionsView(state=ViewState.LOADING, message=LOADING_MESSAGE)
    if not records:
        return SessionsView(state=ViewState.EMPTY, message=EMPTY_MESSAGE)
    return SessionsView(
        state=ViewState.POPULATED, cards=[build_card(record) for record in records]
    )


def format_text(view: SessionsView) -> str:
    """Plain text rendering for terminals."""
    if view.state is not ViewState.POPULATED:
        return view.message or ""

    blocks = []
    for card in view.cards:
        lines = [f"{card.date} [{card.mood or 'no mood'}]"]
        if card.badges:
            lines.append("  Activities: " + ", ".join(card.badges))
        for reflection in card.reflections:
            lines.append(f"  {reflection.heading} {reflection.answer}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)
