"""
Session persistence gateway.

Turns a form snapshot into a ``SessionRecord`` for the signed-in user, hands it
to the storage backend, and reads a user's saved sessions back.
"""

import logging
from collections.abc import Callable
from datetime import date

from pydantic import BaseModel, ValidationError

from .backends import StorageBackend
from .errors import BackendError, FetchFailed, SaveFailed, Unauthenticated
from .models import AuthSession, FormSnapshot, SessionRecord, ToastVariant, canonical_order
from .notifications import Notifier

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "mental_reset_entries"

OPTIONAL_TEXT_FIELDS = (
    "custom_activity",
    "control_answer",
    "not_my_job_answer",
    "five_days_answer",
    "next_step",
)


class SaveResult(BaseModel):
    """What a successful save reports back."""

    date: str
    record: SessionRecord


def build_entry(snapshot: FormSnapshot, user_id: str, today: date) -> dict:
    """
    Build the row to insert for a snapshot.

    Empty optional text fields are left out of the row entirely.
    """
    entry = {
        "user_id": user_id,
        "date": today.isoformat(),
        "mood": snapshot.mood.value if snapshot.mood else "",
        "activities": [activity.value for activity in canonical_order(snapshot.activities)],
    }
    for field in OPTIONAL_TEXT_FIELDS:
        value = getattr(snapshot, field)
        if value:
            entry[field] = value
    return entry


class SessionGateway:
    """
    Create/read access to saved sessions.

    Args:
        backend: The storage backend to talk to
        notifier: Where success and failure toasts are delivered
        table: Table holding the sessions
        today: Clock for the saved calendar day (local time)
    """

    def __init__(
        self,
        backend: StorageBackend,
        notifier: Notifier,
        table: str = DEFAULT_TABLE,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.backend = backend
        self.table = table
        self._notifier = notifier
        self._today = today

    async def save(
        self, snapshot: FormSnapshot, session: AuthSession | None
    ) -> SaveResult:
        """
        Persist a snapshot for the signed-in user.

        Raises:
            Unauthenticated: If nobody is signed in. The backend is not contacted.
            SaveFailed: If the backend could not store the record
        """
        if session is None:
            raise Unauthenticated()

        today = self._today()
        entry = build_entry(snapshot, session.user.id, today)

        try:
            row = await self.backend.insert(
                self.table, entry, access_token=session.access_token
            )
            record = SessionRecord.model_validate(row)
        except (BackendError, ValidationError) as e:
            logger.error("Error saving entry for user %s: %s", session.user.id, e)
            error = SaveFailed()
            self._notifier.notify("Save Failed", str(error), ToastVariant.DESTRUCTIVE)
            raise error from e

        logger.info("Saved session %s for user %s", record.id, session.user.id)
        self._notifier.notify(
            "Saved Successfully",
            f"Your mental reset session for {today.isoformat()} has been saved.",
        )
        return SaveResult(date=today.isoformat(), record=record)

    async def list_for_user(
        self, user_id: str, access_token: str | None = None
    ) -> list[SessionRecord]:
        """
        Return every saved session for a user, most recent first.

        Raises:
            FetchFailed: If the backend could not be queried
        """
        try:
            rows = await self.backend.select(
                self.table,
                {"user_id": user_id},
                order_by="created_at",
                descending=True,
                access_token=access_token,
            )
            return [SessionRecord.model_validate(row) for row in rows]
        except (BackendError, ValidationError) as e:
            logger.error("Error loading sessions for user %s: %s", user_id, e)
            error = FetchFailed()
            self._notifier.notify("Error", str(error), ToastVariant.DESTRUCTIVE)
            raise error from e
