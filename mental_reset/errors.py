"""
Error types raised by the Mental Reset Planner.

None of these are fatal: every one of them leaves the in-progress form intact
so the user can retry without re-entering data.
"""


class MentalResetError(Exception):
    """Base class for all planner errors."""


class Unauthenticated(MentalResetError):
    """A save was attempted without a signed-in user."""

    redirect_to = "/auth"

    def __init__(self, message: str = "Please sign in to save your session.") -> None:
        super().__init__(message)


class ActivityLimitReached(MentalResetError):
    """Selecting another activity would exceed the configured limit."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"You can choose up to {limit} activities.")


class SaveFailed(MentalResetError):
    """The storage backend rejected or could not receive a save."""

    def __init__(
        self, message: str = "There was an error saving your session. Please try again."
    ) -> None:
        super().__init__(message)


class FetchFailed(MentalResetError):
    """The storage backend could not list saved sessions."""

    def __init__(self, message: str = "Failed to load your sessions.") -> None:
        super().__init__(message)


class BackendError(Exception):
    """Raised by storage backends; wrapped by the gateway."""
