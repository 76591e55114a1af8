"""
Auth session provider and the current-session slot.

The provider owns the authenticated-user context and tells subscribers when it
changes, either through registered callbacks or through an async stream. The
``SessionTracker`` holds the single "current session" the rest of the app
reads; its only writer is the subscription it registers with the provider.
"""

import asyncio
import logging
from collections import deque
from collections.abc import AsyncGenerator, Awaitable, Callable, Iterator
from contextlib import asynccontextmanager, contextmanager
from enum import Enum

from pydantic import BaseModel, Field

from .errors import Unauthenticated
from .models import AuthSession, AuthUser

logger = logging.getLogger(__name__)

TokenVerifier = Callable[[str], Awaitable[AuthUser]]


class AuthEvent(str, Enum):
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


class SessionChange(BaseModel):
    """One auth state transition."""

    event: AuthEvent
    session: AuthSession | None = Field(None, description="Session after the change")


SessionCallback = Callable[[SessionChange], None]


class Subscription:
    """Cancellation handle returned by ``AuthSessionProvider.on_session_change``."""

    def __init__(self, provider: "AuthSessionProvider", callback: SessionCallback) -> None:
        self._provider = provider
        self._callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._provider._remove(self._callback)
            self.active = False

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unsubscribe()


class AuthSessionProvider:
    """
    In-process auth session holder with change notification.

    Callbacks run in the order changes happen. Every stream gets its own
    buffer, so a slow consumer neither loses changes nor holds up publishers.

    Args:
        verify_token: Optional coroutine that resolves an access token to a user,
            used by ``sign_in_with_token``
    """

    def __init__(self, verify_token: TokenVerifier | None = None) -> None:
        self._verify_token = verify_token
        self._session: AuthSession | None = None
        self._callbacks: list[SessionCallback] = []
        self._condition = asyncio.Condition()
        self._buffers: list[deque[SessionChange]] = []
        self._closed = False

    @property
    def verifies_tokens(self) -> bool:
        return self._verify_token is not None

    def get_current_session(self) -> AuthSession | None:
        return self._session

    def on_session_change(self, callback: SessionCallback) -> Subscription:
        """Register a callback for future changes and return its handle."""
        self._callbacks.append(callback)
        return Subscription(self, callback)

    def _remove(self, callback: SessionCallback) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    async def sign_in(self, session: AuthSession) -> AuthSession:
        await self._publish(SessionChange(event=AuthEvent.SIGNED_IN, session=session))
        logger.info("User %s signed in", session.user.id)
        return session

    async def sign_in_with_token(self, access_token: str) -> AuthSession:
        """
        Sign in with a bearer token issued by the external auth service.

        Raises:
            Unauthenticated: If no verifier is configured or the token is rejected
        """
        if self._verify_token is None:
            raise Unauthenticated("Token sign-in is not available.")
        user = await self._verify_token(access_token)
        return await self.sign_in(AuthSession(user=user, access_token=access_token))

    async def sign_out(self) -> None:
        if self._session is not None:
            logger.info("User %s signed out", self._session.user.id)
        await self._publish(SessionChange(event=AuthEvent.SIGNED_OUT))

    async def close(self) -> None:
        """End every open stream once it has drained its buffer."""
        async with self._condition:
            self._closed = True
            self._condition.notify_all()

    async def _publish(self, change: SessionChange) -> None:
        async with self._condition:
            self._session = change.session
            for buffer in self._buffers:
                buffer.append(change)

            # Notify all waiting streams
            self._condition.notify_all()

        # Outside the lock; a failing callback is logged and the rest still run
        for callback in list(self._callbacks):
            try:
                callback(change)
            except Exception:
                logger.exception("Session change callback %r failed", callback)

    @asynccontextmanager
    async def stream(self) -> AsyncGenerator[AsyncGenerator[SessionChange, None], None]:
        """
        Stream session changes to a subscriber.

        The generator yields the current state first, then every later change
        in order. It ends after ``close()`` once the buffer is drained.
        """
        buffer: deque[SessionChange] = deque()
        async with self._condition:
            buffer.append(
                SessionChange(event=AuthEvent.INITIAL_SESSION, session=self._session)
            )
            self._buffers.append(buffer)

        async def change_generator() -> AsyncGenerator[SessionChange, None]:
            while True:
                async with self._condition:
                    await self._condition.wait_for(lambda: buffer or self._closed)
                    if not buffer:
                        return
                    change = buffer.popleft()
                yield change

        changes = change_generator()
        try:
            yield changes
        finally:
            await changes.aclose()
            self._buffers.remove(buffer)


class SessionTracker:
    """The app-wide "current session" slot."""

    def __init__(self) -> None:
        self._session: AuthSession | None = None

    @property
    def session(self) -> AuthSession | None:
        return self._session

    @property
    def user(self) -> AuthUser | None:
        return self._session.user if self._session else None

    def _apply(self, change: SessionChange) -> None:
        self._session = change.session

    @contextmanager
    def attach(self, provider: AuthSessionProvider) -> Iterator["SessionTracker"]:
        """Follow the provider for the duration of the block."""
        with provider.on_session_change(self._apply):
            self._apply(
                SessionChange(
                    event=AuthEvent.INITIAL_SESSION,
                    session=provider.get_current_session(),
                )
            )
            try:
                yield self
            finally:
                self._session = None
