"""
FastAPI server for the Mental Reset Planner.

This module exposes the planner form, the save/reset lifecycle and the saved
sessions view over HTTP, plus the auth session endpoints and a Server-Sent
Events stream of auth changes.
"""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from datetime import date

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, Field

from . import __version__
from .auth import AuthSessionProvider, SessionTracker
from .backends import InMemoryBackend, StorageBackend, SupabaseBackend
from .config import Settings, configure_logging, load_settings
from .errors import (
    ActivityLimitReached,
    BackendError,
    FetchFailed,
    MentalResetError,
    SaveFailed,
    Unauthenticated,
)
from .form import ResetForm
from .gateway import SaveResult, SessionGateway
from .models import (
    ACTIVITY_LABELS,
    REFLECTION_PROMPTS,
    Activity,
    AuthSession,
    AuthUser,
    Mood,
    ReflectionField,
    Toast,
    canonical_order,
)
from .notifications import Notifier
from .policy import policy_for_limit
from .view import SessionsView, render_sessions

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[MentalResetError], int] = {
    Unauthenticated: 401,
    ActivityLimitReached: 409,
    SaveFailed: 502,
    FetchFailed: 502,
}


# API Request/Response Schemas
class MoodUpdate(BaseModel):
    """Payload for mood check-in requests."""

    mood: Mood = Field(..., description="The mood to select")


class TextUpdate(BaseModel):
    """Payload for free-text field updates."""

    text: str = Field("", description="The new field value")


class SignInRequest(BaseModel):
    """Hand over a session obtained from the auth service."""

    access_token: str | None = Field(None, description="Bearer token to verify")
    user: AuthUser | None = Field(None, description="User, when tokens are not verified")


class FormResponse(BaseModel):
    """Response model for form endpoints."""

    mood: Mood | None
    activities: list[Activity]
    custom_activity: str
    reflections: dict[ReflectionField, str]
    next_step: str
    selected_count: int
    activity_limit: int | None
    toasts: list[Toast] = Field(default_factory=list)


class SaveResponse(BaseModel):
    saved: SaveResult
    toasts: list[Toast] = Field(default_factory=list)


class SessionsResponse(BaseModel):
    view: SessionsView
    toasts: list[Toast] = Field(default_factory=list)


class AuthSessionResponse(BaseModel):
    session: AuthSession | None
    redirect: str | None = None


class FormLayout(BaseModel):
    """Labels for rendering the planner."""

    moods: list[Mood]
    activities: dict[Activity, str]
    prompts: dict[ReflectionField, str]


def create_app(
    backend: StorageBackend,
    auth: AuthSessionProvider,
    settings: Settings | None = None,
    today: Callable[[], date] = date.today,
) -> FastAPI:
    """
    Create a FastAPI application around the given collaborators.

    Args:
        backend: Where saved sessions are stored
        auth: The auth session provider to follow
        settings: Table name and activity limit; defaults when omitted
        today: Clock for the saved calendar day

    Returns:
        Configured FastAPI application
    """
    settings = settings or Settings()
    notifier = Notifier()
    form = ResetForm(notifier, policy_for_limit(settings.activity_limit))
    gateway = SessionGateway(backend, notifier, table=settings.table, today=today)
    tracker = SessionTracker()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Follow the auth provider for as long as the app is up."""
        with tracker.attach(auth):
            yield
        await auth.close()

    app = FastAPI(
        title="Mental Reset Planner",
        description="Calm down & refocus: a guided mental reset journal",
        version=__version__,
        lifespan=lifespan,
    )

    def form_response() -> FormResponse:
        return FormResponse(
            mood=form.mood,
            activities=canonical_order(form.activities),
            custom_activity=form.custom_activity,
            reflections={field: form.reflection(field) for field in ReflectionField},
            next_step=form.next_step,
            selected_count=form.selected_count(),
            activity_limit=form.policy.limit,
            toasts=notifier.drain(),
        )

    @app.exception_handler(MentalResetError)
    async def planner_error_handler(
        request: Request, exc: MentalResetError
    ) -> JSONResponse:
        content = {
            "detail": str(exc),
            "toasts": [toast.model_dump(mode="json") for toast in notifier.drain()],
        }
        if isinstance(exc, Unauthenticated):
            content["redirect"] = exc.redirect_to
        return JSONResponse(status_code=ERROR_STATUS.get(type(exc), 400), content=content)

    @app.exception_handler(BackendError)
    async def backend_error_handler(request: Request, exc: BackendError) -> JSONResponse:
        logger.error("Backend error: %s", exc)
        return JSONResponse(status_code=502, content={"detail": "Backend unavailable"})

    @app.get("/")
    async def root() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "mental-reset-planner"}

    # MARK: - Form

    @app.get("/form/layout")
    async def get_layout() -> FormLayout:
        return FormLayout(
            moods=list(Mood),
            activities=ACTIVITY_LABELS,
            prompts=REFLECTION_PROMPTS,
        )

    @app.get("/form")
    async def get_form() -> FormResponse:
        return form_response()

    @app.put("/form/mood")
    async def set_mood(update: MoodUpdate) -> FormResponse:
        form.set_mood(update.mood)
        return form_response()

    @app.post("/form/activities/{key}/toggle")
    async def toggle_activity(key: Activity) -> FormResponse:
        """Toggle an activity. Answers 409 when the selection is full."""
        form.toggle_activity(key)
        return form_response()

    @app.put("/form/custom-activity")
    async def set_custom_activity(update: TextUpdate) -> FormResponse:
        form.set_custom_activity(update.text)
        return form_response()

    @app.put("/form/reflections/{field}")
    async def set_reflection(field: ReflectionField, update: TextUpdate) -> FormResponse:
        form.set_reflection(field, update.text)
        return form_response()

    @app.put("/form/next-step")
    async def set_next_step(update: TextUpdate) -> FormResponse:
        form.set_next_step(update.text)
        return form_response()

    @app.post("/form/reset")
    async def reset_form() -> FormResponse:
        form.reset()
        return form_response()

    @app.post("/form/save")
    async def save_form() -> SaveResponse:
        """
        Save the current draft for the signed-in user.

        The draft is kept as-is, whether or not the save succeeds.
        """
        saved = await gateway.save(form.snapshot(), tracker.session)
        return SaveResponse(saved=saved, toasts=notifier.drain())

    # MARK: - Saved sessions

    @app.get("/sessions")
    async def list_sessions() -> SessionsResponse:
        session = tracker.session
        if session is None:
            raise Unauthenticated("Please sign in to see your saved sessions.")
        records = await gateway.list_for_user(session.user.id, session.access_token)
        return SessionsResponse(view=render_sessions(records), toasts=notifier.drain())

    # MARK: - Auth

    @app.get("/auth/session")
    async def get_session() -> AuthSessionResponse:
        return AuthSessionResponse(session=tracker.session)

    @app.post("/auth/session")
    async def sign_in(payload: SignInRequest) -> AuthSessionResponse:
        if payload.access_token:
            session = await auth.sign_in_with_token(payload.access_token)
        elif payload.user is not None and auth.verifies_tokens:
            raise Unauthenticated("An access token is required to sign in.")
        elif payload.user is not None:
            session = await auth.sign_in(AuthSession(user=payload.user))
        else:
            raise HTTPException(status_code=422, detail="Provide access_token or user")
        return AuthSessionResponse(session=session)

    @app.delete("/auth/session")
    async def sign_out() -> AuthSessionResponse:
        await auth.sign_out()
        return AuthSessionResponse(session=None, redirect=Unauthenticated.redirect_to)

    @app.get("/auth/stream")
    async def stream_auth() -> StreamingResponse:
        """
        Stream auth session changes via Server-Sent Events.

        The current session is sent immediately upon connection.
        """

        async def event_generator() -> AsyncGenerator[str, None]:
            try:
                async with auth.stream() as changes:
                    async for change in changes:
                        data = json.dumps(change.model_dump(mode="json"))
                        yield f"data: {data}\n\n"
            except asyncio.CancelledError:
                # Client disconnected
                pass
            except Exception as e:
                error_data = json.dumps({"error": str(e)})
                yield f"event: error\ndata: {error_data}\n\n"

        return StreamingResponse(
            event_generator(),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
            },
        )

    return app


def build_app(settings: Settings | None = None) -> FastAPI:
    """Wire the configured backend and auth provider into an app."""
    settings = settings or load_settings()

    if settings.use_supabase:
        supabase = SupabaseBackend(settings.supabase_url, settings.supabase_anon_key)
        logger.info("Storing sessions in Supabase table %s", settings.table)
        return create_app(
            supabase, AuthSessionProvider(verify_token=supabase.get_user), settings
        )

    logger.warning("Supabase is not configured; sessions are kept in memory")
    return create_app(InMemoryBackend(), AuthSessionProvider(), settings)


app = build_app()


def main() -> None:
    """Main entry point for the server."""
    import uvicorn

    settings = load_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "mental_reset.server:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
