"""
Command-line interface tools for the Mental Reset Planner service.
"""

import asyncio
import json
from collections.abc import Coroutine
from typing import Any

import httpx
import typer
from httpx_sse import ServerSentEvent, aconnect_sse

from .auth import SessionChange
from .view import SessionsView, format_text

DEFAULT_BASE_URL = "http://localhost:8000"

app = typer.Typer(help="Mental Reset Planner CLI tools")


# MARK: - CLI Entry Points


def cli_serve() -> None:
    """Entry point for reset-serve CLI command."""
    from .server import main

    main()


def cli_sessions() -> None:
    """Entry point for reset-sessions CLI command."""
    typer.run(sessions)


def cli_sign_in() -> None:
    """Entry point for reset-sign-in CLI command."""
    typer.run(sign_in)


def cli_sign_out() -> None:
    """Entry point for reset-sign-out CLI command."""
    typer.run(sign_out)


def cli_watch() -> None:
    """Entry point for reset-watch CLI command."""
    typer.run(watch)


# MARK: - Commands


@app.command()
def sessions(
    base_url: str = typer.Option(
        DEFAULT_BASE_URL, "--url", "-u", help="Base URL of the planner service"
    ),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output raw JSON"),
) -> None:
    """Show the signed-in user's saved sessions, most recent first."""

    async def _sessions() -> None:
        async with httpx.AsyncClient() as client:
            response = await client.get(f"{base_url}/sessions")
            if response.status_code == 401:
                print("Not signed in. Run reset-sign-in first.")
                raise typer.Exit(1)
            response.raise_for_status()
            result = response.json()

            if json_output:
                print(json.dumps(result, indent=2))
                return

            view = SessionsView.model_validate(result["view"])
            print(format_text(view))

    _run_with_error_handling(_sessions(), base_url)


@app.command()
def sign_in(
    user_id: str = typer.Option(None, "--user-id", help="User id (in-memory auth)"),
    email: str = typer.Option(None, "--email", help="Email for the user id"),
    token: str = typer.Option(None, "--token", "-t", help="Access token to verify"),
    base_url: str = typer.Option(
        DEFAULT_BASE_URL, "--url", "-u", help="Base URL of the planner service"
    ),
) -> None:
    """Sign in on the planner service."""
    if token:
        payload: dict[str, Any] = {"access_token": token}
    elif user_id:
        payload = {"user": {"id": user_id, "email": email}}
    else:
        print("Error: pass --token or --user-id")
        raise typer.Exit(1)

    async def _sign_in() -> None:
        async with httpx.AsyncClient() as client:
            response = await client.post(f"{base_url}/auth/session", json=payload)
            response.raise_for_status()
            user = response.json()["session"]["user"]
            print(f"Signed in as {user.get('email') or user['id']}")

    _run_with_error_handling(_sign_in(), base_url)


@app.command()
def sign_out(
    base_url: str = typer.Option(
        DEFAULT_BASE_URL, "--url", "-u", help="Base URL of the planner service"
    ),
) -> None:
    """Sign out of the planner service."""

    async def _sign_out() -> None:
        async with httpx.AsyncClient() as client:
            response = await client.delete(f"{base_url}/auth/session")
            response.raise_for_status()
            print("Signed out")

    _run_with_error_handling(_sign_out(), base_url)


@app.command()
def watch(
    base_url: str = typer.Option(
        DEFAULT_BASE_URL, "--url", "-u", help="Base URL of the planner service"
    ),
) -> None:
    """Stream auth session changes in real-time."""

    async def _watch() -> None:
        print(f"Streaming from {base_url}/auth/stream... (Ctrl+C to stop)")

        async with httpx.AsyncClient(timeout=None) as client:
            async with aconnect_sse(
                client, "GET", f"{base_url}/auth/stream"
            ) as event_source:
                async for sse in event_source.aiter_sse():
                    _handle_sse_event(sse)

    _run_with_error_handling(_watch(), base_url)


# MARK: - Private Helpers


def _format_change(change: SessionChange) -> str:
    if change.session is None:
        return f"{change.event.value} > signed out"
    user = change.session.user
    return f"{change.event.value} > {user.email or user.id}"


def _handle_sse_event(sse: ServerSentEvent) -> None:
    """Handle a single SSE event."""
    try:
        if sse.event == "error":
            error_data = json.loads(sse.data)
            print(f"Server error: {error_data.get('error', 'Unknown error')}")
            return

        change = SessionChange.model_validate_json(sse.data)
        print(_format_change(change))

    except ValueError as e:
        print(f"Warning: Could not parse SSE data: {sse.data} - {e}")


def _run_with_error_handling(coro: Coroutine[Any, Any, Any], base_url: str) -> None:
    """Run an async coroutine with standardized error handling."""
    try:
        asyncio.run(coro)
    except KeyboardInterrupt:
        print("\nStopped")
        raise typer.Exit(0)
    except httpx.ConnectError:
        print(f"Error: Could not connect to {base_url}")
        raise typer.Exit(1)
    except httpx.HTTPStatusError as e:
        print(f"Error: HTTP {e.response.status_code}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
