"""
Supabase storage backend.

Talks to the PostgREST endpoint of a Supabase project (``/rest/v1/<table>``)
and to its auth endpoint for access token verification. Row level security is
honoured by forwarding the signed-in user's access token.
"""

import logging
from typing import Any

import httpx

from ..errors import BackendError, Unauthenticated
from ..models import AuthUser

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class SupabaseBackend:
    """
    Row store backed by a Supabase project.

    Args:
        url: Project URL, e.g. ``https://<ref>.supabase.co``
        anon_key: The project's publishable (anon) key
        transport: Optional httpx transport, mainly for tests
    """

    def __init__(
        self,
        url: str,
        anon_key: str,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.url = url.rstrip("/")
        self.anon_key = anon_key
        self._transport = transport
        self._timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.url, transport=self._transport, timeout=self._timeout
        )

    def _headers(self, access_token: str | None) -> dict[str, str]:
        return {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {access_token or self.anon_key}",
        }

    async def insert(
        self, table: str, record: dict[str, Any], access_token: str | None = None
    ) -> dict[str, Any]:
        headers = self._headers(access_token)
        headers["Prefer"] = "return=representation"

        try:
            async with self._client() as client:
                response = await client.post(
                    f"/rest/v1/{table}", json=[record], headers=headers
                )
                response.raise_for_status()
                rows = response.json()
        except httpx.HTTPStatusError as e:
            raise BackendError(
                f"Insert into {table} failed: HTTP {e.response.status_code} {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise BackendError(f"Could not reach Supabase: {e}") from e

        if not rows:
            raise BackendError(f"Insert into {table} returned no rows")
        return rows[0]

    async def select(
        self,
        table: str,
        filters: dict[str, Any],
        order_by: str,
        descending: bool = True,
        access_token: str | None = None,
    ) -> list[dict[str, Any]]:
        params = {"select": "*"}
        for field, value in filters.items():
            params[field] = f"eq.{value}"
        params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"

        try:
            async with self._client() as client:
                response = await client.get(
                    f"/rest/v1/{table}",
                    params=params,
                    headers=self._headers(access_token),
                )
                response.raise_for_status()
                return response.json() or []
        except httpx.HTTPStatusError as e:
            raise BackendError(
                f"Select from {table} failed: HTTP {e.response.status_code} {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise BackendError(f"Could not reach Supabase: {e}") from e

    async def get_user(self, access_token: str) -> AuthUser:
        """
        Resolve an access token to its user.

        Raises:
            Unauthenticated: If Supabase rejects the token
            BackendError: If Supabase cannot be reached
        """
        try:
            async with self._client() as client:
                response = await client.get(
                    "/auth/v1/user", headers=self._headers(access_token)
                )
        except httpx.HTTPError as e:
            raise BackendError(f"Could not reach Supabase: {e}") from e

        if response.status_code in (401, 403):
            logger.warning("Supabase rejected an access token")
            raise Unauthenticated("Your session has expired. Please sign in again.")
        if response.is_error:
            raise BackendError(f"Token check failed: HTTP {response.status_code}")

        data = response.json()
        return AuthUser(id=data["id"], email=data.get("email"))
