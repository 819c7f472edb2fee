"""Envelope-aware async client for the catalog REST API.

Every catalog endpoint answers with the same envelope::

    {"success": true, "data": ...}
    {"success": false, "error": "..."}

:class:`CatalogClient` unwraps it: the request methods return ``data`` and
raise :class:`~stepai_admin.core.exceptions.FetchError` for every kind of
failure (transport error, non-2xx status, a body that is not JSON, or
``success: false``).  Both the HTTP status and the ``success`` flag are
checked.  A 401/403 raises
:class:`~stepai_admin.core.exceptions.AuthExpiredError` so the caller can
drop the session; the client performs no retries.

Usage::

    async with CatalogClient.from_settings(session=session) as client:
        rows = await client.get("/api/homepage-settings/videos")
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from stepai_admin.config.settings import Settings, get_settings
from stepai_admin.core.exceptions import AuthExpiredError, FetchError
from stepai_admin.core.session import AdminSession

logger = logging.getLogger(__name__)

_AUTH_FAILURE_STATUSES: frozenset[int] = frozenset({401, 403})


class CatalogClient:
    """Thin wrapper over :class:`httpx.AsyncClient` for the catalog API.

    Args:
        base_url: Catalog API base URL, e.g. ``http://localhost:3004``.
        session: Admin session whose bearer token is attached to requests.
            Defaults to an anonymous session.
        timeout: Request timeout in seconds.
        http_client: Pre-built client to use instead of creating one (tests
            pass one bound to a mock transport).  A client passed in is not
            closed by :meth:`aclose`.
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: AdminSession | None = None,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or AdminSession()
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        session: AdminSession | None = None,
    ) -> CatalogClient:
        """Build a client from :class:`~stepai_admin.config.settings.Settings`."""
        settings = settings or get_settings()
        return cls(
            settings.api_base_url,
            session=session,
            timeout=settings.request_timeout,
        )

    async def __aenter__(self) -> CatalogClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    # ------------------------------------------------------------------
    # Request helpers
    # ------------------------------------------------------------------

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Send one request and return the envelope's ``data`` member.

        ``None``-valued query parameters are dropped so optional filters can
        be passed unconditionally.

        Args:
            method: HTTP method.
            path: Path below the base URL, starting with ``/api/``.
            params: Query parameters.
            json: JSON request body.

        Returns:
            The ``data`` member of a successful envelope (``None`` when the
            envelope has none).

        Raises:
            AuthExpiredError: On HTTP 401 or 403.
            FetchError: On any other failure.
        """
        url = f"{self.base_url}{path}"
        query = {k: v for k, v in (params or {}).items() if v is not None}
        headers = {"Content-Type": "application/json", **self.session.auth_headers()}

        try:
            response = await self._http.request(
                method,
                url,
                params=query or None,
                json=json,
                headers=headers,
            )
        except httpx.TimeoutException as exc:
            logger.warning("catalog: timeout on %s %s", method, url)
            raise FetchError("Request timed out", url=url) from exc
        except httpx.RequestError as exc:
            logger.warning("catalog: request error on %s %s: %s", method, url, exc)
            raise FetchError(f"Request failed: {exc}", url=url) from exc

        status = response.status_code
        if status in _AUTH_FAILURE_STATUSES:
            logger.info("catalog: HTTP %d on %s %s: session rejected", status, method, url)
            raise AuthExpiredError(
                f"Authentication rejected (HTTP {status})", status_code=status, url=url
            )

        try:
            body = response.json()
        except ValueError:
            body = None

        if status >= 400:
            message = _envelope_error(body) or f"API Error: {status} {response.reason_phrase}"
            logger.info("catalog: HTTP %d on %s %s", status, method, url)
            raise FetchError(message, status_code=status, url=url)

        if not isinstance(body, dict):
            logger.warning("catalog: non-envelope body from %s %s", method, url)
            raise FetchError("Invalid response from API", status_code=status, url=url)

        if not body.get("success"):
            message = _envelope_error(body) or "Request was not successful"
            logger.info("catalog: %s %s answered success=false: %s", method, url, message)
            raise FetchError(message, status_code=status, url=url)

        return body.get("data")


def _envelope_error(body: Any) -> str | None:
    if isinstance(body, dict):
        error = body.get("error")
        if error:
            return str(error)
    return None
