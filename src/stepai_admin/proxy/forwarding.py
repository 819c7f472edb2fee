"""Upstream forwarding for ``/api/*`` and ``/uploads/*``.

API calls are forwarded with their method, query string, body and
``Content-Type`` (JSON and multipart alike) plus the caller's
``Authorization`` header.  The upstream answer is normalised to the catalog
envelope so the SPA always receives JSON:

- non-2xx upstream status: same status, ``{"success": false, "error": "API Error: <code> <reason>"}``
- empty body: ``{"success": false, "error": "Empty response from API"}``
- body that is not JSON: 500 with the first 200 characters under ``raw``
- transport failure: 500 with the error message

Uploaded files are streamed back verbatim.
"""

from __future__ import annotations

import json
import logging

import httpx
from fastapi import Request, Response
from fastapi.responses import JSONResponse

from stepai_admin.config.settings import Settings

logger = logging.getLogger(__name__)

_FORWARDED_HEADERS: tuple[str, ...] = ("content-type", "authorization", "accept")
_BODYLESS_METHODS: frozenset[str] = frozenset({"GET", "HEAD", "DELETE", "OPTIONS"})
_RAW_PREVIEW_CHARS = 200


def _upstream_url(settings: Settings, request: Request) -> str:
    url = f"{settings.upstream_url.rstrip('/')}{request.url.path}"
    if request.url.query:
        url = f"{url}?{request.url.query}"
    return url


def _upstream_headers(settings: Settings, request: Request, has_body: bool) -> dict[str, str]:
    headers = {"User-Agent": settings.proxy_user_agent}
    for name in _FORWARDED_HEADERS:
        value = request.headers.get(name)
        if value:
            headers[name] = value
    if has_body and "content-type" not in headers:
        headers["content-type"] = "application/json"
    return headers


def _error(status_code: int, message: str, **extra: str) -> JSONResponse:
    return JSONResponse({"success": False, "error": message, **extra}, status_code=status_code)


async def forward_api(request: Request, settings: Settings) -> Response:
    """Forward one ``/api/*`` request and return an envelope response."""
    url = _upstream_url(settings, request)
    body = b"" if request.method in _BODYLESS_METHODS else await request.body()
    headers = _upstream_headers(settings, request, has_body=bool(body))

    try:
        async with httpx.AsyncClient(timeout=settings.request_timeout) as client:
            upstream = await client.request(
                request.method, url, content=body or None, headers=headers
            )
    except httpx.RequestError as exc:
        logger.error("proxy: upstream request failed for %s %s: %s", request.method, url, exc)
        return _error(500, str(exc) or "Proxy request failed")

    if not upstream.is_success:
        logger.info(
            "proxy: upstream HTTP %d for %s %s",
            upstream.status_code,
            request.method,
            url,
            extra={"upstream_status": upstream.status_code, "forwarded_headers": headers},
        )
        return _error(
            upstream.status_code,
            f"API Error: {upstream.status_code} {upstream.reason_phrase}",
        )

    text = upstream.text
    if not text:
        return _error(200, "Empty response from API")

    try:
        data = json.loads(text)
    except ValueError:
        logger.error("proxy: invalid JSON from %s %s: %r", request.method, url, text[:_RAW_PREVIEW_CHARS])
        return _error(500, "Invalid JSON response from API", raw=text[:_RAW_PREVIEW_CHARS])

    return JSONResponse(data, status_code=upstream.status_code)


async def forward_upload(request: Request, settings: Settings) -> Response:
    """Fetch an uploaded file from upstream and return it unchanged."""
    url = _upstream_url(settings, request)
    try:
        async with httpx.AsyncClient(timeout=settings.request_timeout) as client:
            upstream = await client.get(
                url, headers={"User-Agent": settings.proxy_user_agent}
            )
    except httpx.RequestError as exc:
        logger.error("proxy: upload fetch failed for %s: %s", url, exc)
        return _error(502, str(exc) or "Upload fetch failed")

    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.headers.get("content-type"),
    )
