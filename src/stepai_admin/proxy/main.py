"""FastAPI reverse proxy application factory and entry point.

Forwards ``/api/*`` and ``/uploads/*`` to the catalog backend and serves the
compiled admin SPA from ``Settings.build_dir`` with an ``index.html``
fallback.

Usage::

    # Development server (from project root)
    uvicorn stepai_admin.proxy.main:app --reload

    # Installed console script (reads PORT, default 3000)
    stepai-admin-proxy
"""

from __future__ import annotations

import time
import uuid
from pathlib import Path
from typing import Callable

import structlog
import uvicorn
from fastapi import FastAPI, Request, Response

from stepai_admin.config.settings import Settings, get_settings
from stepai_admin.core.logging_config import configure_logging, request_id_var
from stepai_admin.proxy.forwarding import forward_api, forward_upload
from stepai_admin.proxy.spa import serve_spa

configure_logging("INFO")

logger = structlog.get_logger(__name__)

_PROXIED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build and configure the proxy application.

    Args:
        settings: Settings to use instead of :func:`get_settings` (tests
            pass their own upstream URL and build directory).

    Returns:
        A fully configured ``FastAPI`` instance.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    build_dir = Path(settings.build_dir)

    application = FastAPI(
        title=settings.app_name,
        description="Reverse proxy and static host for the StepAI admin console.",
        version="0.1.0",
        debug=settings.debug,
        redirect_slashes=False,
    )

    # ---- Request logging middleware ----------------------------------------

    @application.middleware("http")
    async def request_logging_middleware(
        request: Request, call_next: Callable
    ) -> Response:
        """Log every request with its status and duration under a request id."""
        request_id = str(uuid.uuid4())
        request_id_var.set(request_id)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        start = time.perf_counter()
        response = None
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error("unhandled_exception", exc_info=exc)
            raise
        finally:
            elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = getattr(response, "status_code", 500)
            log_fn = logger.warning if status_code >= 400 else logger.info
            log_fn("request_complete", status_code=status_code, elapsed_ms=elapsed_ms)

        response.headers["X-Request-ID"] = request_id
        return response

    # ---- Routes --------------------------------------------------------------

    @application.api_route("/api/{path:path}", methods=_PROXIED_METHODS, include_in_schema=False)
    async def proxy_api(request: Request, path: str) -> Response:  # noqa: ARG001
        return await forward_api(request, settings)

    @application.get("/uploads/{path:path}", include_in_schema=False)
    async def proxy_upload(request: Request, path: str) -> Response:  # noqa: ARG001
        return await forward_upload(request, settings)

    @application.get("/{path:path}", include_in_schema=False)
    async def spa(path: str) -> Response:
        return serve_spa(build_dir, path)

    @application.on_event("startup")
    async def on_startup() -> None:
        logger.info(
            "proxy_startup",
            upstream=settings.upstream_url,
            build_dir=str(build_dir),
            port=settings.port,
        )

    return application


def run() -> None:
    """Console-script entry point: serve :data:`app` on ``host``/``port``."""
    settings = get_settings()
    uvicorn.run(
        "stepai_admin.proxy.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

app = create_app()
"""The FastAPI application instance passed to Uvicorn."""
