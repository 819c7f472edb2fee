"""Application settings loaded from environment variables.

Uses Pydantic Settings v2 for validated, type-safe configuration.
Every tunable of the catalog client and the reverse proxy is read through
this module; never call ``os.getenv`` directly elsewhere in the codebase.

Usage::

    from stepai_admin.config.settings import get_settings

    settings = get_settings()
    base_url = settings.api_base_url
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Back-office configuration backed by environment variables and an optional .env file.

    Every field has a default so the proxy and the client start without any
    environment in development.  ``PORT`` is read case-insensitively, which
    keeps the hosting platform convention of a bare ``PORT`` variable.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Remote catalog service
    # ------------------------------------------------------------------

    api_base_url: str = "http://localhost:3004"
    """Base URL of the catalog REST API used by :class:`CatalogClient`.

    Point it at the reverse proxy (``http://localhost:3000``) or directly at
    the catalog backend.  No trailing slash.
    """

    request_timeout: float = 30.0
    """Seconds to wait for a catalog or upstream response before failing."""

    # ------------------------------------------------------------------
    # Reverse proxy
    # ------------------------------------------------------------------

    upstream_url: str = "http://localhost:3004"
    """Catalog backend that ``/api/*`` and ``/uploads/*`` are forwarded to."""

    host: str = "0.0.0.0"
    """Interface the proxy listens on."""

    port: int = 3000
    """Listen port of the proxy (``PORT`` in the environment)."""

    build_dir: str = "build"
    """Directory holding the compiled single-page application bundle."""

    proxy_user_agent: str = "StepAI-Admin-Proxy/1.0"
    """``User-Agent`` header sent on every upstream request."""

    # ------------------------------------------------------------------
    # Merchandising editor
    # ------------------------------------------------------------------

    category_display_max_size: int = 20
    """Maximum number of services pinned to the top of a category page."""

    available_search_limit: int = 50
    """Default page size of the availability search."""

    # ------------------------------------------------------------------
    # Application behaviour
    # ------------------------------------------------------------------

    app_name: str = "StepAI Admin"
    """Human-readable application name shown in the OpenAPI docs."""

    debug: bool = False
    """Enable FastAPI debug mode.  Never True in production."""

    log_level: str = "INFO"
    """Logging verbosity.  One of: DEBUG, INFO, WARNING, ERROR, CRITICAL."""


@lru_cache
def get_settings() -> Settings:
    """Return the cached application settings singleton.

    Uses ``functools.lru_cache`` so that Pydantic Settings reads the environment
    and .env file exactly once per process lifetime.  In tests, call
    ``get_settings.cache_clear()`` after patching environment variables.

    Returns:
        Settings: The validated settings object.
    """
    return Settings()
