"""Shared pytest fixtures for StepAI Admin tests.

Fixture summary
---------------
settings       : Settings pointing at a fake catalog host.
catalog_client : CatalogClient bound to ``http://catalog.test`` (mock with respx).
admin_session  : Logged-in admin session with a bearer token.
service        : Factory for AI-service CatalogEntity objects.

No test needs a live backend: every HTTP call is mocked with ``respx`` or
replaced by an in-memory fake.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Callable

import pytest
import pytest_asyncio

# ---------------------------------------------------------------------------
# Test environment bootstrap
# ---------------------------------------------------------------------------
# Set before any application module is imported so Settings() picks them up.

_TEST_ENV_DEFAULTS: dict[str, str] = {
    "API_BASE_URL": "http://catalog.test",
    "UPSTREAM_URL": "http://catalog.test",
    "LOG_LEVEL": "INFO",
}

for _key, _default in _TEST_ENV_DEFAULTS.items():
    os.environ.setdefault(_key, _default)

from stepai_admin.catalog.client import CatalogClient  # noqa: E402
from stepai_admin.config.settings import Settings, get_settings  # noqa: E402
from stepai_admin.core.schemas.catalog import CatalogEntity, EntityKind  # noqa: E402
from stepai_admin.core.session import AdminSession, AdminUser  # noqa: E402
from tests.factories.catalog import CATALOG_URL  # noqa: E402

get_settings.cache_clear()


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings with a fake upstream and an empty build directory."""
    return Settings(
        api_base_url=CATALOG_URL,
        upstream_url=CATALOG_URL,
        build_dir=str(tmp_path / "build"),
    )


@pytest.fixture
def admin_session() -> AdminSession:
    return AdminSession(
        token="test-token-123",
        user=AdminUser(id=1, name="Admin", email="admin@stepai.test", user_type="admin"),
    )


@pytest_asyncio.fixture
async def catalog_client() -> AsyncGenerator[CatalogClient, None]:
    """Anonymous catalog client; mock its requests with ``respx.mock(base_url=CATALOG_URL)``."""
    client = CatalogClient(CATALOG_URL)
    try:
        yield client
    finally:
        await client.aclose()


@pytest.fixture
def service() -> Callable[..., CatalogEntity]:
    """Return a factory building AI-service entities: ``service(7)``."""

    def _make(entity_id: int, name: str | None = None) -> CatalogEntity:
        return CatalogEntity(
            kind=EntityKind.AI_SERVICE,
            id=entity_id,
            name=name or f"Service {entity_id}",
        )

    return _make
