"""Backend table bootstrap.

The merchandising screens each ship a "set up tables" action that asks the
catalog service to create (idempotently) the ordering tables it needs and
seed their initial rows.
"""

from __future__ import annotations

import logging

from stepai_admin.catalog.client import CatalogClient

logger = logging.getLogger(__name__)

SETUP_FEATURES: frozenset[str] = frozenset({
    "category-display-order",
    "homepage-settings",
})


async def setup_tables(client: CatalogClient, feature: str) -> None:
    """Ask the catalog service to create the tables of *feature*.

    Raises:
        ValueError: If *feature* has no setup endpoint.
        FetchError: If the service reports a failure.
    """
    if feature not in SETUP_FEATURES:
        raise ValueError(
            f"Unknown setup feature '{feature}'. Known: {sorted(SETUP_FEATURES)}"
        )
    await client.post(f"/api/setup/{feature}")
    logger.info("setup: tables ready for %s", feature)
