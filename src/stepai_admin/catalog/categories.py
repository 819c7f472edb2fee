"""Category lookups used as scope pickers.

``GET /api/categories`` returns the category tree (main categories with a
``children`` list).  The category display order screen needs it flat,
each main category followed by its sub-categories.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from stepai_admin.catalog.client import CatalogClient
from stepai_admin.core.exceptions import FetchError
from stepai_admin.core.schemas.catalog import Category


def flatten_categories(tree: list[dict[str, Any]]) -> list[Category]:
    """Flatten a category tree into parent-then-children order.

    Raises:
        FetchError: If a node is not a valid category.
    """
    flat: list[Category] = []
    try:
        for parent in tree:
            flat.append(Category.model_validate(parent))
            for child in parent.get("children") or []:
                child = {**child}
                child.setdefault("parent_id", parent.get("id"))
                flat.append(Category.model_validate(child))
    except (AttributeError, TypeError, PydanticValidationError) as exc:
        raise FetchError(f"Malformed category tree: {exc}", url="/api/categories") from exc
    return flat


async def list_categories(client: CatalogClient) -> list[Category]:
    """Return every category, main categories first in each group."""
    data = await client.get("/api/categories")
    if not isinstance(data, list):
        raise FetchError("Expected a list of categories", url="/api/categories")
    return flatten_categories(data)


async def list_main_categories(client: CatalogClient) -> list[Category]:
    """Return the main categories that trend sections can be split by."""
    path = "/api/homepage-settings/main-categories"
    data = await client.get(path)
    if not isinstance(data, list):
        raise FetchError("Expected a list of categories", url=path)
    try:
        return [Category.model_validate(raw) for raw in data]
    except PydanticValidationError as exc:
        raise FetchError(f"Malformed category list: {exc}", url=path) from exc
