"""REST calls behind one merchandising scope.

:class:`ScopedListAPI` turns a :class:`~stepai_admin.editor.scopes.ScopeConfig`
into the four calls the editor and the availability search make: load the
stored list, replace it, search for candidates, and (where the scope has
them) the single-entry add/remove endpoints.

Payload shape problems are reported as
:class:`~stepai_admin.core.exceptions.FetchError` so the editor treats a
malformed answer exactly like a failed request.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from stepai_admin.catalog.client import CatalogClient
from stepai_admin.core.exceptions import FetchError, ValidationError
from stepai_admin.core.schemas.catalog import CatalogEntity, ListEntry

if TYPE_CHECKING:
    from stepai_admin.editor.scopes import ScopeConfig

logger = logging.getLogger(__name__)


class ScopedListAPI:
    """Catalog endpoints of a single scope.

    Args:
        client: Catalog client used for every request.
        config: Scope configuration naming paths and payload shape.
    """

    def __init__(self, client: CatalogClient, config: ScopeConfig) -> None:
        self.client = client
        self.config = config

    async def fetch_entries(self) -> list[ListEntry]:
        """Return the stored entries of the scope, in stored order.

        Raises:
            FetchError: If the request fails or the payload is not a list of
                well-formed entries.
        """
        data = await self.client.get(self.config.list_path, params=self.config.list_params)
        return _parse_list(data, self.config, ListEntry.from_wire, self.config.list_path)

    async def replace_entries(self, entries: Sequence[ListEntry]) -> None:
        """Replace the stored list of the scope with *entries*.

        Raises:
            FetchError: If the server does not confirm the replacement.
        """
        body: dict[str, Any] = {
            self.config.payload_key: [
                entry.to_wire(include_featured=self.config.supports_featured)
                for entry in entries
            ],
        }
        body.update(self.config.commit_extra)
        await self.client.put(self.config.commit_path, json=body)
        logger.info(
            "merchandising: replaced %d entries in scope %s",
            len(entries),
            self.config.key,
        )

    async def search_available(self, query: str, limit: int) -> list[CatalogEntity]:
        """Return candidate entities for the scope.

        The scope context is sent along so the server can leave out entities
        already in the scope; callers still filter the result client-side.

        Raises:
            FetchError: If the request fails or the payload is malformed.
        """
        params = {**self.config.available_params, "search": query, "limit": limit}
        data = await self.client.get(self.config.available_path, params=params)
        return _parse_list(data, self.config, CatalogEntity.from_wire, self.config.available_path)

    async def add_entry(self, entry: ListEntry) -> None:
        """Store one entry immediately through the single-entry endpoint.

        Raises:
            ValidationError: If the scope has no single-entry endpoint.
            FetchError: If the server rejects the entry.
        """
        path = self._items_path()
        body = entry.to_wire(include_featured=True)
        body.pop("is_active", None)
        await self.client.post(path, json=body)

    async def remove_entry(self, entity_id: int) -> None:
        """Delete one entry immediately through the single-entry endpoint.

        Raises:
            ValidationError: If the scope has no single-entry endpoint.
            FetchError: If the server rejects the deletion.
        """
        await self.client.delete(f"{self._items_path()}/{entity_id}")

    def _items_path(self) -> str:
        if self.config.items_path is None:
            raise ValidationError(
                f"Scope '{self.config.key}' does not support single-entry changes"
            )
        return self.config.items_path


def _parse_list(data: Any, config: ScopeConfig, parse: Any, path: str) -> list[Any]:
    if not isinstance(data, list):
        raise FetchError(f"Expected a list from {path}", url=path)
    try:
        return [parse(config.kind, raw) for raw in data]
    except (ValueError, TypeError) as exc:
        logger.warning("merchandising: malformed payload from %s: %s", path, exc)
        raise FetchError(f"Malformed payload from {path}: {exc}", url=path) from exc
