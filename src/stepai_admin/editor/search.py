"""Availability search: catalog entities that can still be added to a scope.

Each call issues a fresh request (no caching, no debounce; debouncing
keystrokes is up to the UI).  The scope context goes to the server so it can
exclude what is already listed, and results are filtered again against the
editor's current list, which may have changed since the server answered.

A search that is superseded by a newer one before its response arrives is
discarded and returns ``None``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from stepai_admin.config.settings import get_settings
from stepai_admin.core.exceptions import FetchError, StaleResponseError
from stepai_admin.core.logging_config import bind_scope
from stepai_admin.core.schemas.catalog import CatalogEntity

if TYPE_CHECKING:
    from stepai_admin.editor.editor import OrderedCollectionEditor

logger = logging.getLogger(__name__)


class AvailabilitySearch:
    """Candidate search bound to one editor.

    Args:
        editor: Editor whose scope and current entries drive the search.
        default_limit: Page size when :meth:`search` gets no ``limit``.
            Defaults to ``Settings.available_search_limit``.
    """

    def __init__(
        self,
        editor: OrderedCollectionEditor,
        default_limit: int | None = None,
    ) -> None:
        self.editor = editor
        self.default_limit = (
            default_limit if default_limit is not None else get_settings().available_search_limit
        )
        self.query = ""
        self._results: list[CatalogEntity] = []
        self._generation = 0

    @property
    def results(self) -> list[CatalogEntity]:
        """Latest applied results minus anything the editor now lists."""
        listed = self.editor.entity_ids
        return [entity for entity in self._results if entity.id not in listed]

    async def search(self, query: str = "", limit: int | None = None) -> list[CatalogEntity] | None:
        """Search the scope's candidates.

        An empty *query* returns the server's default page.

        Returns:
            The candidates, never containing an entity already in the
            editor's list, or ``None`` if a newer search superseded this one.

        Raises:
            FetchError: If the current request fails.  Previous results are kept.
        """
        self._generation += 1
        generation = self._generation
        scope = self.editor.scope
        if limit is None:
            limit = self.default_limit
        try:
            with bind_scope(scope):
                found = await self.editor.api.search_available(query, limit)
        except FetchError:
            if generation != self._generation:
                logger.debug("search: discarded stale error for %r in %s", query, scope)
                return None
            raise

        try:
            self._ensure_current(generation, scope)
        except StaleResponseError:
            logger.debug("search: discarded stale results for %r in %s", query, scope)
            return None

        self.query = query
        self._results = found
        return self.results

    def _ensure_current(self, generation: int, scope: str) -> None:
        if generation != self._generation or scope != self.editor.scope:
            raise StaleResponseError(scope)
