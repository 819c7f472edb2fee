"""Ordered-collection editor: local edits with an explicit, all-or-nothing save.

One :class:`OrderedCollectionEditor` edits one scope.  The workflow is two
phase:

1. :meth:`~OrderedCollectionEditor.load` fetches the stored list;
   :meth:`add`, :meth:`remove`, :meth:`move` and the toggles change it in
   memory only and raise ``has_unsaved_changes``.
2. :meth:`~OrderedCollectionEditor.commit` sends the whole list as a full
   replacement.  Nothing reaches the server before that.

Concurrency model
-----------------
Everything runs on one event loop, so local mutations are applied in the
order they are issued.  Network calls may overlap:

- every :meth:`load` and :meth:`commit` takes a new generation number; a load
  whose generation is no longer current when its response arrives is
  discarded (its result and its error alike);
- a load response that arrives after a local mutation is discarded too, so
  edits made while the load was in flight are kept and stay dirty;
- only one commit may be in flight; a second one is rejected until the
  first settles;
- mutations made while a commit is in flight are kept, and the editor stays
  dirty after that commit succeeds because the server only received the
  snapshot taken when the commit started.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from stepai_admin.catalog.merchandising import ScopedListAPI
from stepai_admin.core.exceptions import FetchError, StaleResponseError, ValidationError
from stepai_admin.core.logging_config import bind_scope
from stepai_admin.core.schemas.catalog import CatalogEntity, ListEntry
from stepai_admin.editor.ordered_list import ScopedList

if TYPE_CHECKING:
    from stepai_admin.catalog.client import CatalogClient
    from stepai_admin.editor.scopes import ScopeConfig

logger = structlog.get_logger(__name__)


class OrderedCollectionEditor:
    """Editor of one merchandising scope.

    Args:
        client: Catalog client used for load and commit.
        config: Scope configuration.
    """

    def __init__(self, client: CatalogClient, config: ScopeConfig) -> None:
        self.config = config
        self.api = ScopedListAPI(client, config)
        self.has_unsaved_changes = False
        self.is_loaded = False
        self._list = ScopedList(config.key, max_size=config.max_size)
        self._generation = 0
        self._revision = 0
        self._saving = False
        self._log = logger.bind(scope=config.key)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def scope(self) -> str:
        return self.config.key

    @property
    def entries(self) -> tuple[ListEntry, ...]:
        return self._list.entries

    @property
    def entity_ids(self) -> frozenset[int]:
        return self._list.entity_ids

    def __len__(self) -> int:
        return len(self._list)

    def pinned_first(self) -> list[ListEntry]:
        return self._list.pinned_first()

    # ------------------------------------------------------------------
    # Remote operations
    # ------------------------------------------------------------------

    async def load(self) -> bool:
        """Replace the in-memory list with the stored one.

        Returns:
            ``True`` if the response was applied, ``False`` if it was
            discarded: superseded by a newer load or commit, or overtaken by
            a local edit made while the request was in flight.

        Raises:
            FetchError: If the current request fails.  The previous list and
                dirty flag are kept.
        """
        generation = self._next_generation()
        revision = self._revision
        try:
            with bind_scope(self.scope):
                entries = await self.api.fetch_entries()
        except FetchError:
            if generation != self._generation:
                self._log.info("editor.stale_load_error_discarded")
                return False
            raise

        try:
            self._ensure_current(generation)
        except StaleResponseError:
            self._log.info("editor.stale_load_discarded")
            return False

        if self._revision != revision:
            self._log.info("editor.load_overtaken_by_edit", pending_entries=len(self._list))
            return False

        self._list = ScopedList(self.config.key, entries, max_size=self.config.max_size)
        if self._list.overflow:
            self._log.warning(
                "editor.load_truncated",
                dropped=self._list.overflow,
                max_size=self.config.max_size,
            )
        self.has_unsaved_changes = False
        self.is_loaded = True
        self._log.info("editor.loaded", entries=len(self._list))
        return True

    async def commit(self) -> None:
        """Send the whole list to the server as a full replacement.

        Raises:
            ValidationError: If an earlier commit has not settled yet.
            FetchError: If the server does not confirm.  Entries and the
                dirty flag are left as they were so the user can retry.
        """
        if self._saving:
            raise ValidationError(f"A save of '{self.scope}' is already in progress")

        snapshot = self._list.entries
        revision = self._revision
        # A load still in flight would overwrite what is being saved.
        self._next_generation()
        self._saving = True
        try:
            with bind_scope(self.scope):
                await self.api.replace_entries(snapshot)
        except FetchError as exc:
            self._log.warning("editor.commit_failed", error=str(exc))
            raise
        finally:
            self._saving = False
        if self._revision == revision:
            self.has_unsaved_changes = False
        self._log.info(
            "editor.committed",
            entries=len(snapshot),
            dirty_after_commit=self.has_unsaved_changes,
        )

    async def discard(self) -> bool:
        """Drop local edits by loading the stored list again.

        Asking the user for confirmation while ``has_unsaved_changes`` is set
        is the caller's job.
        """
        return await self.load()

    # ------------------------------------------------------------------
    # Local mutations
    # ------------------------------------------------------------------

    def add(self, entity: CatalogEntity) -> ListEntry:
        """Append *entity* with ``is_featured=False`` and ``is_active=True``.

        Raises:
            ValidationError: If the entity is of the wrong kind, already
                listed, or the scope's cap is reached.
        """
        if entity.kind != self.config.kind:
            raise ValidationError(
                f"Scope '{self.scope}' holds {self.config.kind.value} entries, "
                f"not {entity.kind.value}",
                entity_id=entity.id,
            )
        entry = self._list.add(entity)
        self._touch()
        return entry

    def remove(self, entity_id: int) -> bool:
        """Remove *entity_id*; a missing id is a no-op returning ``False``."""
        removed = self._list.remove(entity_id)
        if removed:
            self._touch()
        return removed

    def move(self, from_index: int, to_index: int) -> None:
        """Move an entry with splice semantics.

        Raises:
            ValidationError: If either index is out of range.
        """
        self._list.move(from_index, to_index)
        if from_index != to_index:
            self._touch()

    def toggle_featured(self, entity_id: int) -> bool:
        """Flip ``is_featured``; return ``False`` if the entity is not listed.

        Raises:
            ValidationError: If the scope has no featured flag.
        """
        if not self.config.supports_featured:
            raise ValidationError(f"Scope '{self.scope}' has no featured entries")
        return self._toggle(entity_id, "is_featured")

    def toggle_active(self, entity_id: int) -> bool:
        """Flip ``is_active``; return ``False`` if the entity is not listed."""
        return self._toggle(entity_id, "is_active")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _toggle(self, entity_id: int, flag: str) -> bool:
        if self._list.toggle(entity_id, flag) is None:
            return False
        self._touch()
        return True

    def _touch(self) -> None:
        self._revision += 1
        self.has_unsaved_changes = True

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _ensure_current(self, generation: int) -> None:
        if generation != self._generation:
            raise StaleResponseError(self.scope)
