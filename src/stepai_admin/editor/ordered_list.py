"""In-memory ordered list of merchandising entries.

:class:`ScopedList` is the local state of the editor.  Every mutation keeps
three invariants:

- ``display_order`` values are exactly ``1..N`` in list order;
- a catalog entity appears at most once;
- ``N`` never exceeds ``max_size`` when the scope is capped.

Rejected operations raise
:class:`~stepai_admin.core.exceptions.ValidationError` and leave the list
untouched.  The class knows nothing about the network or about dirtiness;
:class:`~stepai_admin.editor.editor.OrderedCollectionEditor` layers those on.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from stepai_admin.core.exceptions import ValidationError
from stepai_admin.core.schemas.catalog import CatalogEntity, ListEntry


def reindex(entries: Iterable[ListEntry]) -> list[ListEntry]:
    """Return *entries* with ``display_order`` rewritten to ``1..N``."""
    result = []
    for position, entry in enumerate(entries, start=1):
        if entry.display_order != position:
            entry = entry.model_copy(update={"display_order": position})
        result.append(entry)
    return result


class ScopedList:
    """The ordered entries of one scope.

    Args:
        scope: Scope key the entries belong to.
        entries: Initial entries.  They are sorted by their stored
            ``display_order`` (stable for ties) and reindexed; a repeated
            entity keeps its first occurrence.  Entries past ``max_size``
            are dropped from the tail and counted in :attr:`overflow`.
        max_size: Cap on the number of entries, or ``None``.
    """

    def __init__(
        self,
        scope: str,
        entries: Iterable[ListEntry] = (),
        max_size: int | None = None,
    ) -> None:
        self.scope = scope
        self.max_size = max_size
        seen: set[int] = set()
        unique = []
        for entry in sorted(entries, key=lambda e: e.display_order):
            if entry.entity_id in seen:
                continue
            seen.add(entry.entity_id)
            unique.append(entry)
        self.overflow = 0
        if max_size is not None and len(unique) > max_size:
            self.overflow = len(unique) - max_size
            unique = unique[:max_size]
        self._entries: list[ListEntry] = reindex(unique)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def entries(self) -> tuple[ListEntry, ...]:
        return tuple(self._entries)

    @property
    def entity_ids(self) -> frozenset[int]:
        return frozenset(entry.entity_id for entry in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ListEntry]:
        return iter(tuple(self._entries))

    def __contains__(self, entity_id: object) -> bool:
        return any(entry.entity_id == entity_id for entry in self._entries)

    @property
    def is_full(self) -> bool:
        return self.max_size is not None and len(self._entries) >= self.max_size

    def index_of(self, entity_id: int) -> int | None:
        for index, entry in enumerate(self._entries):
            if entry.entity_id == entity_id:
                return index
        return None

    def pinned_first(self) -> list[ListEntry]:
        """Featured entries first, each group in ``display_order``.

        A presentation view only; the stored order is not changed.
        """
        featured = [e for e in self._entries if e.is_featured]
        rest = [e for e in self._entries if not e.is_featured]
        return featured + rest

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, entity: CatalogEntity) -> ListEntry:
        """Append *entity* at the end of the list.

        Raises:
            ValidationError: If the entity is already listed or the list is full.
        """
        if entity.id in self:
            raise ValidationError(
                f"'{entity.name or entity.id}' is already in the list", entity_id=entity.id
            )
        if self.is_full:
            raise ValidationError(
                f"The list is limited to {self.max_size} entries", entity_id=entity.id
            )
        entry = ListEntry(entity=entity, display_order=len(self._entries) + 1)
        self._entries.append(entry)
        return entry

    def remove(self, entity_id: int) -> bool:
        """Remove the entry for *entity_id*; return ``False`` if it was not listed."""
        index = self.index_of(entity_id)
        if index is None:
            return False
        del self._entries[index]
        self._entries = reindex(self._entries)
        return True

    def move(self, from_index: int, to_index: int) -> None:
        """Move the entry at *from_index* so that it ends up at *to_index*.

        Splice semantics: entries between the two positions shift by one.

        Raises:
            ValidationError: If either index is outside ``0..N-1``.
        """
        size = len(self._entries)
        for index in (from_index, to_index):
            if not 0 <= index < size:
                raise ValidationError(
                    f"Position {index} is outside the list (0..{size - 1})"
                )
        entries = list(self._entries)
        moved = entries.pop(from_index)
        entries.insert(to_index, moved)
        self._entries = reindex(entries)

    def toggle(self, entity_id: int, flag: str) -> ListEntry | None:
        """Flip boolean *flag* (``is_featured`` or ``is_active``) on one entry.

        Returns the updated entry, or ``None`` if the entity is not listed.
        """
        index = self.index_of(entity_id)
        if index is None:
            return None
        current = self._entries[index]
        updated = current.model_copy(update={flag: not getattr(current, flag)})
        self._entries[index] = updated
        return updated
