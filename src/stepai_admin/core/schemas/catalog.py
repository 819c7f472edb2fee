"""Pydantic schemas for catalog entities and merchandising list entries.

The merchandising editor handles three kinds of catalog entity (AI services,
AI videos, curations).  Each kind names its id, title and image fields
differently on the wire; :class:`EntityKind` carries that mapping so the rest
of the code works with one :class:`CatalogEntity` shape.

Models here are frozen: the editor replaces entries with ``model_copy`` on
every mutation instead of editing them in place.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class EntityKind(str, enum.Enum):
    """Kind of catalog entity referenced by a merchandising list."""

    AI_SERVICE = "ai_service"
    AI_VIDEO = "ai_video"
    CURATION = "curation"

    @property
    def entry_id_field(self) -> str:
        """Field naming the entity inside a list entry (``ai_service_id`` ...)."""
        return _ENTRY_ID_FIELDS[self]

    @property
    def name_field(self) -> str:
        return _NAME_FIELDS[self]

    @property
    def image_field(self) -> str:
        return _IMAGE_FIELDS[self]


_ENTRY_ID_FIELDS: dict[EntityKind, str] = {
    EntityKind.AI_SERVICE: "ai_service_id",
    EntityKind.AI_VIDEO: "ai_video_id",
    EntityKind.CURATION: "curation_id",
}

_NAME_FIELDS: dict[EntityKind, str] = {
    EntityKind.AI_SERVICE: "ai_name",
    EntityKind.AI_VIDEO: "video_title",
    EntityKind.CURATION: "curation_title",
}

_IMAGE_FIELDS: dict[EntityKind, str] = {
    EntityKind.AI_SERVICE: "ai_logo",
    EntityKind.AI_VIDEO: "thumbnail_url",
    EntityKind.CURATION: "curation_thumbnail",
}


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


class CatalogEntity(BaseModel):
    """A read-only reference to a catalog entity.

    Returned by the availability search and embedded in every
    :class:`ListEntry`.

    Attributes:
        kind: Which catalog table the entity belongs to.
        id: Catalog id of the entity.
        name: Display name (``ai_name``, ``video_title`` or ``curation_title``).
        image_url: Logo or thumbnail URL, if any.
        attributes: The remaining raw fields as received (company name,
            description, view count ...), kept for display.
    """

    model_config = ConfigDict(frozen=True)

    kind: EntityKind
    id: int
    name: str = ""
    image_url: Optional[str] = None
    attributes: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_wire(cls, kind: EntityKind, raw: dict[str, Any]) -> CatalogEntity:
        """Build an entity from a catalog record keyed by ``id``.

        Raises:
            ValueError: If *raw* is not a mapping or has no usable ``id``.
        """
        if not isinstance(raw, dict):
            raise ValueError(f"Expected an object, got {type(raw).__name__}")
        if "id" not in raw:
            _missing("id")
        return cls(
            kind=kind,
            id=raw["id"],
            name=raw.get(kind.name_field) or "",
            image_url=raw.get(kind.image_field),
            attributes={
                k: v
                for k, v in raw.items()
                if k not in ("id", kind.name_field, kind.image_field)
            },
        )


class ListEntry(BaseModel):
    """One position in a merchandising list.

    Attributes:
        entity: The referenced catalog entity.
        display_order: 1-based position; dense and unique within the list.
        is_featured: Pinned flag.  Only sent for scopes that support it.
        is_active: Soft-visibility flag; inactive entries are kept but hidden
            from the public site.
        record_id: Id of the stored ordering row, when loaded from the server.
            Entries added locally have none until the next load.
    """

    model_config = ConfigDict(frozen=True)

    entity: CatalogEntity
    display_order: int = Field(ge=1)
    is_featured: bool = False
    is_active: bool = True
    record_id: Optional[int] = None

    @property
    def entity_id(self) -> int:
        return self.entity.id

    @classmethod
    def from_wire(cls, kind: EntityKind, raw: dict[str, Any]) -> ListEntry:
        """Build an entry from a stored ordering row.

        Rows carry the entity id under the kind's entry field
        (``ai_service_id`` ...) and the row's own id under ``id``; entity
        display fields are joined in by the server.

        Raises:
            ValueError: If *raw* is malformed.
        """
        if not isinstance(raw, dict):
            raise ValueError(f"Expected an object, got {type(raw).__name__}")
        id_field = kind.entry_id_field
        if id_field not in raw:
            _missing(id_field)
        entity_fields = {
            k: v
            for k, v in raw.items()
            if k not in ("id", id_field, "display_order", "is_featured", "is_active")
        }
        entity_fields["id"] = raw[id_field]
        return cls(
            entity=CatalogEntity.from_wire(kind, entity_fields),
            display_order=raw.get("display_order") or 1,
            is_featured=bool(raw.get("is_featured", False)),
            is_active=bool(raw.get("is_active", True)),
            record_id=raw.get("id"),
        )

    def to_wire(self, *, include_featured: bool) -> dict[str, Any]:
        """Serialise the entry for a full-list replacement request."""
        payload: dict[str, Any] = {
            self.entity.kind.entry_id_field: self.entity.id,
            "display_order": self.display_order,
            "is_active": self.is_active,
        }
        if include_featured:
            payload["is_featured"] = self.is_featured
        return payload


def _missing(field_name: str) -> None:
    raise ValueError(f"Missing required field '{field_name}'")


# ---------------------------------------------------------------------------
# Categories and trend sections
# ---------------------------------------------------------------------------


class Category(BaseModel):
    """A catalog category as shown in the scope picker.

    Attributes:
        id: Category id (the scope key of a category display order list).
        category_name: Display name.
        category_icon: Emoji or icon URL, if any.
        parent_id: Id of the parent category for sub-categories.
    """

    model_config = ConfigDict(extra="ignore")

    id: int
    category_name: str
    category_icon: Optional[str] = None
    parent_id: Optional[int] = None


class TrendSection(BaseModel):
    """A trend block on the homepage (``popular``, ``latest``, ``step_pick`` ...).

    Attributes:
        id: Section id; ``None`` for a section not yet stored.
        section_type: Machine name of the section.
        section_title: Title shown on the homepage.
        section_description: Sub-title shown under the title.
        is_category_based: Whether services are curated per main category.
        is_active: Whether the section is shown.
        display_order: Position of the section on the homepage.
    """

    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    section_type: str
    section_title: str
    section_description: Optional[str] = ""
    is_category_based: bool = True
    is_active: bool = True
    display_order: int = 1
