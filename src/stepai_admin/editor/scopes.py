"""Scope configurations for the merchandising editor.

A scope is one stored ordering: the pinned services of a category page, the
homepage video strip, the homepage curations, the STEP PICK strip, or the
services of one trend section.  All of them are edited with the same
:class:`~stepai_admin.editor.editor.OrderedCollectionEditor`; what differs is
captured by a :class:`ScopeConfig` (endpoints, payload key, entity kind, cap,
whether entries carry a featured flag).

Configurations are built by the factory functions below, or by name through
:func:`build_scope`::

    config = build_scope("category-display-order", category_id=12)
    config = build_scope("trend-section", section_id=3, category_id=7)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from stepai_admin.config.settings import get_settings
from stepai_admin.core.schemas.catalog import EntityKind

CATEGORY_DISPLAY_ORDER = "category-display-order"
HOMEPAGE_VIDEOS = "homepage-videos"
HOMEPAGE_CURATIONS = "homepage-curations"
STEP_PICK = "step-pick"
TREND_SECTION = "trend-section"

_HOMEPAGE = "/api/homepage-settings"
_CATEGORY_ORDER = "/api/category-display-order"


@dataclass(frozen=True)
class ScopeConfig:
    """Everything the editor needs to know about one scope.

    Attributes:
        key: Unique scope key, e.g. ``"category-display-order:12"``.  Used to
            tag requests so stale responses can be recognised.
        kind: Entity kind referenced by the entries.
        list_path: ``GET`` path returning the stored entries.
        commit_path: ``PUT`` path replacing the stored entries.
        payload_key: Body key holding the entry list on commit
            (``"services"``, ``"videos"``, ``"curations"``).
        available_path: ``GET`` path of the availability search.
        list_params: Query parameters of the load request.
        available_params: Scope context sent with every availability search
            so the server can exclude entities already in the scope.
        commit_extra: Additional top-level body fields sent on commit.
        max_size: Maximum number of entries, or ``None`` for no cap.
        supports_featured: Whether entries carry ``is_featured``.
        items_path: Base path of the single-entry add/remove endpoints, or
            ``None`` when the scope only supports full replacement.
    """

    key: str
    kind: EntityKind
    list_path: str
    commit_path: str
    payload_key: str
    available_path: str
    list_params: dict[str, Any] = field(default_factory=dict)
    available_params: dict[str, Any] = field(default_factory=dict)
    commit_extra: dict[str, Any] = field(default_factory=dict)
    max_size: Optional[int] = None
    supports_featured: bool = False
    items_path: Optional[str] = None

    @property
    def is_capped(self) -> bool:
        return self.max_size is not None


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def category_display_order(category_id: int, max_size: int | None = None) -> ScopeConfig:
    """Services pinned to the top of one category page (capped, featurable)."""
    cap = max_size if max_size is not None else get_settings().category_display_max_size
    return ScopeConfig(
        key=f"{CATEGORY_DISPLAY_ORDER}:{category_id}",
        kind=EntityKind.AI_SERVICE,
        list_path=f"{_CATEGORY_ORDER}/{category_id}",
        commit_path=f"{_CATEGORY_ORDER}/{category_id}/reorder",
        payload_key="services",
        available_path=f"{_CATEGORY_ORDER}/available-services",
        list_params={"limit": cap},
        available_params={"category_id": category_id},
        max_size=cap,
        supports_featured=True,
        items_path=f"{_CATEGORY_ORDER}/{category_id}/services",
    )


def homepage_videos() -> ScopeConfig:
    return ScopeConfig(
        key=HOMEPAGE_VIDEOS,
        kind=EntityKind.AI_VIDEO,
        list_path=f"{_HOMEPAGE}/videos",
        commit_path=f"{_HOMEPAGE}/videos",
        payload_key="videos",
        available_path=f"{_HOMEPAGE}/available-videos",
    )


def homepage_curations() -> ScopeConfig:
    return ScopeConfig(
        key=HOMEPAGE_CURATIONS,
        kind=EntityKind.CURATION,
        list_path=f"{_HOMEPAGE}/curations",
        commit_path=f"{_HOMEPAGE}/curations",
        payload_key="curations",
        available_path=f"{_HOMEPAGE}/available-curations",
    )


def homepage_step_pick() -> ScopeConfig:
    return ScopeConfig(
        key=STEP_PICK,
        kind=EntityKind.AI_SERVICE,
        list_path=f"{_HOMEPAGE}/step-pick",
        commit_path=f"{_HOMEPAGE}/step-pick",
        payload_key="services",
        available_path=f"{_HOMEPAGE}/available-services",
    )


def trend_section(section_id: int, category_id: int | None = None) -> ScopeConfig:
    """Services of one trend section, optionally narrowed to a main category.

    Category-based sections keep a separate ordering per main category; the
    category id then becomes part of the scope key, the load filter and the
    commit body.
    """
    key = f"{TREND_SECTION}:{section_id}"
    if category_id is not None:
        key = f"{key}:{category_id}"
    path = f"{_HOMEPAGE}/trends/{section_id}/services"
    return ScopeConfig(
        key=key,
        kind=EntityKind.AI_SERVICE,
        list_path=path,
        commit_path=path,
        payload_key="services",
        available_path=f"{_HOMEPAGE}/available-services",
        list_params={"category_id": category_id},
        available_params={"section_id": section_id, "category_id": category_id},
        commit_extra={"category_id": category_id},
        supports_featured=True,
    )


SCOPE_BUILDERS: dict[str, Callable[..., ScopeConfig]] = {
    CATEGORY_DISPLAY_ORDER: category_display_order,
    HOMEPAGE_VIDEOS: homepage_videos,
    HOMEPAGE_CURATIONS: homepage_curations,
    STEP_PICK: homepage_step_pick,
    TREND_SECTION: trend_section,
}


def build_scope(name: str, **kwargs: Any) -> ScopeConfig:
    """Build the configuration of scope *name* from its parameters.

    Raises:
        KeyError: If *name* is not a known scope kind.
    """
    try:
        builder = SCOPE_BUILDERS[name]
    except KeyError:
        raise KeyError(
            f"Unknown scope '{name}'. Known scopes: {sorted(SCOPE_BUILDERS)}"
        ) from None
    return builder(**kwargs)
