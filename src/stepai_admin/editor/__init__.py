"""Ordered-list merchandising editor.

Public entry points::

    from stepai_admin.editor import (
        MerchandisingController,
        OrderedCollectionEditor,
        AvailabilitySearch,
        build_scope,
    )
"""

from __future__ import annotations

from stepai_admin.editor.controller import (
    ActionResult,
    ActionStatus,
    MerchandisingController,
    Notification,
)
from stepai_admin.editor.editor import OrderedCollectionEditor
from stepai_admin.editor.ordered_list import ScopedList
from stepai_admin.editor.scopes import (
    ScopeConfig,
    build_scope,
    category_display_order,
    homepage_curations,
    homepage_step_pick,
    homepage_videos,
    trend_section,
)
from stepai_admin.editor.search import AvailabilitySearch

__all__ = [
    "ActionResult",
    "ActionStatus",
    "AvailabilitySearch",
    "MerchandisingController",
    "Notification",
    "OrderedCollectionEditor",
    "ScopeConfig",
    "ScopedList",
    "build_scope",
    "category_display_order",
    "homepage_curations",
    "homepage_step_pick",
    "homepage_videos",
    "trend_section",
]
