"""Pydantic schemas for request/response validation.

Sub-modules:
    catalog: EntityKind, CatalogEntity, ListEntry, Category, TrendSection
"""

from __future__ import annotations
