"""Trend section management for the homepage.

Trend sections are the blocks of the homepage trend area ("popular",
"latest", "step_pick" ...).  Sections are saved with an upsert endpoint that
takes a list: entries with an ``id`` are updated, entries without one are
created.  The services inside a section are edited with the merchandising
editor (see :func:`stepai_admin.editor.scopes.trend_section`).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pydantic import ValidationError as PydanticValidationError

from stepai_admin.catalog.client import CatalogClient
from stepai_admin.core.exceptions import FetchError
from stepai_admin.core.schemas.catalog import TrendSection

logger = logging.getLogger(__name__)

_TRENDS_PATH = "/api/homepage-settings/trends"

DEFAULT_SECTIONS: tuple[TrendSection, ...] = (
    TrendSection(
        section_type="popular",
        section_title="요즘 많이 쓰는",
        section_description="사용자들이 많이 이용하는 인기 AI 서비스",
        display_order=1,
    ),
    TrendSection(
        section_type="latest",
        section_title="최신 등록",
        section_description="최근에 등록된 새로운 AI 서비스",
        display_order=2,
    ),
    TrendSection(
        section_type="step_pick",
        section_title="STEP PICK",
        section_description="STEP AI가 추천하는 엄선된 AI 서비스",
        display_order=3,
    ),
)


class TrendSectionService:
    """CRUD over the homepage trend sections.

    Args:
        client: Catalog client used for every request.
    """

    def __init__(self, client: CatalogClient) -> None:
        self.client = client

    async def list_sections(self) -> list[TrendSection]:
        """Return the stored sections in the server's order.

        Raises:
            FetchError: If the request fails or the payload is malformed.
        """
        data = await self.client.get(_TRENDS_PATH)
        if not isinstance(data, list):
            raise FetchError("Expected a list of trend sections", url=_TRENDS_PATH)
        try:
            return [TrendSection.model_validate(raw) for raw in data]
        except PydanticValidationError as exc:
            raise FetchError(f"Malformed trend section: {exc}", url=_TRENDS_PATH) from exc

    async def save_sections(self, sections: Sequence[TrendSection]) -> None:
        """Upsert *sections* (update those with an id, create the others)."""
        payload = [
            section.model_dump(exclude_none=True) for section in sections
        ]
        await self.client.put(_TRENDS_PATH, json={"sections": payload})
        logger.info("trends: saved %d section(s)", len(payload))

    async def add_section(
        self, section: TrendSection, existing: Sequence[TrendSection]
    ) -> TrendSection:
        """Create *section* after the *existing* ones and return what was sent."""
        new_section = section.model_copy(
            update={"id": None, "display_order": len(existing) + 1}
        )
        await self.save_sections([new_section])
        return new_section

    async def delete_section(self, section_id: int) -> None:
        await self.client.delete(f"{_TRENDS_PATH}/{section_id}")
        logger.info("trends: deleted section %d", section_id)

    async def ensure_default_sections(self) -> list[TrendSection]:
        """Create the default sections when none exist; return the stored list."""
        sections = await self.list_sections()
        if sections:
            return sections
        logger.info("trends: no sections stored, creating defaults")
        await self.save_sections(DEFAULT_SECTIONS)
        return await self.list_sections()
