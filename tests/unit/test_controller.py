"""Unit tests for the merchandising screen controller (editor/controller.py).

The controller never raises: each test checks the ActionResult status, the
notifications pushed, and which editor ends up installed.
"""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

import httpx
import pytest
import respx

from stepai_admin.catalog.merchandising import ScopedListAPI
from stepai_admin.editor.controller import (
    UNSAVED_SCOPE_CHANGE_PROMPT,
    ActionStatus,
    MerchandisingController,
    Notification,
)
from stepai_admin.editor.scopes import category_display_order, homepage_step_pick
from tests.factories.catalog import CATALOG_URL, AIServiceFactory, envelope, service_rows


def _route_category(mock: respx.MockRouter, category_id: int, *ids: int) -> respx.Route:
    return mock.get(f"/api/category-display-order/{category_id}").mock(
        return_value=httpx.Response(200, json=envelope(service_rows(*ids)))
    )


async def _controller_on(
    catalog_client, category_id: int, *ids: int, **kwargs
) -> MerchandisingController:
    controller = MerchandisingController(catalog_client, **kwargs)
    with respx.mock(base_url=CATALOG_URL) as mock:
        _route_category(mock, category_id, *ids)
        result = await controller.select_scope(category_display_order(category_id))
    assert result.ok
    return controller


# ---------------------------------------------------------------------------
# Scope selection
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
class TestSelectScope:
    async def test_first_failed_load_installs_empty_editor(self, catalog_client) -> None:
        seen: list[Notification] = []
        controller = MerchandisingController(catalog_client, notify=seen.append)

        with respx.mock(base_url=CATALOG_URL) as mock:
            mock.get("/api/category-display-order/4").mock(
                side_effect=httpx.ConnectError("refused")
            )
            result = await controller.select_scope(category_display_order(4))

        assert result.status is ActionStatus.FAILED
        assert controller.editor is not None
        assert controller.editor.entries == ()
        assert controller.editor.is_loaded is False
        assert seen and seen[0].level == "error"
        assert seen == controller.notifications

    async def test_failed_switch_keeps_previous_scope(self, catalog_client) -> None:
        controller = await _controller_on(catalog_client, 1, 10, 11)
        previous = controller.editor

        with respx.mock(base_url=CATALOG_URL) as mock:
            mock.get("/api/category-display-order/2").mock(
                return_value=httpx.Response(500, json=envelope(success=False, error="db down"))
            )
            result = await controller.select_scope(category_display_order(2))

        assert result.status is ActionStatus.FAILED
        assert "db down" in result.message
        assert controller.editor is previous
        assert [e.entity_id for e in controller.editor.entries] == [10, 11]

    async def test_unsaved_changes_declined_cancels_switch(self, catalog_client) -> None:
        controller = await _controller_on(catalog_client, 1, 10, 11)
        controller.move(1, 0)
        prompts: list[str] = []

        def decline(prompt: str) -> bool:
            prompts.append(prompt)
            return False

        with respx.mock(base_url=CATALOG_URL, assert_all_called=False) as mock:
            result = await controller.select_scope(category_display_order(2), confirm=decline)
            assert not mock.calls

        assert result.status is ActionStatus.CANCELLED
        assert prompts == [UNSAVED_SCOPE_CHANGE_PROMPT]
        assert controller.editor.scope == "category-display-order:1"
        assert controller.has_unsaved_changes is True

    async def test_unsaved_changes_without_confirm_cancels(self, catalog_client) -> None:
        controller = await _controller_on(catalog_client, 1, 10)
        controller.remove(10)

        result = await controller.select_scope(category_display_order(2))

        assert result.status is ActionStatus.CANCELLED

    async def test_unsaved_changes_confirmed_switches(self, catalog_client) -> None:
        controller = await _controller_on(catalog_client, 1, 10)
        controller.remove(10)

        with respx.mock(base_url=CATALOG_URL) as mock:
            _route_category(mock, 2, 20, 21)
            result = await controller.select_scope(
                category_display_order(2), confirm=lambda prompt: True
            )

        assert result.ok
        assert controller.editor.scope == "category-display-order:2"
        assert controller.has_unsaved_changes is False
        assert controller.search_box.editor is controller.editor

    async def test_superseded_selection_is_discarded(self, catalog_client, monkeypatch) -> None:
        pending: dict[str, asyncio.Future] = {}

        async def fake_fetch(api: ScopedListAPI) -> list:
            future = asyncio.get_running_loop().create_future()
            pending[api.config.key] = future
            return await future

        monkeypatch.setattr(ScopedListAPI, "fetch_entries", fake_fetch)
        controller = MerchandisingController(catalog_client)

        first = asyncio.create_task(controller.select_scope(category_display_order(1)))
        await asyncio.sleep(0)
        second = asyncio.create_task(controller.select_scope(homepage_step_pick()))
        await asyncio.sleep(0)

        pending["step-pick"].set_result([])
        assert (await second).ok
        pending["category-display-order:1"].set_result([])
        assert (await first).status is ActionStatus.DISCARDED

        assert controller.editor.scope == "step-pick"


# ---------------------------------------------------------------------------
# Local edits
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
class TestLocalEdits:
    async def test_edit_without_scope_is_rejected(self, catalog_client, service) -> None:
        controller = MerchandisingController(catalog_client)

        result = controller.add(service(1))

        assert result.status is ActionStatus.REJECTED
        assert controller.notifications[-1].level == "error"

    async def test_duplicate_add_is_rejected_with_notification(
        self, catalog_client, service
    ) -> None:
        controller = await _controller_on(catalog_client, 1, 10, 11)

        result = controller.add(service(11))

        assert result.status is ActionStatus.REJECTED
        assert controller.notifications[-1].message == result.message
        assert controller.has_unsaved_changes is False

    async def test_bad_move_is_rejected(self, catalog_client) -> None:
        controller = await _controller_on(catalog_client, 1, 10, 11)

        assert controller.move(0, 5).status is ActionStatus.REJECTED
        assert controller.move(1, 0).ok
        assert [e.entity_id for e in controller.editor.entries] == [11, 10]

    async def test_toggles_report_listing(self, catalog_client) -> None:
        controller = await _controller_on(catalog_client, 1, 10)

        assert controller.toggle_featured(10).data is True
        assert controller.toggle_active(99).data is False


# ---------------------------------------------------------------------------
# Remote actions
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
class TestRemoteActions:
    async def test_save_success_notifies(self, catalog_client) -> None:
        controller = await _controller_on(catalog_client, 1, 10, 11)
        controller.move(1, 0)

        with respx.mock(base_url=CATALOG_URL) as mock:
            mock.put("/api/category-display-order/1/reorder").mock(
                return_value=httpx.Response(200, json=envelope())
            )
            result = await controller.save()

        assert result.ok
        assert controller.notifications[-1] == Notification("info", "The order has been saved.")
        assert controller.has_unsaved_changes is False

    async def test_save_failure_keeps_edits(self, catalog_client) -> None:
        controller = await _controller_on(catalog_client, 1, 10, 11)
        controller.move(1, 0)

        with respx.mock(base_url=CATALOG_URL) as mock:
            mock.put("/api/category-display-order/1/reorder").mock(
                side_effect=httpx.ReadTimeout("slow")
            )
            result = await controller.save()

        assert result.status is ActionStatus.FAILED
        assert result.message == "Could not save the order: Request timed out"
        assert controller.has_unsaved_changes is True
        assert [e.entity_id for e in controller.editor.entries] == [11, 10]

    async def test_overlapping_save_is_rejected(self, catalog_client) -> None:
        controller = await _controller_on(catalog_client, 1, 10, 11)
        controller.move(1, 0)
        released = asyncio.get_running_loop().create_future()

        async def slow_replace(entries) -> None:
            await released

        controller.editor.api.replace_entries = slow_replace  # type: ignore[method-assign]

        first = asyncio.create_task(controller.save())
        await asyncio.sleep(0)
        second = await controller.save()
        released.set_result(None)

        assert second.status is ActionStatus.REJECTED
        assert "already in progress" in second.message
        assert (await first).ok
        assert controller.has_unsaved_changes is False

    async def test_auth_expiry_invokes_callback(self, catalog_client) -> None:
        on_auth_expired = MagicMock()
        controller = await _controller_on(catalog_client, 1, 10, on_auth_expired=on_auth_expired)
        controller.remove(10)

        with respx.mock(base_url=CATALOG_URL) as mock:
            mock.put("/api/category-display-order/1/reorder").mock(
                return_value=httpx.Response(401, json=envelope(success=False, error="expired"))
            )
            result = await controller.save()

        assert result.status is ActionStatus.AUTH_EXPIRED
        on_auth_expired.assert_called_once_with()
        assert controller.has_unsaved_changes is True

    async def test_reset_confirmed_reloads(self, catalog_client) -> None:
        controller = await _controller_on(catalog_client, 1, 10, 11)
        controller.remove(10)

        with respx.mock(base_url=CATALOG_URL) as mock:
            _route_category(mock, 1, 10, 11)
            result = await controller.reset(confirm=lambda prompt: True)

        assert result.ok
        assert [e.entity_id for e in controller.editor.entries] == [10, 11]
        assert controller.has_unsaved_changes is False

    async def test_reset_declined_keeps_edits(self, catalog_client) -> None:
        controller = await _controller_on(catalog_client, 1, 10, 11)
        controller.remove(10)

        result = await controller.reset(confirm=lambda prompt: False)

        assert result.status is ActionStatus.CANCELLED
        assert [e.entity_id for e in controller.editor.entries] == [11]

    async def test_search_returns_candidates(self, catalog_client) -> None:
        controller = await _controller_on(catalog_client, 1, 10)
        rows = [AIServiceFactory.build(id=entity_id) for entity_id in (10, 12)]

        with respx.mock(base_url=CATALOG_URL) as mock:
            mock.get("/api/category-display-order/available-services").mock(
                return_value=httpx.Response(200, json=envelope(rows))
            )
            result = await controller.search("gpt")

        assert result.ok
        assert [entity.id for entity in result.data] == [12]

    async def test_search_failure_reports(self, catalog_client) -> None:
        controller = await _controller_on(catalog_client, 1, 10)

        with respx.mock(base_url=CATALOG_URL) as mock:
            mock.get("/api/category-display-order/available-services").mock(
                return_value=httpx.Response(200, text="<html>oops</html>")
            )
            result = await controller.search("gpt")

        assert result.status is ActionStatus.FAILED
        assert result.message == "Search failed: Invalid response from API"
