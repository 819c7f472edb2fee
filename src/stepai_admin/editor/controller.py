"""Screen controller for the merchandising editors.

:class:`MerchandisingController` is what a merchandising screen talks to.
It owns the editor of the selected scope and its availability search, asks
for confirmation before throwing away unsaved edits, and turns every failure
into an :class:`ActionResult` plus a :class:`Notification`.  No exception
raised by the editor, the search or the client escapes a controller method.

Auth expiry is reported, not acted on: the result carries
``ActionStatus.AUTH_EXPIRED`` and the optional ``on_auth_expired`` callback
is invoked, leaving the caller to drop the session and show the login screen.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

from stepai_admin.core.exceptions import AuthExpiredError, FetchError, ValidationError
from stepai_admin.editor.editor import OrderedCollectionEditor
from stepai_admin.editor.search import AvailabilitySearch

if TYPE_CHECKING:
    from stepai_admin.catalog.client import CatalogClient
    from stepai_admin.core.schemas.catalog import CatalogEntity
    from stepai_admin.editor.scopes import ScopeConfig

logger = logging.getLogger(__name__)

ConfirmFn = Callable[[str], bool]

UNSAVED_SCOPE_CHANGE_PROMPT = "There are unsaved changes. Switch anyway?"
UNSAVED_RESET_PROMPT = "Discard all unsaved changes?"

_NOT_DISCARDABLE = object()


class ActionStatus(str, enum.Enum):
    OK = "ok"
    REJECTED = "rejected"          # local validation refused the operation
    FAILED = "failed"              # the catalog service call failed
    AUTH_EXPIRED = "auth_expired"  # 401/403, session must be renewed
    CANCELLED = "cancelled"        # the user declined a confirmation
    DISCARDED = "discarded"        # response superseded by a newer request


@dataclass(frozen=True)
class ActionResult:
    """Outcome of one controller action."""

    status: ActionStatus
    message: str = ""
    data: Any = None

    @property
    def ok(self) -> bool:
        return self.status is ActionStatus.OK


@dataclass(frozen=True)
class Notification:
    """A message for the user (``level`` is ``"info"`` or ``"error"``)."""

    level: str
    message: str


class MerchandisingController:
    """Drives one merchandising screen.

    Args:
        client: Catalog client shared by every editor the controller creates.
        notify: Called with every :class:`Notification`.  Notifications are
            also appended to :attr:`notifications`.
        on_auth_expired: Called once for each action that hit a 401/403.
    """

    def __init__(
        self,
        client: CatalogClient,
        notify: Optional[Callable[[Notification], None]] = None,
        on_auth_expired: Optional[Callable[[], None]] = None,
    ) -> None:
        self.client = client
        self.editor: Optional[OrderedCollectionEditor] = None
        self.search_box: Optional[AvailabilitySearch] = None
        self.notifications: list[Notification] = []
        self._notify = notify
        self._on_auth_expired = on_auth_expired
        self._selection = 0

    @property
    def has_unsaved_changes(self) -> bool:
        return self.editor is not None and self.editor.has_unsaved_changes

    # ------------------------------------------------------------------
    # Scope selection
    # ------------------------------------------------------------------

    async def select_scope(
        self, config: ScopeConfig, confirm: Optional[ConfirmFn] = None
    ) -> ActionResult:
        """Switch to *config* and load its stored list.

        With unsaved edits, *confirm* is asked first; without a *confirm*
        callback, or when it returns ``False``, the switch is cancelled.
        If the load fails the previously displayed scope stays in place (on
        the very first selection an empty editor is installed instead).
        A selection overtaken by a newer one is dropped when it resolves.
        """
        if self.has_unsaved_changes and not (confirm and confirm(UNSAVED_SCOPE_CHANGE_PROMPT)):
            return ActionResult(ActionStatus.CANCELLED)

        self._selection += 1
        selection = self._selection
        editor = OrderedCollectionEditor(self.client, config)
        result = await self._run_remote(
            editor.load,
            failure="Could not load the list",
            is_current=lambda: selection == self._selection,
            discarded=False,
        )

        if result.status is ActionStatus.DISCARDED:
            logger.info("controller: discarded superseded selection of %s", config.key)
            return result
        if result.ok or self.editor is None:
            self.editor = editor
            self.search_box = AvailabilitySearch(editor)
        return result

    # ------------------------------------------------------------------
    # Local edits
    # ------------------------------------------------------------------

    def add(self, entity: CatalogEntity) -> ActionResult:
        return self._run_local(lambda editor: editor.add(entity))

    def remove(self, entity_id: int) -> ActionResult:
        return self._run_local(lambda editor: editor.remove(entity_id))

    def move(self, from_index: int, to_index: int) -> ActionResult:
        return self._run_local(lambda editor: editor.move(from_index, to_index))

    def toggle_featured(self, entity_id: int) -> ActionResult:
        return self._run_local(lambda editor: editor.toggle_featured(entity_id))

    def toggle_active(self, entity_id: int) -> ActionResult:
        return self._run_local(lambda editor: editor.toggle_active(entity_id))

    # ------------------------------------------------------------------
    # Remote actions
    # ------------------------------------------------------------------

    async def save(self) -> ActionResult:
        """Commit the current list; on failure the edits stay in place."""
        if self.editor is None:
            return self._reject("No list selected")
        result = await self._run_remote(self.editor.commit, failure="Could not save the order")
        if result.ok:
            self._push("info", "The order has been saved.")
        return result

    async def reset(self, confirm: Optional[ConfirmFn] = None) -> ActionResult:
        """Reload the stored list, asking *confirm* first when there are edits."""
        if self.editor is None:
            return self._reject("No list selected")
        if self.editor.has_unsaved_changes and not (confirm and confirm(UNSAVED_RESET_PROMPT)):
            return ActionResult(ActionStatus.CANCELLED)
        return await self._run_remote(
            self.editor.discard, failure="Could not reload the list", discarded=False
        )

    async def search(self, query: str = "", limit: Optional[int] = None) -> ActionResult:
        """Search candidates for the current scope.

        ``data`` holds the candidates on success.  A search overtaken by a
        newer one, or by a scope change, returns ``DISCARDED`` silently.
        """
        if self.search_box is None:
            return self._reject("No list selected")
        search_box = self.search_box
        return await self._run_remote(
            lambda: search_box.search(query, limit),
            failure="Search failed",
            is_current=lambda: search_box is self.search_box,
            discarded=None,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _run_local(self, action: Callable[[OrderedCollectionEditor], Any]) -> ActionResult:
        if self.editor is None:
            return self._reject("No list selected")
        try:
            data = action(self.editor)
        except ValidationError as exc:
            return self._reject(str(exc))
        return ActionResult(ActionStatus.OK, data=data)

    async def _run_remote(
        self,
        action: Callable[[], Awaitable[Any]],
        *,
        failure: str,
        is_current: Callable[[], bool] = lambda: True,
        discarded: Any = _NOT_DISCARDABLE,
    ) -> ActionResult:
        """Await *action* and map its outcome to an :class:`ActionResult`.

        *discarded* is the value *action* returns when its response was
        superseded; *is_current* tells whether the request is still the
        latest once it resolves.  Outcomes of superseded requests, errors
        included, become ``DISCARDED`` with no notification.
        """
        try:
            data = await action()
        except AuthExpiredError as exc:
            logger.info("controller: session expired: %s", exc)
            self._push("error", "Your session has expired. Please log in again.")
            if self._on_auth_expired is not None:
                self._on_auth_expired()
            return ActionResult(ActionStatus.AUTH_EXPIRED, str(exc))
        except FetchError as exc:
            if not is_current():
                return ActionResult(ActionStatus.DISCARDED)
            message = f"{failure}: {exc}"
            self._push("error", message)
            return ActionResult(ActionStatus.FAILED, message)
        except ValidationError as exc:
            return self._reject(str(exc))
        if not is_current() or (discarded is not _NOT_DISCARDABLE and data is discarded):
            return ActionResult(ActionStatus.DISCARDED)
        return ActionResult(ActionStatus.OK, data=data)

    def _reject(self, message: str) -> ActionResult:
        self._push("error", message)
        return ActionResult(ActionStatus.REJECTED, message)

    def _push(self, level: str, message: str) -> None:
        notification = Notification(level, message)
        self.notifications.append(notification)
        if self._notify is not None:
            self._notify(notification)
