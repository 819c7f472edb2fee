"""Application-wide exception hierarchy for StepAI Admin.

All custom exceptions subclass ``StepAdminError``, enabling consistent
error handling and structured logging across the application.

Hierarchy::

    StepAdminError
    ├── FetchError               (status_code, url)
    │   └── AuthExpiredError     (401 / 403)
    ├── ValidationError          (client-side rejection, never networked)
    └── StaleResponseError       (superseded load/search, never user-facing)
"""

from __future__ import annotations


class StepAdminError(Exception):
    """Base class for all StepAI Admin exceptions.

    All application-specific exceptions inherit from this class so that
    callers can catch the entire hierarchy with a single ``except`` clause
    when needed.
    """


# ---------------------------------------------------------------------------
# Remote exceptions
# ---------------------------------------------------------------------------


class FetchError(StepAdminError):
    """Raised when a call to the catalog service fails.

    Covers transport errors, non-2xx statuses, bodies that are not JSON,
    envelopes with ``success: false`` and payloads of the wrong shape.

    Args:
        message: Human-readable description of the failure.  When the
            server supplied an ``error`` string, that string is used.
        status_code: HTTP status of the response, or ``None`` when no
            response was received.
        url: Request URL (for logging).
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class AuthExpiredError(FetchError):
    """Raised when the catalog service answers 401 or 403.

    The bearer token is missing, expired or lacks admin rights.  The caller
    decides how to react (typically: drop the session and show the login
    screen); the client itself never clears state.
    """


# ---------------------------------------------------------------------------
# Local exceptions
# ---------------------------------------------------------------------------


class ValidationError(StepAdminError):
    """Raised when a local operation is rejected before any network call.

    Examples are adding an entity already in the list, adding past the
    scope's cap, or moving from/to an index outside the list.

    Args:
        message: Description of the rejection, suitable for display.
        entity_id: Catalog id the rejected operation referred to, if any.
    """

    def __init__(self, message: str, entity_id: int | None = None) -> None:
        super().__init__(message)
        self.entity_id = entity_id


class StaleResponseError(StepAdminError):
    """Raised internally when a response arrives after a newer request.

    The editor and the availability search discard such responses; this
    exception never reaches a user.

    Args:
        scope: Scope key the superseded request was issued for.
    """

    def __init__(self, scope: str) -> None:
        super().__init__(f"Discarded stale response for scope '{scope}'")
        self.scope = scope
