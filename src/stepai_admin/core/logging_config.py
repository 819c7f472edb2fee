"""structlog setup for the proxy and the merchandising editor.

Records are rendered as one JSON object per line, or with structlog's console
renderer when the level is ``DEBUG``.  Stdlib loggers (``catalog.client``,
``proxy.forwarding``) and structlog loggers (the editor) go through the same
processor chain (fields passed as stdlib ``extra=`` are kept), so both carry
the two correlation fields this project uses:

``request_id``
    Set by the request middleware in ``proxy/main.py`` for every proxied
    request and echoed back in the ``X-Request-ID`` header.

``scope``
    The merchandising scope key (``category-display-order:12``,
    ``homepage-videos``...).  The editor binds it on its own logger and wraps
    its catalog calls in :func:`bind_scope`, so client-level records about a
    failed fetch or save name the list they belong to.

Forwarded ``Authorization`` headers and session tokens must never reach the
output: secret-named keys are replaced, and ``Bearer`` credentials embedded
in free text are masked.
"""

from __future__ import annotations

import logging
import re
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import IO

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
scope_var: ContextVar[str | None] = ContextVar("scope", default=None)

REDACTED = "[REDACTED]"

_SECRET_KEYS = ("authorization", "cookie", "token", "password", "secret")
_BEARER_RE = re.compile(r"(?i)\b(bearer)\s+[A-Za-z0-9._~+/=-]+")

# Chatty at INFO; only their warnings are worth keeping outside DEBUG.
_QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore")


@contextmanager
def bind_scope(scope: str) -> Iterator[None]:
    """Tag every record emitted inside the block with *scope*.

    The binding follows the current task, so concurrent editors on other
    scopes keep their own value.
    """
    token = scope_var.set(scope)
    try:
        yield
    finally:
        scope_var.reset(token)


# ---------------------------------------------------------------------------
# Processors
# ---------------------------------------------------------------------------


def _add_correlation_ids(
    logger: WrappedLogger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Copy ``request_id`` and ``scope`` from the context unless already bound."""
    for key, var in (("request_id", request_id_var), ("scope", scope_var)):
        value = var.get()
        if value is not None:
            event_dict.setdefault(key, value)
    return event_dict


def _is_secret(key: object) -> bool:
    lowered = str(key).lower()
    return any(secret in lowered for secret in _SECRET_KEYS)


def _mask_bearer(value: str) -> str:
    return _BEARER_RE.sub(rf"\1 {REDACTED}", value)


def _redact_credentials(
    logger: WrappedLogger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Hide admin credentials before any renderer sees the record.

    Values under secret-named keys are replaced, at the top level and inside
    dict values such as a logged header mapping.  ``Bearer <token>`` in any
    string value, the event message included, is masked in place.
    """
    for key, value in list(event_dict.items()):
        if _is_secret(key):
            event_dict[key] = REDACTED
        elif isinstance(value, str):
            event_dict[key] = _mask_bearer(value)
        elif isinstance(value, dict):
            event_dict[key] = {
                name: REDACTED if _is_secret(name) else (
                    _mask_bearer(item) if isinstance(item, str) else item
                )
                for name, item in value.items()
            }
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        _add_correlation_ids,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _redact_credentials,
    ]


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def configure_logging(log_level: str = "INFO", *, stream: IO[str] | None = None) -> None:
    """Route stdlib and structlog records through one JSON handler.

    Safe to call repeatedly: the root handler is replaced each time, which
    ``create_app()`` relies on when a test builds several apps.

    Args:
        log_level: Level name, case-insensitive.  ``DEBUG`` switches to the
            console renderer and keeps the HTTP client loggers verbose.
        stream: Where records are written.  Defaults to the current
            ``sys.stdout``.
    """
    level_name = log_level.upper()
    development = level_name == "DEBUG"
    shared = _shared_processors()

    renderer: Processor
    if development:
        renderer = structlog.dev.ConsoleRenderer(colors=True)
    else:
        renderer = structlog.processors.JSONRenderer()

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=[structlog.stdlib.ExtraAdder(), *shared],
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level_name, logging.INFO))

    quiet_level = logging.NOTSET if development else logging.WARNING
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
