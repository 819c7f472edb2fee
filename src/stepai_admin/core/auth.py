"""Admin login flow against the catalog API.

The flow has two steps: :func:`check_email` tells whether the account has
already chosen a password, then either :func:`set_password` (first login)
or :func:`login`.  :func:`login` returns an :class:`AdminSession` that the
caller keeps and passes to :class:`CatalogClient`; nothing is stored here.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError as PydanticValidationError

from stepai_admin.catalog.client import CatalogClient
from stepai_admin.core.exceptions import FetchError, ValidationError
from stepai_admin.core.session import AdminSession, AdminUser

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


async def check_email(client: CatalogClient, email: str) -> bool:
    """Return ``True`` if the admin account for *email* already has a password.

    Raises:
        FetchError: If the account is unknown or the request fails.
    """
    data = await client.post("/api/admin/check-email", json={"email": email})
    if not isinstance(data, dict):
        raise FetchError("Invalid response from API", url="/api/admin/check-email")
    return bool(data.get("hasPassword"))


async def login(client: CatalogClient, email: str, password: str) -> AdminSession:
    """Exchange credentials for a bearer-token session.

    Raises:
        FetchError: If the credentials are rejected or the response is malformed.
    """
    data = await client.post(
        "/api/admin/login", json={"email": email, "password": password}
    )
    try:
        session = AdminSession(
            token=data["token"],
            user=AdminUser.model_validate(data["user"]),
        )
    except (KeyError, TypeError, PydanticValidationError) as exc:
        raise FetchError("Invalid login response from API", url="/api/admin/login") from exc
    logger.info("auth: admin logged in", extra={"user_id": session.user.id})
    return session


async def set_password(
    client: CatalogClient,
    email: str,
    password: str,
    confirm_password: str,
) -> None:
    """Set the first password of an admin account.

    Raises:
        ValidationError: If the confirmation does not match or the password
            is shorter than :data:`MIN_PASSWORD_LENGTH`.  No request is sent.
        FetchError: If the server rejects the request.
    """
    if password != confirm_password:
        raise ValidationError("Passwords do not match")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )
    await client.post(
        "/api/admin/set-password", json={"email": email, "password": password}
    )


async def logout(client: CatalogClient) -> AdminSession:
    """Invalidate the client's session server-side and return an anonymous one.

    The server call is best-effort: a failure is logged and the local
    session is cleared regardless.  The returned session is also installed
    on *client*.
    """
    session = client.session
    if session.token:
        try:
            await client.post("/api/admin/logout")
        except FetchError as exc:
            logger.warning("auth: logout request failed: %s", exc)
    client.session = session.cleared()
    return client.session
