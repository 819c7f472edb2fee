"""Explicit admin session passed to the catalog client.

The session is a plain value: whoever logs in owns it and hands it to the
:class:`~stepai_admin.catalog.client.CatalogClient`.  Nothing reads it from
ambient storage, and nothing clears it behind the caller's back; an expired
token surfaces as :class:`~stepai_admin.core.exceptions.AuthExpiredError`.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

ADMIN_USER_TYPE = "admin"


class AdminUser(BaseModel):
    """The account a session belongs to.

    Attributes:
        id: User id.
        name: Display name.
        email: Login e-mail.
        user_type: Role string; only ``"admin"`` may use the back-office.
    """

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str = ""
    email: str
    user_type: str


class AdminSession(BaseModel):
    """Bearer token plus the user it was issued to.

    An anonymous session (no token, no user) is valid: public catalog reads
    work without one.
    """

    token: Optional[str] = None
    user: Optional[AdminUser] = None

    @property
    def is_logged_in(self) -> bool:
        """True only for a token held by an admin account."""
        return bool(
            self.token
            and self.user is not None
            and self.user.user_type == ADMIN_USER_TYPE
        )

    def auth_headers(self) -> dict[str, str]:
        """Headers to attach to catalog requests made on behalf of this session."""
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def cleared(self) -> AdminSession:
        """Return an anonymous session (the logged-out state)."""
        return AdminSession()
