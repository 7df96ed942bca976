"""
Per-request authentication state.

StytchAuthMiddleware fills it in; portal endpoints read it through
apps.core.security.get_auth_context.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ninja.errors import HttpError

if TYPE_CHECKING:
    from apps.accounts.models import User


@dataclass
class AuthContext:
    """
    The signed-in portal account, if any.

    failed separates a rejected session token from a request that sent none.
    The Person behind the account is resolved per endpoint, see
    apps.cases.services.resolve_person.
    """

    user: "User | None" = None
    failed: bool = False

    def require_auth(self) -> "User":
        """Return the account, or raise HttpError 401 when nobody is signed in."""
        if self.user is None:
            raise HttpError(401, "Not authenticated")
        return self.user
