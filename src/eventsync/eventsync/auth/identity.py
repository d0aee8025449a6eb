from __future__ import annotations

from typing import Optional, Protocol

from flask import session

from ..core.exceptions import AuthenticationError
from ..users.model import User
from ..users.repository import UserRepository


class IdentityProvider(Protocol):
    """Resolves the caller of the current request, or None when there is no session."""

    def current_user(self) -> Optional[User]:
        raise NotImplementedError


class SessionIdentityProvider:
    """Reads the user id the external auth provider stored in the Flask session."""

    SESSION_KEY = "user_id"

    def __init__(self, users: UserRepository):
        self._users = users

    def current_user(self) -> Optional[User]:
        user_id = session.get(self.SESSION_KEY)
        if user_id is None:
            return None
        try:
            return self._users.get_by_id(int(user_id))
        except (TypeError, ValueError):
            return None


def require_user(identity: IdentityProvider) -> User:
    user = identity.current_user()
    if user is None:
        raise AuthenticationError("Authentication required")
    return user
