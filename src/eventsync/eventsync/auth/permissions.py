from __future__ import annotations

from typing import Optional

from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from ..events.model import Event
from ..teams.model import TeamMember
from ..teams.repository import TeamRepository
from ..users.model import User


def is_admin(user: Optional[User]) -> bool:
    return user is not None and user.role == Role.ADMIN


def is_manager_or_above(user: Optional[User]) -> bool:
    return user is not None and user.role.at_least(Role.MANAGER)


def can_manage_event(user: Optional[User], event: Optional[Event]) -> bool:
    """Admins manage every event; managers only the events they own."""

    if not user or not event:
        return False
    if is_admin(user):
        return True
    return is_manager_or_above(user) and user.user_id == event.manager_id


class AccessGate:
    """Shared authorization checks for issuing, scanning and reading codes."""

    def __init__(self, teams: TeamRepository):
        self._teams = teams

    def ensure_can_manage(self, user: User, event: Event, *, action: str = "manage") -> None:
        if not is_manager_or_above(user):
            raise AuthorizationError(f"Only managers and admins can {action}")
        if not can_manage_event(user, event):
            raise AuthorizationError(f"You are not authorized to {action} for this event")

    def accepted_membership(self, user: User, team_id: int) -> Optional[TeamMember]:
        member = self._teams.get_member_by_email(team_id=team_id, email=user.email)
        if member is None or not member.is_accepted:
            return None
        return member

    def ensure_team_access(self, user: User, event: Event, team_id: int) -> None:
        """Read access to a team's codes: accepted members, the event owner, admins."""

        if can_manage_event(user, event):
            return
        if self.accepted_membership(user, team_id) is None:
            raise AuthorizationError("Access denied. You are not a member of this team.")
