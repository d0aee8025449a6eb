from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Team, TeamMember


class TeamRepository(Protocol):
    def get_by_id(self, team_id: int) -> Optional[Team]:
        raise NotImplementedError

    def get_member_by_email(self, *, team_id: int, email: str) -> Optional[TeamMember]:
        raise NotImplementedError

    def list_accepted_members(self, team_id: int) -> Sequence[TeamMember]:
        raise NotImplementedError
