from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import MemberStatus


@dataclass(frozen=True)
class Team:
    team_id: int
    name: str


@dataclass(frozen=True)
class TeamMember:
    """Association between an identity (matched by email) and a team."""

    member_id: int
    team_id: int
    email: str
    name: Optional[str]
    status: MemberStatus
    user_id: Optional[int] = None
    role: str = "member"

    @property
    def is_accepted(self) -> bool:
        return self.status == MemberStatus.ACCEPTED

    @property
    def display_name(self) -> str:
        return self.name or self.email
