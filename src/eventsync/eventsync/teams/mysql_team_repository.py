from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import MemberStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Team, TeamMember
from .repository import TeamRepository

_MEMBER_COLUMNS = "member_id, team_id, email, name, user_id, role, status"


def _to_member(row: dict) -> TeamMember:
    return TeamMember(
        member_id=int(row["member_id"]),
        team_id=int(row["team_id"]),
        email=row["email"],
        name=row.get("name"),
        status=MemberStatus(row["status"]),
        user_id=row.get("user_id"),
        role=row.get("role") or "member",
    )


class MySQLTeamRepository(TeamRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, team_id: int) -> Optional[Team]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT team_id, name FROM teams WHERE team_id=%s", (int(team_id),))
            row = fetchone(cur)
            if not row:
                return None
            return Team(team_id=int(row["team_id"]), name=row["name"])

    def get_member_by_email(self, *, team_id: int, email: str) -> Optional[TeamMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_MEMBER_COLUMNS} FROM team_members WHERE team_id=%s AND email=%s",
                (int(team_id), email),
            )
            row = fetchone(cur)
            return _to_member(row) if row else None

    def list_accepted_members(self, team_id: int) -> Sequence[TeamMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_MEMBER_COLUMNS}
                FROM team_members
                WHERE team_id=%s AND status=%s
                ORDER BY member_id
                """,
                (int(team_id), MemberStatus.ACCEPTED.value),
            )
            return [_to_member(r) for r in fetchall(cur)]
