from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Event, Registration
from .repository import EventRepository


def _to_registration(row: dict) -> Registration:
    return Registration(
        registration_id=int(row["registration_id"]),
        event_id=int(row["event_id"]),
        team_id=int(row["team_id"]),
        status=row["status"],
    )


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, event_id: int) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT event_id, title, manager_id, status FROM events WHERE event_id=%s",
                (int(event_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Event(
                event_id=int(row["event_id"]),
                title=row["title"],
                manager_id=int(row["manager_id"]),
                status=row["status"],
            )

    def get_registration(self, *, event_id: int, team_id: int) -> Optional[Registration]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT registration_id, event_id, team_id, status
                FROM registrations
                WHERE event_id=%s AND team_id=%s
                """,
                (int(event_id), int(team_id)),
            )
            row = fetchone(cur)
            return _to_registration(row) if row else None

    def list_registrations(self, event_id: int) -> Sequence[Registration]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT registration_id, event_id, team_id, status
                FROM registrations
                WHERE event_id=%s
                ORDER BY registration_id
                """,
                (int(event_id),),
            )
            return [_to_registration(r) for r in fetchall(cur)]
