from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import MessagePriority
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import EventMessage
from .repository import MessageRepository

_SELECT = """
    SELECT m.message_id, m.event_id, m.manager_id, m.title, m.content, m.priority,
           m.created_at, m.updated_at, u.name AS manager_name
    FROM event_messages m
    LEFT JOIN users u ON u.user_id = m.manager_id
"""


def _to_message(row: dict) -> EventMessage:
    return EventMessage(
        message_id=int(row["message_id"]),
        event_id=int(row["event_id"]),
        manager_id=int(row["manager_id"]),
        title=row["title"],
        content=row["content"],
        priority=MessagePriority(row["priority"]),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
        manager_name=row.get("manager_name"),
    )


class MySQLMessageRepository(MessageRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_event(self, event_id: int) -> Sequence[EventMessage]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE m.event_id=%s ORDER BY m.created_at DESC, m.message_id DESC",
                (int(event_id),),
            )
            return [_to_message(r) for r in fetchall(cur)]

    def get_by_id(self, message_id: int) -> Optional[EventMessage]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE m.message_id=%s", (int(message_id),))
            row = fetchone(cur)
            return _to_message(row) if row else None

    def create(
        self,
        *,
        event_id: int,
        manager_id: int,
        title: str,
        content: str,
        priority: MessagePriority,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO event_messages(event_id, manager_id, title, content, priority)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(event_id), int(manager_id), title, content, priority.value),
            )
            return int(cur.lastrowid)
