from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_iso
from ..core.enums import MessagePriority


@dataclass(frozen=True)
class EventMessage:
    """Announcement a manager posts to everyone attending an event."""

    message_id: int
    event_id: int
    manager_id: int
    title: str
    content: str
    priority: MessagePriority
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    manager_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.message_id,
            "eventId": self.event_id,
            "managerId": self.manager_id,
            "managerName": self.manager_name,
            "title": self.title,
            "content": self.content,
            "priority": self.priority.value,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }
