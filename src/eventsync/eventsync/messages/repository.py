from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import MessagePriority
from .model import EventMessage


class MessageRepository(Protocol):
    def list_for_event(self, event_id: int) -> Sequence[EventMessage]:
        raise NotImplementedError

    def get_by_id(self, message_id: int) -> Optional[EventMessage]:
        raise NotImplementedError

    def create(
        self,
        *,
        event_id: int,
        manager_id: int,
        title: str,
        content: str,
        priority: MessagePriority,
    ) -> int:
        raise NotImplementedError
