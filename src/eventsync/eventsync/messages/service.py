from __future__ import annotations

import logging
from typing import Any, Sequence

from ..auth.permissions import AccessGate, is_manager_or_above
from ..common.validators import require_choice, require_max_length
from ..core.enums import MessagePriority
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..events.repository import EventRepository
from ..users.model import User
from .model import EventMessage
from .repository import MessageRepository

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 255


class MessageService:
    def __init__(self, messages: MessageRepository, events: EventRepository, gate: AccessGate):
        self._messages = messages
        self._events = events
        self._gate = gate

    def list_messages(self, *, event_id: int) -> Sequence[EventMessage]:
        return self._messages.list_for_event(int(event_id))

    def post_message(
        self,
        *,
        actor: User,
        event_id: int,
        title: Any,
        content: Any,
        priority: Any = None,
    ) -> EventMessage:
        if not is_manager_or_above(actor):
            raise AuthorizationError("Only managers and admins can post messages")

        event = self._events.get_by_id(int(event_id))
        if event is None:
            raise NotFoundError("Event not found")
        self._gate.ensure_can_manage(actor, event, action="post messages")

        title = title.strip() if isinstance(title, str) else ""
        content = content.strip() if isinstance(content, str) else ""
        if not title or not content:
            raise ValidationError("Title and content are required")
        require_max_length(title, "title", MAX_TITLE_LENGTH)
        parsed_priority = require_choice(priority or MessagePriority.NORMAL.value, MessagePriority, "priority")

        message_id = self._messages.create(
            event_id=event.event_id,
            manager_id=actor.user_id,
            title=title,
            content=content,
            priority=parsed_priority,
        )
        logger.info("Message %s posted to event %s by user %s", message_id, event.event_id, actor.user_id)

        created = self._messages.get_by_id(message_id)
        if created is None:
            raise NotFoundError("Message not found after insert")
        return created
