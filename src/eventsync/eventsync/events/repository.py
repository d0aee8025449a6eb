from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Event, Registration


class EventRepository(Protocol):
    def get_by_id(self, event_id: int) -> Optional[Event]:
        raise NotImplementedError

    def get_registration(self, *, event_id: int, team_id: int) -> Optional[Registration]:
        raise NotImplementedError

    def list_registrations(self, event_id: int) -> Sequence[Registration]:
        raise NotImplementedError
