from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Event:
    event_id: int
    title: str
    manager_id: int
    status: str = "draft"


@dataclass(frozen=True)
class Registration:
    """A team's registration for an event."""

    registration_id: int
    event_id: int
    team_id: int
    status: str = "confirmed"
