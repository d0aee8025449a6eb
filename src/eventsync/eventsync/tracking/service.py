from __future__ import annotations

from typing import Any, BinaryIO, List, Optional

from ..auth.permissions import AccessGate, is_manager_or_above
from ..common.validators import require_choice, require_max_length, require_non_empty
from ..core.constants import DEFAULT_TRACKING_TEMPLATES, MAX_LABEL_LENGTH
from ..core.enums import TrackingType
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..events.model import Event
from ..events.repository import EventRepository
from ..teams.repository import TeamRepository
from ..users.model import User
from .codec import decode_image
from .issuer import TrackingIssuer
from .model import (
    BatchResult,
    IssueOutcome,
    IssueTarget,
    ScanResult,
    TrackingIdentity,
    TrackingTemplate,
    team_code_view,
)
from .repository import TrackingRepository
from .verifier import ScanVerifier


def default_templates() -> List[TrackingTemplate]:
    return [TrackingTemplate(tracking_type=t, label=label) for t, label in DEFAULT_TRACKING_TEMPLATES]


def _parse_label(value: Any) -> str:
    label = require_non_empty(value, "label")
    return require_max_length(label, "label", MAX_LABEL_LENGTH)


def parse_templates(raw: Any) -> List[TrackingTemplate]:
    """Validate a request's templates up front so a bad entry rejects the whole batch."""

    if not raw:
        return default_templates()
    if not isinstance(raw, list):
        raise ValidationError("templates must be a list")

    templates = []
    for item in raw:
        if not isinstance(item, dict):
            raise ValidationError("Each template must be an object with trackingType and label")
        templates.append(
            TrackingTemplate(
                tracking_type=require_choice(item.get("trackingType"), TrackingType, "trackingType"),
                label=_parse_label(item.get("label")),
                metadata=item.get("metadata"),
            )
        )
    return templates


class TrackingService:
    def __init__(
        self,
        tracking: TrackingRepository,
        events: EventRepository,
        teams: TeamRepository,
        issuer: TrackingIssuer,
        verifier: ScanVerifier,
        gate: AccessGate,
    ):
        self._tracking = tracking
        self._events = events
        self._teams = teams
        self._issuer = issuer
        self._verifier = verifier
        self._gate = gate

    def _require_event(self, event_id: int) -> Event:
        event = self._events.get_by_id(int(event_id))
        if event is None:
            raise NotFoundError("Event not found")
        return event

    def _require_registration(self, event_id: int, team_id: int) -> None:
        if self._events.get_registration(event_id=int(event_id), team_id=int(team_id)) is None:
            raise NotFoundError("Team is not registered for this event")

    def initialize_event_codes(self, *, actor: User, event_id: int, templates: Any = None) -> BatchResult:
        if not is_manager_or_above(actor):
            raise AuthorizationError("Only managers and admins can generate QR codes")
        event = self._require_event(event_id)
        self._gate.ensure_can_manage(actor, event, action="generate QR codes")
        parsed = parse_templates(templates)

        registrations = self._events.list_registrations(event.event_id)
        if not registrations:
            raise NotFoundError("No teams registered for this event")

        targets = [IssueTarget(team_id=r.team_id) for r in registrations]
        return self._issuer.issue_batch(event_id=event.event_id, targets=targets, templates=parsed)

    def generate_member_codes(
        self, *, actor: User, event_id: int, team_id: int, templates: Any = None
    ) -> BatchResult:
        event = self._require_event(event_id)
        self._gate.ensure_can_manage(actor, event, action="generate QR codes")
        parsed = parse_templates(templates)
        self._require_registration(event.event_id, team_id)

        members = self._teams.list_accepted_members(int(team_id))
        if not members:
            raise ValidationError("No accepted team members found")

        targets = [
            IssueTarget(team_id=int(team_id), member_id=m.member_id, member_name=m.display_name) for m in members
        ]
        return self._issuer.issue_batch(event_id=event.event_id, targets=targets, templates=parsed)

    def create_code(
        self,
        *,
        actor: User,
        event_id: int,
        team_id: int,
        tracking_type: Any,
        label: Any,
        metadata: Optional[Any] = None,
        member_id: Optional[int] = None,
    ) -> IssueOutcome:
        parsed_type = require_choice(tracking_type, TrackingType, "trackingType")
        parsed_label = _parse_label(label)

        event = self._require_event(event_id)
        self._gate.ensure_can_manage(actor, event, action="generate QR codes")
        self._require_registration(event.event_id, team_id)

        if member_id is not None:
            accepted = {m.member_id for m in self._teams.list_accepted_members(int(team_id))}
            if int(member_id) not in accepted:
                raise NotFoundError("Team member not found")

        identity = TrackingIdentity(
            event_id=event.event_id,
            team_id=int(team_id),
            member_id=int(member_id) if member_id is not None else None,
            tracking_type=parsed_type,
            label=parsed_label,
        )
        return self._issuer.issue(identity, metadata=metadata)

    def list_team_codes(self, *, actor: User, event_id: int, team_id: int) -> List[dict]:
        event = self._require_event(event_id)
        self._gate.ensure_team_access(actor, event, int(team_id))
        self._require_registration(event.event_id, team_id)

        views = []
        for row in self._tracking.list_for_team(event_id=event.event_id, team_id=int(team_id)):
            qr_code_url = self._issuer.ensure_image(row.record)
            views.append(team_code_view(row, qr_code_url=qr_code_url))
        return views

    def verify(self, *, actor: User, event_id: int, presented: Any) -> ScanResult:
        return self._verifier.verify_and_scan(event_id=int(event_id), presented=presented, scanner=actor)

    def verify_image(self, *, actor: User, event_id: int, stream: BinaryIO) -> ScanResult:
        return self.verify(actor=actor, event_id=event_id, presented=decode_image(stream))
