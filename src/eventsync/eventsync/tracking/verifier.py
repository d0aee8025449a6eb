from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from ..auth.permissions import AccessGate
from ..common.datetime_utils import now_utc
from ..core.constants import UNKNOWN_SCANNER_NAME, UNKNOWN_TEAM_NAME
from ..core.exceptions import AlreadyScannedError, NotFoundError, WrongEventError
from ..events.repository import EventRepository
from ..teams.repository import TeamRepository
from ..users.model import User
from ..users.repository import UserRepository
from .codec import decode
from .model import ScanResult, TrackingRecord
from .repository import TrackingRepository

logger = logging.getLogger(__name__)


class ScanVerifier:
    """Validates a presented code and records its first and only scan."""

    def __init__(
        self,
        tracking: TrackingRepository,
        events: EventRepository,
        teams: TeamRepository,
        users: UserRepository,
        gate: AccessGate,
        *,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._tracking = tracking
        self._events = events
        self._teams = teams
        self._users = users
        self._gate = gate
        self._clock = clock

    def _resolve(self, tracking_id: str) -> TrackingRecord:
        record = None
        if tracking_id.isdigit():
            record = self._tracking.get_by_id(int(tracking_id))
        if record is None:
            raise NotFoundError("QR code not found")
        return record

    def _scanner_name(self, user_id: Optional[int]) -> str:
        if user_id is None:
            return UNKNOWN_SCANNER_NAME
        user = self._users.get_by_id(user_id)
        return user.name if user else UNKNOWN_SCANNER_NAME

    def _already_scanned(self, record: TrackingRecord) -> AlreadyScannedError:
        scanner = self._scanner_name(record.scanned_by)
        when = record.scanned_at.strftime("%Y-%m-%d %H:%M:%S") if record.scanned_at else "an earlier scan"
        return AlreadyScannedError(
            f"This QR code was already scanned on {when} by {scanner}",
            scanned_at=record.scanned_at,
            scanned_by=scanner,
        )

    def verify_and_scan(self, *, event_id: int, presented: Any, scanner: User) -> ScanResult:
        tracking_id = decode(presented)
        record = self._resolve(tracking_id)

        if record.event_id != int(event_id):
            raise WrongEventError("This QR code is not for this event")

        event = self._events.get_by_id(record.event_id)
        if event is None:
            raise NotFoundError("Event not found")
        self._gate.ensure_can_manage(scanner, event, action="scan QR codes")

        if record.is_scanned:
            raise self._already_scanned(record)

        scanned_at = self._clock()
        if not self._tracking.mark_scanned(record.tracking_id, scanned_by=scanner.user_id, scanned_at=scanned_at):
            # Another scanner won the conditional update.
            current = self._tracking.get_by_id(record.tracking_id) or record
            raise self._already_scanned(current)

        team = self._teams.get_by_id(record.team_id)
        logger.info(
            "Tracking %s scanned for event %s by user %s", record.tracking_id, record.event_id, scanner.user_id
        )
        return ScanResult(
            tracking_id=record.tracking_id,
            team_name=team.name if team else UNKNOWN_TEAM_NAME,
            label=record.label,
            tracking_type=record.tracking_type,
            scanned_at=scanned_at,
            scanned_by=scanner.name,
        )
