from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol, Sequence

from .model import TeamCodeRow, TrackingIdentity, TrackingRecord


class TrackingRepository(Protocol):
    """Repository interface for tracking records.

    ``reserve`` raises DuplicateTrackingError when the identity already has a row.
    ``mark_scanned`` only succeeds for a row that has not been scanned yet.
    """

    def find_by_identity(self, identity: TrackingIdentity) -> Optional[TrackingRecord]:
        raise NotImplementedError

    def get_by_id(self, tracking_id: int) -> Optional[TrackingRecord]:
        raise NotImplementedError

    def reserve(self, identity: TrackingIdentity, *, qr_code_data: str, metadata: Optional[Any] = None) -> int:
        raise NotImplementedError

    def finalize(self, tracking_id: int, *, qr_code_data: str) -> bool:
        raise NotImplementedError

    def list_for_team(self, *, event_id: int, team_id: int) -> Sequence[TeamCodeRow]:
        raise NotImplementedError

    def mark_scanned(self, tracking_id: int, *, scanned_by: int, scanned_at: datetime) -> bool:
        raise NotImplementedError
