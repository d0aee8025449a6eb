from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional

from ..common.datetime_utils import to_iso
from ..core.enums import IssueStatus, TrackingType


@dataclass(frozen=True)
class TrackingIdentity:
    """Uniqueness key of a tracking record: at most one row per identity."""

    event_id: int
    team_id: int
    member_id: Optional[int]
    tracking_type: TrackingType
    label: str


@dataclass(frozen=True)
class TrackingRecord:
    """Domain entity: one issued QR code and its scan state."""

    tracking_id: int
    event_id: int
    team_id: int
    member_id: Optional[int]
    tracking_type: TrackingType
    label: str
    qr_code_data: Optional[str] = None
    metadata: Optional[Any] = None
    scanned_at: Optional[datetime] = None
    scanned_by: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def identity(self) -> TrackingIdentity:
        return TrackingIdentity(
            event_id=self.event_id,
            team_id=self.team_id,
            member_id=self.member_id,
            tracking_type=self.tracking_type,
            label=self.label,
        )

    @property
    def is_scanned(self) -> bool:
        return self.scanned_at is not None


@dataclass(frozen=True)
class TeamCodeRow:
    """Read-model for listing a team's codes (joined with the member name)."""

    record: TrackingRecord
    member_name: Optional[str] = None


@dataclass(frozen=True)
class TrackingTemplate:
    tracking_type: TrackingType
    label: str
    metadata: Optional[Any] = None


@dataclass(frozen=True)
class IssueTarget:
    """A team, or one member of a team, that receives one code per template."""

    team_id: int
    member_id: Optional[int] = None
    member_name: Optional[str] = None

    def label_for(self, template: TrackingTemplate) -> str:
        if self.member_id is None:
            return template.label
        return f"{template.label} - {self.member_name}"


@dataclass(frozen=True)
class IssueOutcome:
    status: IssueStatus
    tracking_type: TrackingType
    label: str
    tracking_id: Optional[int] = None
    qr_code_url: Optional[str] = None
    message: Optional[str] = None

    def to_dict(self) -> dict:
        data: dict = {
            "label": self.label,
            "trackingType": self.tracking_type.value,
            "status": self.status.value,
        }
        if self.tracking_id is not None:
            data["id"] = self.tracking_id
        if self.qr_code_url is not None:
            data["qrCodeUrl"] = self.qr_code_url
        if self.message:
            data["message"] = self.message
        return data


@dataclass
class TargetOutcome:
    target: IssueTarget
    outcomes: List[IssueOutcome] = field(default_factory=list)

    def to_dict(self) -> dict:
        data: dict = {"teamId": self.target.team_id}
        if self.target.member_id is not None:
            data["memberId"] = self.target.member_id
            data["memberName"] = self.target.member_name
        data["qrCodes"] = [o.to_dict() for o in self.outcomes]
        return data


@dataclass
class BatchResult:
    """Aggregate of a bulk issuance; individual failures never abort the batch."""

    targets: List[TargetOutcome] = field(default_factory=list)

    def _count(self, status: IssueStatus) -> int:
        return sum(1 for t in self.targets for o in t.outcomes if o.status == status)

    @property
    def created_count(self) -> int:
        return self._count(IssueStatus.CREATED)

    @property
    def skipped_count(self) -> int:
        return self._count(IssueStatus.SKIPPED)

    @property
    def error_count(self) -> int:
        return self._count(IssueStatus.ERROR)

    def summary(self) -> str:
        return f"{self.created_count} created, {self.skipped_count} skipped, {self.error_count} failed"

    def to_dict(self, *, per_key: str = "perTeam") -> dict:
        return {
            "createdCount": self.created_count,
            "skippedCount": self.skipped_count,
            "errorCount": self.error_count,
            per_key: [t.to_dict() for t in self.targets],
        }


@dataclass(frozen=True)
class ScanResult:
    tracking_id: int
    team_name: str
    label: str
    tracking_type: TrackingType
    scanned_at: datetime
    scanned_by: str

    def to_dict(self) -> dict:
        return {
            "id": self.tracking_id,
            "teamName": self.team_name,
            "label": self.label,
            "trackingType": self.tracking_type.value,
            "scannedAt": to_iso(self.scanned_at),
            "scannedBy": self.scanned_by,
        }


def team_code_view(row: TeamCodeRow, *, qr_code_url: Optional[str]) -> dict:
    record = row.record
    return {
        "id": record.tracking_id,
        "eventId": record.event_id,
        "teamId": record.team_id,
        "memberId": record.member_id,
        "memberName": row.member_name,
        "trackingType": record.tracking_type.value,
        "label": record.label,
        "qrCodeUrl": qr_code_url,
        "metadata": record.metadata,
        "isScanned": record.is_scanned,
        "scannedAt": to_iso(record.scanned_at),
        "scannedBy": record.scanned_by,
        "createdAt": to_iso(record.created_at),
    }
