from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account role returned by the identity provider."""

    USER = "user"
    MANAGER = "manager"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]

    def at_least(self, other: "Role") -> bool:
        return self.rank >= other.rank


_ROLE_RANK = {
    Role.USER: 1,
    Role.MANAGER: 2,
    Role.ADMIN: 3,
}


class TrackingType(str, Enum):
    """Category of an issued QR code."""

    ATTENDANCE = "attendance"
    FOOD_COUPON = "food_coupon"
    CUSTOM = "custom"


class MemberStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class MessagePriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class IssueStatus(str, Enum):
    """Outcome of a single issuance attempt inside a batch."""

    CREATED = "created"
    SKIPPED = "skipped"
    ERROR = "error"
