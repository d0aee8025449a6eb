from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .auth.identity import IdentityProvider, SessionIdentityProvider
from .auth.permissions import AccessGate
from .core.constants import DEFAULT_QR_BORDER, DEFAULT_QR_IMAGE_SIZE
from .database.connection import DBConfig, DatabaseConnection
from .events.mysql_event_repository import MySQLEventRepository
from .events.repository import EventRepository
from .messages.mysql_message_repository import MySQLMessageRepository
from .messages.repository import MessageRepository
from .messages.service import MessageService
from .teams.mysql_team_repository import MySQLTeamRepository
from .teams.repository import TeamRepository
from .tracking.codec import QRCodec
from .tracking.issuer import TrackingIssuer
from .tracking.mysql_tracking_repository import MySQLTrackingRepository
from .tracking.repository import TrackingRepository
from .tracking.service import TrackingService
from .tracking.verifier import ScanVerifier
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    events_repo: EventRepository
    teams_repo: TeamRepository
    tracking_repo: TrackingRepository
    messages_repo: MessageRepository

    identity: IdentityProvider
    codec: QRCodec
    issuer: TrackingIssuer
    tracking_service: TrackingService
    message_service: MessageService


def assemble_container(
    *,
    users_repo: UserRepository,
    events_repo: EventRepository,
    teams_repo: TeamRepository,
    tracking_repo: TrackingRepository,
    messages_repo: MessageRepository,
    codec: Optional[QRCodec] = None,
    identity: Optional[IdentityProvider] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over any set of repositories (MySQL in production, in-memory in tests)."""

    codec = codec or QRCodec()
    gate = AccessGate(teams_repo)
    issuer = TrackingIssuer(tracking_repo, codec)
    verifier = ScanVerifier(tracking_repo, events_repo, teams_repo, users_repo, gate)

    tracking_service = TrackingService(
        tracking_repo,
        events_repo,
        teams_repo,
        issuer,
        verifier,
        gate,
    )
    message_service = MessageService(messages_repo, events_repo, gate)

    return Container(
        conn=conn,
        users_repo=users_repo,
        events_repo=events_repo,
        teams_repo=teams_repo,
        tracking_repo=tracking_repo,
        messages_repo=messages_repo,
        identity=identity or SessionIdentityProvider(users_repo),
        codec=codec,
        issuer=issuer,
        tracking_service=tracking_service,
        message_service=message_service,
    )


def build_container(
    *,
    db_config: dict,
    qr_image_size: int = DEFAULT_QR_IMAGE_SIZE,
    qr_border: int = DEFAULT_QR_BORDER,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble_container(
        users_repo=MySQLUserRepository(conn),
        events_repo=MySQLEventRepository(conn),
        teams_repo=MySQLTeamRepository(conn),
        tracking_repo=MySQLTrackingRepository(conn),
        messages_repo=MySQLMessageRepository(conn),
        codec=QRCodec(size=qr_image_size, border=qr_border),
        conn=conn,
    )
