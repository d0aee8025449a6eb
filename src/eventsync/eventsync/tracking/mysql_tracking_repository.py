from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.enums import TrackingType
from ..core.exceptions import DuplicateTrackingError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import TeamCodeRow, TrackingIdentity, TrackingRecord
from .repository import TrackingRepository

_COLUMNS = """
    t.tracking_id, t.event_id, t.team_id, t.member_id, t.tracking_type, t.label,
    t.qr_code_data, t.metadata, t.scanned_at, t.scanned_by, t.created_at
"""


def _member_key(member_id: Optional[int]) -> int:
    return int(member_id) if member_id is not None else 0


def _to_record(row: dict) -> TrackingRecord:
    member_id = row.get("member_id")
    scanned_by = row.get("scanned_by")
    return TrackingRecord(
        tracking_id=int(row["tracking_id"]),
        event_id=int(row["event_id"]),
        team_id=int(row["team_id"]),
        member_id=int(member_id) if member_id is not None else None,
        tracking_type=TrackingType(row["tracking_type"]),
        label=row["label"],
        qr_code_data=row.get("qr_code_data"),
        metadata=load_json(row.get("metadata")),
        scanned_at=row.get("scanned_at"),
        scanned_by=int(scanned_by) if scanned_by is not None else None,
        created_at=row.get("created_at"),
    )


class MySQLTrackingRepository(TrackingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_by_identity(self, identity: TrackingIdentity) -> Optional[TrackingRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_tracking t
                WHERE t.event_id=%s AND t.team_id=%s AND t.member_key=%s
                  AND t.tracking_type=%s AND t.label=%s
                """,
                (
                    int(identity.event_id),
                    int(identity.team_id),
                    _member_key(identity.member_id),
                    identity.tracking_type.value,
                    identity.label,
                ),
            )
            row = fetchone(cur)
            return _to_record(row) if row else None

    def get_by_id(self, tracking_id: int) -> Optional[TrackingRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_tracking t WHERE t.tracking_id=%s",
                (int(tracking_id),),
            )
            row = fetchone(cur)
            return _to_record(row) if row else None

    def reserve(self, identity: TrackingIdentity, *, qr_code_data: str, metadata: Optional[Any] = None) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_tracking(
                        event_id, team_id, member_id, member_key, tracking_type, label, qr_code_data, metadata
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(identity.event_id),
                        int(identity.team_id),
                        identity.member_id,
                        _member_key(identity.member_id),
                        identity.tracking_type.value,
                        identity.label,
                        qr_code_data,
                        dump_json(metadata),
                    ),
                )
                return int(cur.lastrowid)
        except IntegrityError as e:
            if e.errno == errorcode.ER_DUP_ENTRY:
                raise DuplicateTrackingError("Tracking record already exists") from e
            raise

    def finalize(self, tracking_id: int, *, qr_code_data: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_tracking SET qr_code_data=%s WHERE tracking_id=%s",
                (qr_code_data, int(tracking_id)),
            )
            return cur.rowcount > 0

    def list_for_team(self, *, event_id: int, team_id: int) -> Sequence[TeamCodeRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, m.name AS member_name, m.email AS member_email
                FROM attendance_tracking t
                LEFT JOIN team_members m ON m.member_id = t.member_id
                WHERE t.event_id=%s AND t.team_id=%s
                ORDER BY t.created_at DESC, t.tracking_id DESC
                """,
                (int(event_id), int(team_id)),
            )
            return [
                TeamCodeRow(
                    record=_to_record(r),
                    member_name=r.get("member_name") or r.get("member_email"),
                )
                for r in fetchall(cur)
            ]

    def mark_scanned(self, tracking_id: int, *, scanned_by: int, scanned_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_tracking
                SET scanned_at=%s, scanned_by=%s
                WHERE tracking_id=%s AND scanned_at IS NULL
                """,
                (scanned_at, int(scanned_by), int(tracking_id)),
            )
            return cur.rowcount == 1
