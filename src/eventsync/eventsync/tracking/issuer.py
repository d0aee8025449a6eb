from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..common.validators import require_max_length, require_non_empty
from ..core.constants import MAX_LABEL_LENGTH, PLACEHOLDER_TRACKING_ID
from ..core.enums import IssueStatus
from ..core.exceptions import DomainError, DuplicateTrackingError
from .codec import QRCodec
from .model import (
    BatchResult,
    IssueOutcome,
    IssueTarget,
    TargetOutcome,
    TrackingIdentity,
    TrackingRecord,
    TrackingTemplate,
)
from .repository import TrackingRepository

logger = logging.getLogger(__name__)


def _skipped(
    record: Optional[TrackingRecord], identity: TrackingIdentity, qr_code_url: Optional[str] = None
) -> IssueOutcome:
    return IssueOutcome(
        status=IssueStatus.SKIPPED,
        tracking_type=identity.tracking_type,
        label=identity.label,
        tracking_id=record.tracking_id if record else None,
        qr_code_url=qr_code_url,
        message="QR code already exists",
    )


class TrackingIssuer:
    """Creates tracking records idempotently.

    A record is written in two steps because its image embeds the id the
    store assigns on insert: ``reserve`` stores a placeholder image, then
    ``finalize`` replaces it with the image carrying the real id.
    """

    def __init__(self, tracking: TrackingRepository, codec: QRCodec):
        self._tracking = tracking
        self._codec = codec

    def issue(self, identity: TrackingIdentity, *, metadata: Optional[Any] = None) -> IssueOutcome:
        label = require_non_empty(identity.label, "label")
        require_max_length(label, "label", MAX_LABEL_LENGTH)

        existing = self._tracking.find_by_identity(identity)
        if existing is not None:
            return _skipped(existing, identity, self.ensure_image(existing))

        try:
            tracking_id = self.reserve(identity, metadata=metadata)
        except DuplicateTrackingError:
            # Lost an insert race to a concurrent issuer.
            logger.info("Concurrent issuance for %s resolved as skipped", identity)
            existing = self._tracking.find_by_identity(identity)
            return _skipped(existing, identity, existing.qr_code_data if existing else None)

        qr_code_url = self.finalize(identity, tracking_id)
        logger.info(
            "Issued tracking %s (%s '%s') event=%s team=%s member=%s",
            tracking_id,
            identity.tracking_type.value,
            identity.label,
            identity.event_id,
            identity.team_id,
            identity.member_id,
        )
        return IssueOutcome(
            status=IssueStatus.CREATED,
            tracking_type=identity.tracking_type,
            label=identity.label,
            tracking_id=tracking_id,
            qr_code_url=qr_code_url,
        )

    def reserve(self, identity: TrackingIdentity, *, metadata: Optional[Any] = None) -> int:
        placeholder = self._codec.encode(identity, PLACEHOLDER_TRACKING_ID)
        return self._tracking.reserve(identity, qr_code_data=placeholder, metadata=metadata)

    def finalize(self, identity: TrackingIdentity, tracking_id: int) -> str:
        qr_code_url = self._codec.encode(identity, tracking_id)
        self._tracking.finalize(tracking_id, qr_code_data=qr_code_url)
        return qr_code_url

    def has_final_image(self, record: TrackingRecord) -> bool:
        if not record.qr_code_data:
            return False
        return record.qr_code_data != self._codec.encode(record.identity, PLACEHOLDER_TRACKING_ID)

    def ensure_image(self, record: TrackingRecord) -> str:
        """Return the record's final image, rendering it when absent or still the placeholder.

        Only the image column is written; scan state is left alone.
        """

        if self.has_final_image(record):
            return record.qr_code_data
        logger.info("Rendering final QR image for tracking %s", record.tracking_id)
        return self.finalize(record.identity, record.tracking_id)

    def issue_batch(
        self,
        *,
        event_id: int,
        targets: Sequence[IssueTarget],
        templates: Sequence[TrackingTemplate],
    ) -> BatchResult:
        """Issue every template for every target; one failure never stops the rest."""

        result = BatchResult()
        for target in targets:
            target_outcome = TargetOutcome(target=target)
            for template in templates:
                identity = TrackingIdentity(
                    event_id=int(event_id),
                    team_id=target.team_id,
                    member_id=target.member_id,
                    tracking_type=template.tracking_type,
                    label=target.label_for(template),
                )
                target_outcome.outcomes.append(self._issue_one(identity, template.metadata))
            result.targets.append(target_outcome)

        logger.info("Batch issuance for event %s: %s", event_id, result.summary())
        return result

    def _issue_one(self, identity: TrackingIdentity, metadata: Optional[Any]) -> IssueOutcome:
        try:
            return self.issue(identity, metadata=metadata)
        except DomainError as e:
            logger.warning("Could not issue %s: %s", identity, e)
            message = str(e)
        except Exception:
            logger.exception("Failed to issue %s", identity)
            message = "Failed to generate QR code"
        return IssueOutcome(
            status=IssueStatus.ERROR,
            tracking_type=identity.tracking_type,
            label=identity.label,
            message=message,
        )
