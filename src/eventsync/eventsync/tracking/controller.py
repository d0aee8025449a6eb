from __future__ import annotations

from flask import Flask, request

from ..auth.identity import require_user
from ..common.http import ok
from ..common.validators import optional_int
from ..core.enums import IssueStatus
from ..core.exceptions import MalformedPayloadError, ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.tracking_service

    def _json_body() -> dict:
        body = request.get_json(silent=True)
        return body if isinstance(body, dict) else {}

    @app.route("/api/events/<int:event_id>/initialize-qrcodes", methods=["POST"], endpoint="initialize_qrcodes")
    def initialize_qrcodes(event_id: int):
        actor = require_user(container.identity)
        body = _json_body()
        result = service.initialize_event_codes(actor=actor, event_id=event_id, templates=body.get("templates"))
        data = result.to_dict(per_key="perTeam")
        data["totalTeams"] = len(result.targets)
        return ok(data, message=f"QR codes initialized: {result.summary()}")

    @app.route(
        "/api/events/<int:event_id>/teams/<int:team_id>/generate-qrcodes",
        methods=["POST"],
        endpoint="generate_member_qrcodes",
    )
    def generate_member_qrcodes(event_id: int, team_id: int):
        actor = require_user(container.identity)
        body = _json_body()
        result = service.generate_member_codes(
            actor=actor, event_id=event_id, team_id=team_id, templates=body.get("templates")
        )
        data = result.to_dict(per_key="perMember")
        data["totalMembers"] = len(result.targets)
        return ok(data, message=f"Member QR codes generated: {result.summary()}")

    @app.route("/api/events/<int:event_id>/teams/<int:team_id>/qrcodes", methods=["POST"], endpoint="create_qrcode")
    def create_qrcode(event_id: int, team_id: int):
        actor = require_user(container.identity)
        body = _json_body()
        outcome = service.create_code(
            actor=actor,
            event_id=event_id,
            team_id=team_id,
            tracking_type=body.get("trackingType"),
            label=body.get("label"),
            metadata=body.get("metadata"),
            member_id=optional_int(body.get("memberId"), "memberId"),
        )
        if outcome.status == IssueStatus.SKIPPED:
            return ok(outcome.to_dict(), message="QR code already exists")
        return ok(outcome.to_dict(), message="QR code created", status=201)

    @app.route("/api/events/<int:event_id>/teams/<int:team_id>/qrcodes", methods=["GET"], endpoint="list_qrcodes")
    def list_qrcodes(event_id: int, team_id: int):
        actor = require_user(container.identity)
        return ok(service.list_team_codes(actor=actor, event_id=event_id, team_id=team_id))

    @app.route("/api/events/<int:event_id>/verify-qr", methods=["POST"], endpoint="verify_qr")
    def verify_qr(event_id: int):
        actor = require_user(container.identity)
        presented = _json_body().get("qrData")
        if presented is None:
            raise MalformedPayloadError("QR data is required")
        result = service.verify(actor=actor, event_id=event_id, presented=presented)
        return ok(result.to_dict(), message="QR code verified successfully")

    @app.route("/api/events/<int:event_id>/verify-qr/image", methods=["POST"], endpoint="verify_qr_image")
    def verify_qr_image(event_id: int):
        actor = require_user(container.identity)
        upload = request.files.get("image")
        if upload is None or not upload.filename:
            raise ValidationError("An image file is required")
        result = service.verify_image(actor=actor, event_id=event_id, stream=upload.stream)
        return ok(result.to_dict(), message="QR code verified successfully")
