from __future__ import annotations

from flask import Flask, request

from ..auth.identity import require_user
from ..common.http import ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.message_service

    @app.route("/api/events/<int:event_id>/messages", methods=["GET"], endpoint="list_messages")
    def list_messages(event_id: int):
        return ok([m.to_dict() for m in service.list_messages(event_id=event_id)])

    @app.route("/api/events/<int:event_id>/messages", methods=["POST"], endpoint="post_message")
    def post_message(event_id: int):
        actor = require_user(container.identity)
        body = request.get_json(silent=True)
        body = body if isinstance(body, dict) else {}
        message = service.post_message(
            actor=actor,
            event_id=event_id,
            title=body.get("title"),
            content=body.get("content"),
            priority=body.get("priority"),
        )
        return ok(message.to_dict(), message="Event message posted successfully", status=201)
