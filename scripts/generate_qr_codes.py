"""Issue the default QR codes for every team registered to an event.

Usage:
    python scripts/generate_qr_codes.py <event_id>

Same result as POST /api/events/<event_id>/initialize-qrcodes, without a session.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.eventsync.eventsync.container import Container, build_container
from src.eventsync.eventsync.tracking.model import BatchResult, IssueTarget
from src.eventsync.eventsync.tracking.service import default_templates


def generate_for_event(container: Container, event_id: int) -> BatchResult:
    event = container.events_repo.get_by_id(event_id)
    if event is None:
        raise SystemExit(f"Event {event_id} not found")
    print(f"Event found: {event.title}")

    registrations = container.events_repo.list_registrations(event.event_id)
    if not registrations:
        print("No teams registered for this event")
        return BatchResult()
    print(f"Found {len(registrations)} registered team(s)")

    return container.issuer.issue_batch(
        event_id=event.event_id,
        targets=[IssueTarget(team_id=r.team_id) for r in registrations],
        templates=default_templates(),
    )


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Generate QR codes for all registered teams of an event")
    parser.add_argument("event_id", type=int)
    args = parser.parse_args(argv)

    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        qr_image_size=int(getattr(settings, "QR_IMAGE_SIZE", 300)),
        qr_border=int(getattr(settings, "QR_BORDER", 2)),
    )

    result = generate_for_event(container, args.event_id)
    for target in result.targets:
        print(f"Team {target.target.team_id}:")
        for outcome in target.outcomes:
            print(f"  {outcome.status.value:<8} {outcome.label}")

    print("=" * 50)
    print(f"Total teams:        {len(result.targets)}")
    print(f"QR codes created:   {result.created_count}")
    print(f"QR codes skipped:   {result.skipped_count}")
    print(f"QR codes failed:    {result.error_count}")
    print("=" * 50)


if __name__ == "__main__":
    main()
