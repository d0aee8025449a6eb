from __future__ import annotations

from dataclasses import replace
from datetime import datetime

import pytest

from src.eventsync.eventsync.core.enums import IssueStatus, TrackingType
from src.eventsync.eventsync.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.eventsync.eventsync.tracking.model import TrackingIdentity
from tests.world import (
    ADMIN,
    ALICE,
    CAROL,
    EMPTY_TEAM_ID,
    EVENT_ID,
    OTHER_EVENT_ID,
    OTHER_MANAGER,
    OUTSIDER,
    OWNER,
    TEAM_ID,
    UNREGISTERED_EVENT_ID,
)


def test_initialize_issues_defaults_for_every_registered_team(world):
    service = world.container.tracking_service

    result = service.initialize_event_codes(actor=OWNER, event_id=OTHER_EVENT_ID)

    assert len(result.targets) == 2
    assert result.created_count == 6
    assert {r.team_id for r in world.tracking.rows.values()} == {TEAM_ID, EMPTY_TEAM_ID}


def test_initialize_with_custom_templates(world):
    service = world.container.tracking_service
    templates = [{"trackingType": "custom", "label": "T-Shirt", "metadata": {"size": "M"}}]

    result = service.initialize_event_codes(actor=ADMIN, event_id=EVENT_ID, templates=templates)

    assert result.created_count == 1
    (record,) = world.tracking.rows.values()
    assert record.tracking_type == TrackingType.CUSTOM
    assert record.metadata == {"size": "M"}


@pytest.mark.parametrize(
    "templates",
    [
        [{"trackingType": "attendance", "label": "ok"}, {"trackingType": "raffle", "label": "bad"}],
        [{"trackingType": "attendance", "label": "   "}],
        ["attendance"],
        {"trackingType": "attendance"},
    ],
)
def test_invalid_templates_reject_the_whole_request(world, templates):
    with pytest.raises(ValidationError):
        world.container.tracking_service.initialize_event_codes(actor=OWNER, event_id=EVENT_ID, templates=templates)
    assert world.tracking.rows == {}


@pytest.mark.parametrize("actor", [ALICE, OTHER_MANAGER])
def test_initialize_requires_event_owner_or_admin(world, actor):
    with pytest.raises(AuthorizationError):
        world.container.tracking_service.initialize_event_codes(actor=actor, event_id=EVENT_ID)


def test_initialize_unknown_event_or_no_teams(world):
    service = world.container.tracking_service
    with pytest.raises(NotFoundError):
        service.initialize_event_codes(actor=OWNER, event_id=404)
    with pytest.raises(NotFoundError):
        service.initialize_event_codes(actor=OWNER, event_id=UNREGISTERED_EVENT_ID)


def test_generate_member_codes_skips_pending_members(world):
    result = world.container.tracking_service.generate_member_codes(actor=OWNER, event_id=EVENT_ID, team_id=TEAM_ID)

    assert [t.target.member_name for t in result.targets] == ["Alice", "Bob"]
    assert result.created_count == 6
    assert all(r.member_id in {1000, 1001} for r in world.tracking.rows.values())


def test_generate_member_codes_failures(world):
    service = world.container.tracking_service
    with pytest.raises(NotFoundError):
        service.generate_member_codes(actor=OWNER, event_id=EVENT_ID, team_id=EMPTY_TEAM_ID)
    with pytest.raises(ValidationError):
        service.generate_member_codes(actor=OWNER, event_id=OTHER_EVENT_ID, team_id=EMPTY_TEAM_ID)
    with pytest.raises(AuthorizationError):
        service.generate_member_codes(actor=ALICE, event_id=EVENT_ID, team_id=TEAM_ID)


def test_create_code_then_skip(world):
    service = world.container.tracking_service
    kwargs = dict(actor=OWNER, event_id=EVENT_ID, team_id=TEAM_ID, tracking_type="food_coupon", label="Breakfast")

    first = service.create_code(**kwargs)
    second = service.create_code(**kwargs)

    assert first.status == IssueStatus.CREATED
    assert second.status == IssueStatus.SKIPPED
    assert second.tracking_id == first.tracking_id


def test_create_code_for_member(world):
    service = world.container.tracking_service

    outcome = service.create_code(
        actor=OWNER, event_id=EVENT_ID, team_id=TEAM_ID, tracking_type="custom", label="Swag bag", member_id=1000
    )
    assert world.tracking.get_by_id(outcome.tracking_id).member_id == 1000

    with pytest.raises(NotFoundError):
        service.create_code(
            actor=OWNER, event_id=EVENT_ID, team_id=TEAM_ID, tracking_type="custom", label="Swag bag", member_id=1002
        )


def test_create_code_validates_input(world):
    service = world.container.tracking_service
    with pytest.raises(ValidationError):
        service.create_code(actor=OWNER, event_id=EVENT_ID, team_id=TEAM_ID, tracking_type="vip", label="x")
    with pytest.raises(ValidationError):
        service.create_code(actor=OWNER, event_id=EVENT_ID, team_id=TEAM_ID, tracking_type="custom", label="")


@pytest.mark.parametrize("actor", [ALICE, OWNER, ADMIN])
def test_list_team_codes_allowed(world, actor):
    service = world.container.tracking_service
    service.initialize_event_codes(actor=OWNER, event_id=EVENT_ID)

    codes = service.list_team_codes(actor=actor, event_id=EVENT_ID, team_id=TEAM_ID)

    assert len(codes) == 3
    assert all(c["isScanned"] is False and c["qrCodeUrl"].startswith("data:image/png") for c in codes)


@pytest.mark.parametrize("actor", [CAROL, OUTSIDER, OTHER_MANAGER])
def test_list_team_codes_denied(world, actor):
    with pytest.raises(AuthorizationError):
        world.container.tracking_service.list_team_codes(actor=actor, event_id=EVENT_ID, team_id=TEAM_ID)


def test_list_team_codes_for_unregistered_team(world):
    with pytest.raises(NotFoundError):
        world.container.tracking_service.list_team_codes(actor=ADMIN, event_id=EVENT_ID, team_id=EMPTY_TEAM_ID)


def test_list_generates_missing_images_without_touching_scan_state(world):
    identity = TrackingIdentity(
        event_id=EVENT_ID, team_id=TEAM_ID, member_id=None, tracking_type=TrackingType.ATTENDANCE, label="Legacy"
    )
    tracking_id = world.tracking.reserve(identity, qr_code_data=None)
    scanned_at = datetime(2026, 3, 1, 8, 0, 0)
    world.tracking.rows[tracking_id] = replace(
        world.tracking.rows[tracking_id], scanned_at=scanned_at, scanned_by=OWNER.user_id
    )

    (code,) = world.container.tracking_service.list_team_codes(actor=ALICE, event_id=EVENT_ID, team_id=TEAM_ID)

    stored = world.tracking.get_by_id(tracking_id)
    assert stored.qr_code_data == world.container.codec.encode(identity, tracking_id)
    assert code["qrCodeUrl"] == stored.qr_code_data
    assert code["isScanned"] is True
    assert stored.scanned_at == scanned_at
    assert stored.scanned_by == OWNER.user_id


def test_list_replaces_placeholder_images(world):
    codec = world.container.codec
    identity = TrackingIdentity(
        event_id=EVENT_ID, team_id=TEAM_ID, member_id=1000, tracking_type=TrackingType.FOOD_COUPON, label="Dinner"
    )
    tracking_id = world.tracking.reserve(identity, qr_code_data=codec.encode(identity, "temp"))

    (code,) = world.container.tracking_service.list_team_codes(actor=ALICE, event_id=EVENT_ID, team_id=TEAM_ID)

    assert code["qrCodeUrl"] == codec.encode(identity, tracking_id)
    assert world.tracking.get_by_id(tracking_id).qr_code_data == code["qrCodeUrl"]
    assert code["memberName"] == "Alice"
