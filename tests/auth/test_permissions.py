from __future__ import annotations

import pytest

from src.eventsync.eventsync.auth.permissions import AccessGate, can_manage_event, is_admin, is_manager_or_above
from src.eventsync.eventsync.core.enums import Role
from src.eventsync.eventsync.core.exceptions import AuthorizationError
from tests.world import ADMIN, ALICE, CAROL, EVENT_ID, OTHER_MANAGER, OUTSIDER, OWNER, TEAM_ID


def test_role_ranks_are_ordered():
    assert Role.ADMIN.at_least(Role.MANAGER)
    assert Role.MANAGER.at_least(Role.MANAGER)
    assert not Role.USER.at_least(Role.MANAGER)
    assert [r.rank for r in (Role.USER, Role.MANAGER, Role.ADMIN)] == [1, 2, 3]


def test_role_helpers():
    assert is_admin(ADMIN)
    assert not is_admin(OWNER)
    assert is_manager_or_above(OWNER) and is_manager_or_above(ADMIN)
    assert not is_manager_or_above(ALICE)
    assert not is_manager_or_above(None)


def test_can_manage_event(world):
    event = world.events.get_by_id(EVENT_ID)
    assert can_manage_event(OWNER, event)
    assert can_manage_event(ADMIN, event)
    assert not can_manage_event(OTHER_MANAGER, event)
    assert not can_manage_event(ALICE, event)
    assert not can_manage_event(OWNER, None)


@pytest.mark.parametrize("user", [ALICE, OWNER, ADMIN])
def test_team_access_granted(world, user):
    gate = AccessGate(world.teams)
    gate.ensure_team_access(user, world.events.get_by_id(EVENT_ID), TEAM_ID)


@pytest.mark.parametrize("user", [CAROL, OUTSIDER, OTHER_MANAGER])
def test_team_access_denied(world, user):
    gate = AccessGate(world.teams)
    with pytest.raises(AuthorizationError, match="not a member of this team"):
        gate.ensure_team_access(user, world.events.get_by_id(EVENT_ID), TEAM_ID)


def test_ensure_can_manage_messages(world):
    gate = AccessGate(world.teams)
    event = world.events.get_by_id(EVENT_ID)

    with pytest.raises(AuthorizationError, match="Only managers and admins"):
        gate.ensure_can_manage(ALICE, event, action="scan QR codes")
    with pytest.raises(AuthorizationError, match="for this event"):
        gate.ensure_can_manage(OTHER_MANAGER, event, action="scan QR codes")
    gate.ensure_can_manage(OWNER, event)
