from __future__ import annotations

import pytest

from src.eventsync.eventsync.main import create_app
from src.eventsync.eventsync.users.model import User
from tests.world import World, build_world


@pytest.fixture()
def world() -> World:
    return build_world()


@pytest.fixture()
def app(world, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container=world.container)


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def login(client):
    def _login(user: User) -> None:
        with client.session_transaction() as sess:
            sess["user_id"] = user.user_id

    return _login
