from __future__ import annotations

import io
import json
import sys
import types
from types import SimpleNamespace

import pytest
from PIL import Image

from tests.world import ADMIN, ALICE, CAROL, EVENT_ID, OTHER_EVENT_ID, OTHER_MANAGER, OWNER, TEAM_ID

INIT_URL = f"/api/events/{EVENT_ID}/initialize-qrcodes"
CODES_URL = f"/api/events/{EVENT_ID}/teams/{TEAM_ID}/qrcodes"
VERIFY_URL = f"/api/events/{EVENT_ID}/verify-qr"


def _payload_for(world, tracking_id: int) -> str:
    record = world.tracking.get_by_id(tracking_id)
    return world.container.codec.build_payload(record.identity, tracking_id)


@pytest.mark.parametrize(
    "method, url",
    [
        ("post", INIT_URL),
        ("post", f"/api/events/{EVENT_ID}/teams/{TEAM_ID}/generate-qrcodes"),
        ("post", CODES_URL),
        ("get", CODES_URL),
        ("post", VERIFY_URL),
        ("post", f"/api/events/{EVENT_ID}/messages"),
    ],
)
def test_requires_session(client, method, url):
    res = getattr(client, method)(url, json={})
    assert res.status_code == 401
    assert res.get_json() == {"success": False, "error": "unauthorized", "message": "Authentication required"}


def test_issue_list_and_scan_scenario(client, login, world):
    login(OWNER)
    res = client.post(INIT_URL, json={})
    assert res.status_code == 200
    body = res.get_json()
    assert body["success"] is True
    assert body["data"]["totalTeams"] == 1
    assert (body["data"]["createdCount"], body["data"]["skippedCount"]) == (3, 0)
    assert body["data"]["perTeam"][0]["teamId"] == TEAM_ID

    rerun = client.post(INIT_URL).get_json()["data"]
    assert (rerun["createdCount"], rerun["skippedCount"]) == (0, 3)

    login(ALICE)
    codes = client.get(CODES_URL).get_json()["data"]
    assert len(codes) == 3
    assert not any(c["isScanned"] for c in codes)
    lunch = next(c for c in codes if c["label"] == "Lunch Coupon")

    res = client.post(VERIFY_URL, json={"qrData": _payload_for(world, lunch["id"])})
    assert res.status_code == 403

    login(OWNER)
    res = client.post(VERIFY_URL, json={"qrData": _payload_for(world, lunch["id"])})
    assert res.status_code == 200
    scanned = res.get_json()["data"]
    assert scanned["teamName"] == "Team Rocket"
    assert scanned["scannedBy"] == "Olga Owner"

    login(ADMIN)
    res = client.post(VERIFY_URL, json={"qrData": str(lunch["id"])})
    assert res.status_code == 400
    body = res.get_json()
    assert body["error"] == "already_scanned"
    assert body["scannedBy"] == "Olga Owner"
    assert body["scannedAt"] == scanned["scannedAt"]

    login(ALICE)
    codes = client.get(CODES_URL).get_json()["data"]
    assert [c["isScanned"] for c in codes if c["id"] == lunch["id"]] == [True]


def test_cross_event_scan_is_rejected(client, login, world):
    login(OWNER)
    client.post(INIT_URL)
    tracking_id = next(iter(world.tracking.rows))

    res = client.post(
        f"/api/events/{OTHER_EVENT_ID}/verify-qr", json={"qrData": _payload_for(world, tracking_id)}
    )

    assert res.status_code == 400
    assert res.get_json()["error"] == "wrong_event"
    assert world.tracking.get_by_id(tracking_id).scanned_at is None


def test_verify_error_kinds(client, login):
    login(OWNER)
    assert client.post(VERIFY_URL, json={}).get_json()["error"] == "malformed_payload"
    assert client.post(VERIFY_URL, json={"qrData": "   "}).status_code == 400

    res = client.post(VERIFY_URL, json={"qrData": json.dumps({"trackingId": 9999})})
    assert res.status_code == 404
    assert res.get_json()["error"] == "not_found"


def test_create_single_code_statuses(client, login):
    login(OWNER)
    body = {"trackingType": "food_coupon", "label": "Midnight Snack", "metadata": {"room": "A1"}}

    first = client.post(CODES_URL, json=body)
    second = client.post(CODES_URL, json=body)

    assert first.status_code == 201
    assert first.get_json()["data"]["status"] == "created"
    assert second.status_code == 200
    assert second.get_json()["data"]["status"] == "skipped"
    assert second.get_json()["data"]["id"] == first.get_json()["data"]["id"]

    bad = client.post(CODES_URL, json={"trackingType": "vip", "label": "x"})
    assert bad.status_code == 400
    assert bad.get_json()["error"] == "validation_error"

    bad_member = client.post(CODES_URL, json={**body, "memberId": "abc"})
    assert bad_member.status_code == 400


def test_generate_member_codes_endpoint(client, login):
    login(ADMIN)
    res = client.post(
        f"/api/events/{EVENT_ID}/teams/{TEAM_ID}/generate-qrcodes",
        json={"templates": [{"trackingType": "attendance", "label": "Badge"}]},
    )

    assert res.status_code == 200
    data = res.get_json()["data"]
    assert data["totalMembers"] == 2
    assert [m["qrCodes"][0]["label"] for m in data["perMember"]] == ["Badge - Alice", "Badge - Bob"]


@pytest.mark.parametrize("user", [CAROL, OTHER_MANAGER])
def test_list_codes_forbidden(client, login, user):
    login(user)
    res = client.get(CODES_URL)
    assert res.status_code == 403
    assert res.get_json()["error"] == "forbidden"


def test_initialize_forbidden_for_members(client, login):
    login(ALICE)
    assert client.post(INIT_URL).status_code == 403


def test_verify_image_requires_file(client, login):
    login(OWNER)
    res = client.post(f"{VERIFY_URL}/image", data={}, content_type="multipart/form-data")
    assert res.status_code == 400


def test_verify_image_scans_uploaded_code(client, login, world):
    pytest.importorskip("pyzbar.pyzbar", exc_type=ImportError)
    import base64

    login(OWNER)
    client.post(INIT_URL)
    tracking_id = next(iter(world.tracking.rows))
    data_url = world.tracking.get_by_id(tracking_id).qr_code_data
    png = base64.b64decode(data_url.split(",", 1)[1])

    res = client.post(
        f"{VERIFY_URL}/image",
        data={"image": (io.BytesIO(png), "code.png")},
        content_type="multipart/form-data",
    )

    assert res.status_code == 200
    assert res.get_json()["data"]["id"] == tracking_id


def test_unexpected_errors_are_hidden(client, login, world, monkeypatch):
    def boom(_event_id):
        raise RuntimeError("db password is hunter2")

    monkeypatch.setattr(world.events, "get_by_id", boom)
    login(OWNER)

    res = client.post(INIT_URL)

    assert res.status_code == 500
    assert res.get_json() == {"success": False, "error": "internal_error", "message": "Internal server error"}


def test_verify_image_with_binary_symbol_is_bad_request(client, login, monkeypatch):
    reader = types.ModuleType("pyzbar.pyzbar")
    reader.decode = lambda image: [SimpleNamespace(data=b"\xff\xfe\x80")]
    package = types.ModuleType("pyzbar")
    package.pyzbar = reader
    monkeypatch.setitem(sys.modules, "pyzbar", package)
    monkeypatch.setitem(sys.modules, "pyzbar.pyzbar", reader)

    png = io.BytesIO()
    Image.new("RGB", (64, 64), "white").save(png, format="PNG")
    png.seek(0)

    login(OWNER)
    res = client.post(
        f"{VERIFY_URL}/image",
        data={"image": (png, "code.png")},
        content_type="multipart/form-data",
    )

    assert res.status_code == 400
    assert res.get_json()["error"] == "malformed_payload"
