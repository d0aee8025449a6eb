"""QR payload codec.

A tracking code carries a compact JSON envelope
``{trackingId, eventId, teamId, memberId?, type, label}`` rendered as a PNG
data URL, so clients can display it without another request.
"""

from __future__ import annotations

import base64
import io
import json
from typing import Any, BinaryIO, Union

import qrcode
from PIL import Image, UnidentifiedImageError

from ..core.constants import DEFAULT_QR_BORDER, DEFAULT_QR_IMAGE_SIZE
from ..core.exceptions import MalformedPayloadError
from .model import TrackingIdentity


class QRCodec:
    def __init__(self, *, size: int = DEFAULT_QR_IMAGE_SIZE, border: int = DEFAULT_QR_BORDER):
        self._size = int(size)
        self._border = int(border)

    @staticmethod
    def build_payload(identity: TrackingIdentity, tracking_id: Union[int, str]) -> str:
        data: dict = {
            "trackingId": tracking_id,
            "eventId": identity.event_id,
            "teamId": identity.team_id,
        }
        if identity.member_id is not None:
            data["memberId"] = identity.member_id
        data["type"] = identity.tracking_type.value
        data["label"] = identity.label
        return json.dumps(data, separators=(",", ":"), ensure_ascii=False)

    def render(self, payload: str) -> str:
        qr = qrcode.QRCode(
            version=None,
            error_correction=qrcode.constants.ERROR_CORRECT_H,
            box_size=10,
            border=self._border,
        )
        qr.add_data(payload)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white").get_image().convert("RGB")
        img = img.resize((self._size, self._size), Image.Resampling.NEAREST)

        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")

    def encode(self, identity: TrackingIdentity, tracking_id: Union[int, str]) -> str:
        return self.render(self.build_payload(identity, tracking_id))


def _as_identifier(value: Any) -> str:
    if isinstance(value, bool) or value is None:
        return ""
    if isinstance(value, (int, str)):
        return str(value).strip()
    return ""


def decode(presented: Any) -> str:
    """Extract the tracking id from a scanned payload.

    Accepts the JSON envelope (as text or already parsed) or a bare id string.
    """

    if isinstance(presented, dict):
        tracking_id = _as_identifier(presented.get("trackingId"))
    elif isinstance(presented, str):
        text = presented.strip()
        try:
            parsed = json.loads(text)
        except ValueError:
            parsed = None
        if isinstance(parsed, dict):
            tracking_id = _as_identifier(parsed.get("trackingId"))
        else:
            tracking_id = text
    else:
        tracking_id = ""

    if not tracking_id:
        raise MalformedPayloadError("Invalid QR code format")
    return tracking_id


def decode_image(stream: BinaryIO) -> str:
    """Read the first QR symbol from an uploaded photo and return its text."""

    # pyzbar loads the zbar shared library on import
    from pyzbar.pyzbar import decode as pyzbar_decode

    try:
        img = Image.open(stream).convert("RGB")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError):
        raise MalformedPayloadError("Uploaded file is not a readable image")

    symbols = pyzbar_decode(img)
    if not symbols:
        raise MalformedPayloadError("No QR code detected in image")
    try:
        return symbols[0].data.decode("utf-8").strip()
    except UnicodeDecodeError:
        raise MalformedPayloadError("QR code does not contain text")
