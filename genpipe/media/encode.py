from __future__ import annotations

import base64
import binascii

from ..errors import EmptyPayload
from ..schemas.content import EncodedMedia


def encode(data: bytes, mime_type: str) -> EncodedMedia:
    if not data:
        raise EmptyPayload()
    return EncodedMedia(mime_type=mime_type, data=base64.b64encode(bytes(data)).decode("ascii"))


def decode(media: EncodedMedia) -> bytes:
    return base64.b64decode(media.data, validate=True)


def parse_data_url(url: str) -> EncodedMedia:
    """Parse ``data:<mime>;base64,<payload>`` into an EncodedMedia."""
    if not url.startswith("data:") or ";base64," not in url:
        raise ValueError("not a base64 data URL")
    meta, payload = url.split(",", 1)
    mime_type = meta[5:].split(";")[0]
    if not mime_type:
        raise ValueError("data URL has no MIME type")
    try:
        raw = base64.b64decode(payload, validate=True)
    except binascii.Error as ex:
        raise ValueError(f"data URL payload is not valid base64: {ex}") from ex
    if not raw:
        raise EmptyPayload()
    return EncodedMedia(mime_type=mime_type, data=payload)
