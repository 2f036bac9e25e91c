from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..schemas.content import EncodedMedia, MediaPart
from .classify import classify
from .encode import encode


class MediaAsset(BaseModel):
    """Raw media bytes with a MIME type derived from those same bytes.

    Build instances with ``from_bytes`` or ``from_file``; the MIME type is never
    taken from the caller.
    """

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(..., repr=False)
    path: Optional[str] = None
    mime_type: str

    @classmethod
    def from_bytes(cls, data: bytes, path: Optional[str] = None) -> "MediaAsset":
        return cls(data=bytes(data), path=path, mime_type=classify(data, path))

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "MediaAsset":
        p = Path(path)
        return cls.from_bytes(p.read_bytes(), path=str(p))

    @property
    def size(self) -> int:
        return len(self.data)

    def encode(self) -> EncodedMedia:
        return encode(self.data, self.mime_type)

    def to_part(self) -> MediaPart:
        return MediaPart(media=self.encode())


def encode_asset(asset: MediaAsset) -> EncodedMedia:
    return asset.encode()
