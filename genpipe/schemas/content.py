from __future__ import annotations

import enum
from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class EncodedMedia(BaseModel):
    """Transport-safe media payload: a MIME type plus base64 text of the bytes."""

    model_config = ConfigDict(frozen=True)

    mime_type: str = Field(..., description="MIME type derived from the encoded bytes")
    data: str = Field(..., description="Standard base64 (padded, no line wraps)")

    @property
    def url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


class TextPart(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str


class MediaPart(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["media"] = "media"
    media: EncodedMedia


Part = Annotated[Union[TextPart, MediaPart], Field(discriminator="kind")]


def text_part(text: str) -> TextPart:
    return TextPart(text=text)


def media_part(media: EncodedMedia) -> MediaPart:
    return MediaPart(media=media)


class Role(str, enum.Enum):
    user = "user"
    system = "system"
    model = "model"
    tool = "tool"


class Message(BaseModel):
    role: Role
    content: List[Part] = Field(default_factory=list)

    def text(self) -> str:
        return "".join(p.text for p in self.content if isinstance(p, TextPart))


class Document(BaseModel):
    """Background material handed to the model alongside the conversation."""

    content: List[Part] = Field(default_factory=list)


def user_text_message(text: str) -> Message:
    return Message(role=Role.user, content=[text_part(text)])


def system_text_message(text: str) -> Message:
    return Message(role=Role.system, content=[text_part(text)])


def text_document(text: str) -> Document:
    return Document(content=[text_part(text)])
