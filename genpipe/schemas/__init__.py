from __future__ import annotations

from .content import (
    Document,
    EncodedMedia,
    MediaPart,
    Message,
    Part,
    Role,
    TextPart,
    media_part,
    system_text_message,
    text_document,
    text_part,
    user_text_message,
)
from .generate import GenerateRequest, GenerateResponse, GenerationConfig, ModelCapabilities, Usage
from .run import FlowRun, FlowStatus, LogEntry, RunFlowRequest

__all__ = [
    "Document",
    "EncodedMedia",
    "FlowRun",
    "FlowStatus",
    "GenerateRequest",
    "GenerateResponse",
    "GenerationConfig",
    "LogEntry",
    "MediaPart",
    "Message",
    "ModelCapabilities",
    "Part",
    "Role",
    "RunFlowRequest",
    "TextPart",
    "Usage",
    "media_part",
    "system_text_message",
    "text_document",
    "text_part",
    "user_text_message",
]
