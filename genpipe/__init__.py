"""Provider-agnostic generation pipeline: flows, models, multimodal requests."""

from .engine.assembler import build_request
from .engine.executor import FlowExecutor
from .engine.extract import extract_media, extract_text
from .flows.base import Flow, FlowContext, render_prompt
from .flows.registry import FlowRegistry
from .media import MediaAsset, classify, decode, encode
from .models.registry import ModelHandle, ModelRegistry
from .schemas import (
    Document,
    EncodedMedia,
    FlowRun,
    GenerateRequest,
    GenerateResponse,
    MediaPart,
    Message,
    ModelCapabilities,
    Role,
    TextPart,
    media_part,
    text_part,
    user_text_message,
)

__version__ = "0.1.0"

__all__ = [
    "Document",
    "EncodedMedia",
    "Flow",
    "FlowContext",
    "FlowExecutor",
    "FlowRegistry",
    "FlowRun",
    "GenerateRequest",
    "GenerateResponse",
    "MediaAsset",
    "MediaPart",
    "Message",
    "ModelCapabilities",
    "ModelHandle",
    "ModelRegistry",
    "Role",
    "TextPart",
    "build_request",
    "classify",
    "decode",
    "encode",
    "extract_media",
    "extract_text",
    "media_part",
    "render_prompt",
    "text_part",
    "user_text_message",
]
