from __future__ import annotations

import copy
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from ..errors import CapabilityViolation, EmptyContent
from ..schemas.content import Document, MediaPart, Message, Role
from ..schemas.generate import GenerateRequest, ModelCapabilities


def build_request(
    documents: Iterable[Document] | None,
    messages: Iterable[Message],
    config: Mapping[str, Any] | None = None,
    *,
    capabilities: Optional[ModelCapabilities] = None,
    model: Optional[str] = None,
) -> GenerateRequest:
    """Assemble a request, validating content and (optionally) model capabilities.

    Inputs are copied so the result never aliases caller-owned objects; the same
    arguments always produce an equal request.
    """
    docs: List[Document] = [d.model_copy(deep=True) for d in (documents or [])]
    msgs: List[Message] = [m.model_copy(deep=True) for m in messages]

    for i, d in enumerate(docs):
        if not d.content:
            raise EmptyContent(f"documents[{i}]")
    for i, m in enumerate(msgs):
        if not m.content:
            raise EmptyContent(f"messages[{i}]")

    request = GenerateRequest(documents=docs, messages=msgs, config=copy.deepcopy(dict(config or {})))
    if capabilities is not None:
        check_capabilities(request, capabilities, model=model)
    return request


def check_capabilities(request: GenerateRequest, capabilities: ModelCapabilities, *, model: Optional[str] = None) -> None:
    """Raise CapabilityViolation for the first part of the request the model cannot accept."""
    if not capabilities.media:
        position = _first_media_position(request.documents, "documents") or _first_media_position(request.messages, "messages")
        if position:
            raise CapabilityViolation(model, "media", position)

    turns = 0
    for i, m in enumerate(request.messages):
        if m.role == Role.system:
            if not capabilities.system_role:
                raise CapabilityViolation(model, "the system role", f"messages[{i}]")
            continue
        if m.role == Role.tool and not capabilities.tools:
            raise CapabilityViolation(model, "tools", f"messages[{i}]")
        turns += 1
        if turns > 1 and not capabilities.multiturn:
            raise CapabilityViolation(model, "multiturn conversations", f"messages[{i}]")


def _first_media_position(holders: Sequence[Document | Message], label: str) -> Optional[str]:
    for i, holder in enumerate(holders):
        for j, part in enumerate(holder.content):
            if isinstance(part, MediaPart):
                return f"{label}[{i}].content[{j}]"
    return None
