from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

import httpx

from ..errors import BackendError
from ..models.registry import ModelHandle, ModelRegistry
from ..schemas.content import Document, Message, Role, TextPart, text_part
from ..schemas.generate import GenerateRequest, GenerateResponse, ModelCapabilities

# Common option names and the camelCase spellings callers may use instead
_COMMON_OPTIONS = {
    "temperature": "temperature",
    "top_k": "topK",
    "top_p": "topP",
    "max_output_tokens": "maxOutputTokens",
    "stop_sequences": "stopSequences",
}

CONTEXT_PREFACE = "Use the following information to complete your task:"


class Backend(ABC):
    """A model provider. Models are exposed to the pipeline via ``define_model``."""

    name: str = ""
    default_capabilities = ModelCapabilities()

    @abstractmethod
    async def generate(self, model: str, request: GenerateRequest, **options: Any) -> GenerateResponse:
        raise NotImplementedError

    def define_model(
        self,
        registry: ModelRegistry,
        name: str,
        capabilities: Optional[ModelCapabilities] = None,
        **options: Any,
    ) -> ModelHandle:
        async def invoke(request: GenerateRequest) -> GenerateResponse:
            return await self.generate(name, request, **options)

        return registry.register(name, capabilities or self.default_capabilities, invoke)

    async def aclose(self) -> None:
        return None


def common_options(config: Mapping[str, Any]) -> Dict[str, Any]:
    """Pick the well-known generation options out of an opaque config bag."""
    picked: Dict[str, Any] = {}
    for key, camel in _COMMON_OPTIONS.items():
        if key in config and config[key] is not None:
            picked[key] = config[key]
        elif camel in config and config[camel] is not None:
            picked[key] = config[camel]
    return picked


def context_text(documents: List[Document]) -> Optional[str]:
    lines = []
    for i, doc in enumerate(documents):
        text = "".join(p.text for p in doc.content if isinstance(p, TextPart))
        if text:
            lines.append(f"- [{i}]: {text}")
    if not lines:
        return None
    return CONTEXT_PREFACE + "\n\n" + "\n".join(lines)


def fold_documents(request: GenerateRequest) -> List[Message]:
    """Return the request's messages with its documents appended to the last user turn.

    Backends with no separate slot for background material use this; media
    parts of documents travel with the text.
    """
    messages = [m.model_copy(deep=True) for m in request.messages]
    if not request.documents:
        return messages
    extra = []
    text = context_text(request.documents)
    if text:
        extra.append(text_part("\n\n" + text))
    for doc in request.documents:
        extra.extend(p for p in doc.content if not isinstance(p, TextPart))
    if not extra:
        return messages
    for m in reversed(messages):
        if m.role == Role.user:
            m.content.extend(extra)
            break
    else:
        messages.append(Message(role=Role.user, content=extra))
    return messages


def raise_for_status(backend: str, resp: httpx.Response) -> None:
    try:
        resp.raise_for_status()
    except httpx.HTTPStatusError as ex:
        detail = resp.text[:500]
        raise BackendError(f"{backend} HTTP error ({resp.status_code}): {detail}", backend=backend, status_code=resp.status_code) from ex
