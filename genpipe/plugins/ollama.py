from __future__ import annotations

import logging
from typing import Any, Dict, List, Literal, Optional

import httpx

from ..errors import BackendError
from ..models.registry import ModelHandle, ModelRegistry
from ..schemas.content import MediaPart, Message, Role, TextPart
from ..schemas.generate import GenerateRequest, GenerateResponse, ModelCapabilities, Usage
from ..services.http import create_http_client
from .base import Backend, common_options, fold_documents, raise_for_status

logger = logging.getLogger(__name__)

ModelType = Literal["generate", "chat"]

_ROLE_MAP = {
    Role.user: "user",
    Role.system: "system",
    Role.model: "assistant",
    Role.tool: "tool",
}

_OPTION_MAP = {
    "temperature": "temperature",
    "top_k": "top_k",
    "top_p": "top_p",
    "max_output_tokens": "num_predict",
    "stop_sequences": "stop",
}


class OllamaBackend(Backend):
    """Local Ollama server.

    ``generate`` models post one flattened prompt to /api/generate; ``chat``
    models post the message list to /api/chat. Images go as raw base64.
    """

    name = "ollama"
    default_capabilities = ModelCapabilities(multiturn=False, system_role=True, tools=False, media=True)

    def __init__(self, server_address: str = "http://127.0.0.1:11434", *, http: Optional[httpx.AsyncClient] = None) -> None:
        self.server_address = server_address.rstrip("/")
        self._owns_http = http is None
        self.http = http or create_http_client()

    def define_model(
        self,
        registry: ModelRegistry,
        name: str,
        capabilities: Optional[ModelCapabilities] = None,
        *,
        type: ModelType = "generate",
        **options: Any,
    ) -> ModelHandle:
        if type not in ("generate", "chat"):
            raise ValueError(f"Unknown Ollama model type: {type}")
        return super().define_model(registry, name, capabilities, type=type, **options)

    async def generate(self, model: str, request: GenerateRequest, *, type: ModelType = "generate", **options: Any) -> GenerateResponse:
        messages = fold_documents(request)
        if type == "chat":
            path = "/api/chat"
            payload: Dict[str, Any] = {"model": model, "messages": [_chat_message(m) for m in messages], "stream": False}
        else:
            path = "/api/generate"
            payload = _generate_payload(model, messages)
        ollama_options = {_OPTION_MAP[k]: v for k, v in common_options(request.config).items()}
        if ollama_options:
            payload["options"] = ollama_options

        logger.debug("ollama: POST %s model=%s", path, model)
        try:
            resp = await self.http.post(f"{self.server_address}{path}", json=payload)
        except httpx.HTTPError as ex:
            raise BackendError(f"ollama request failed: {ex}", backend=self.name) from ex
        raise_for_status(self.name, resp)
        data = resp.json()

        if type == "chat":
            text = (data.get("message") or {}).get("content")
        else:
            text = data.get("response")
        if not isinstance(text, str):
            raise BackendError("ollama response has no content", backend=self.name)

        usage = Usage(input_tokens=data.get("prompt_eval_count"), output_tokens=data.get("eval_count"))
        return GenerateResponse.from_text(text, finish_reason=data.get("done_reason"), usage=usage, raw=data)

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()


def _images(message: Message) -> List[str]:
    return [p.media.data for p in message.content if isinstance(p, MediaPart)]


def _chat_message(message: Message) -> Dict[str, Any]:
    out: Dict[str, Any] = {"role": _ROLE_MAP[message.role], "content": message.text()}
    images = _images(message)
    if images:
        out["images"] = images
    return out


def _generate_payload(model: str, messages: List[Message]) -> Dict[str, Any]:
    system = "\n".join(m.text() for m in messages if m.role == Role.system)
    prompt = "\n".join(
        "".join(p.text for p in m.content if isinstance(p, TextPart))
        for m in messages
        if m.role != Role.system
    )
    images = [img for m in messages for img in _images(m)]
    payload: Dict[str, Any] = {"model": model, "prompt": prompt, "stream": False}
    if system:
        payload["system"] = system
    if images:
        payload["images"] = images
    return payload
