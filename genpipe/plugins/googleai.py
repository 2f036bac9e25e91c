from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib import parse

import httpx

from ..errors import BackendError
from ..schemas.content import EncodedMedia, MediaPart, Message, Part, Role, TextPart
from ..schemas.generate import GenerateRequest, GenerateResponse, ModelCapabilities, Usage
from ..services.http import create_http_client
from .base import Backend, common_options, fold_documents, raise_for_status

logger = logging.getLogger(__name__)

GOOGLE_AI_BASE = "https://generativelanguage.googleapis.com/v1beta"

_CONFIG_MAP = {
    "temperature": "temperature",
    "top_k": "topK",
    "top_p": "topP",
    "max_output_tokens": "maxOutputTokens",
    "stop_sequences": "stopSequences",
}


class GoogleAIBackend(Backend):
    """Gemini models over the Google AI ``generateContent`` REST endpoint."""

    name = "googleai"
    default_capabilities = ModelCapabilities(multiturn=True, system_role=True, tools=True, media=True)

    def __init__(self, api_key: str, *, base_url: str = GOOGLE_AI_BASE, http: Optional[httpx.AsyncClient] = None) -> None:
        if not api_key:
            raise ValueError("googleai requires an API key (set GOOGLE_GENAI_API_KEY)")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._owns_http = http is None
        self.http = http or create_http_client()

    async def generate(self, model: str, request: GenerateRequest, **options: Any) -> GenerateResponse:
        payload = build_payload(request)
        url = f"{self.base_url}/models/{parse.quote(model)}:generateContent"
        headers = {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}

        logger.debug("googleai: generateContent model=%s", model)
        try:
            resp = await self.http.post(url, json=payload, headers=headers)
        except httpx.HTTPError as ex:
            raise BackendError(f"googleai request failed: {ex}", backend=self.name) from ex
        raise_for_status(self.name, resp)
        return parse_response(resp.json())

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()


def _to_part(part: Part) -> Dict[str, Any]:
    if isinstance(part, TextPart):
        return {"text": part.text}
    return {"inlineData": {"mimeType": part.media.mime_type, "data": part.media.data}}


def build_payload(request: GenerateRequest) -> Dict[str, Any]:
    contents: List[Dict[str, Any]] = []
    system_parts: List[Dict[str, Any]] = []
    for m in fold_documents(request):
        if m.role == Role.system:
            system_parts.extend(_to_part(p) for p in m.content)
            continue
        role = "model" if m.role == Role.model else "user"
        contents.append({"role": role, "parts": [_to_part(p) for p in m.content]})

    payload: Dict[str, Any] = {"contents": contents}
    if system_parts:
        payload["systemInstruction"] = {"parts": system_parts}
    generation_config = {_CONFIG_MAP[k]: v for k, v in common_options(request.config).items()}
    if generation_config:
        payload["generationConfig"] = generation_config
    return payload


def parse_response(data: Dict[str, Any]) -> GenerateResponse:
    candidates = data.get("candidates") or []
    if not candidates:
        block = (data.get("promptFeedback") or {}).get("blockReason")
        raise BackendError(f"googleai response has no candidates{f' ({block})' if block else ''}", backend="googleai")

    candidate = candidates[0]
    parts: List[Part] = []
    for raw in (candidate.get("content") or {}).get("parts") or []:
        if isinstance(raw.get("text"), str):
            parts.append(TextPart(text=raw["text"]))
        elif isinstance(raw.get("inlineData"), dict):
            inline = raw["inlineData"]
            parts.append(MediaPart(media=EncodedMedia(mime_type=inline.get("mimeType", "application/octet-stream"), data=inline.get("data", ""))))

    meta = data.get("usageMetadata") or {}
    usage = Usage(input_tokens=meta.get("promptTokenCount"), output_tokens=meta.get("candidatesTokenCount"))
    finish = candidate.get("finishReason")
    return GenerateResponse(
        message=Message(role=Role.model, content=parts),
        finish_reason=finish.lower() if isinstance(finish, str) else None,
        usage=usage,
        raw=data,
    )
