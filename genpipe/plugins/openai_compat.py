from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

import httpx
import openai
from openai import AsyncOpenAI

from ..errors import BackendError
from ..schemas.content import Message, Role, TextPart
from ..schemas.generate import GenerateRequest, GenerateResponse, ModelCapabilities, Usage
from .base import Backend, common_options, fold_documents

logger = logging.getLogger(__name__)

_ROLE_MAP = {
    Role.user: "user",
    Role.system: "system",
    Role.model: "assistant",
    # Tool results without a tool_call_id are only accepted as user content
    Role.tool: "user",
}


class OpenAIBackend(Backend):
    """OpenAI chat completions, or any server that speaks the same API."""

    name = "openai"
    default_capabilities = ModelCapabilities(multiturn=True, system_role=True, tools=True, media=True)

    def __init__(self, api_key: Optional[str] = None, *, base_url: Optional[str] = None, http: Optional[httpx.AsyncClient] = None) -> None:
        self.client = AsyncOpenAI(api_key=api_key or "unused", base_url=base_url, http_client=http)

    async def generate(self, model: str, request: GenerateRequest, **options: Any) -> GenerateResponse:
        params: Dict[str, Any] = {}
        opts = common_options(request.config)
        if "temperature" in opts:
            params["temperature"] = opts["temperature"]
        if "top_p" in opts:
            params["top_p"] = opts["top_p"]
        if "max_output_tokens" in opts:
            params["max_tokens"] = opts["max_output_tokens"]
        if "stop_sequences" in opts:
            params["stop"] = opts["stop_sequences"]

        logger.debug("openai: chat.completions model=%s", model)
        try:
            completion = await self.client.chat.completions.create(
                model=model,
                messages=[to_openai_message(m) for m in fold_documents(request)],
                **params,
            )
        except openai.APIStatusError as ex:
            raise BackendError(f"openai HTTP error ({ex.status_code}): {ex.message}", backend=self.name, status_code=ex.status_code) from ex
        except openai.APIError as ex:
            raise BackendError(f"openai request failed: {ex}", backend=self.name) from ex

        if not completion.choices:
            raise BackendError("openai response has no choices", backend=self.name)
        choice = completion.choices[0]
        usage = None
        if completion.usage is not None:
            usage = Usage(input_tokens=completion.usage.prompt_tokens, output_tokens=completion.usage.completion_tokens)
        return GenerateResponse.from_text(choice.message.content or "", finish_reason=choice.finish_reason, usage=usage)

    async def aclose(self) -> None:
        await self.client.close()


def to_openai_message(message: Message) -> Dict[str, Any]:
    content: Union[str, List[Dict[str, Any]]]
    if all(isinstance(p, TextPart) for p in message.content):
        content = message.text()
    else:
        content = []
        for p in message.content:
            if isinstance(p, TextPart):
                content.append({"type": "text", "text": p.text})
            else:
                content.append({"type": "image_url", "image_url": {"url": p.media.url}})
    return {"role": _ROLE_MAP[message.role], "content": content}
