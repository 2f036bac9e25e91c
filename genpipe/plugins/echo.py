from __future__ import annotations

from collections import deque
from typing import Any, Deque, Optional

from ..schemas.content import Role
from ..schemas.generate import GenerateRequest, GenerateResponse, ModelCapabilities
from .base import Backend


class EchoBackend(Backend):
    """Deterministic stand-in model for tests and offline runs.

    Replies with ``reply`` when given, otherwise echoes the text of the last
    user message. The last ``history`` requests are kept in ``requests``.
    """

    name = "echo"
    default_capabilities = ModelCapabilities(multiturn=True, system_role=True, tools=False, media=True)

    def __init__(self, reply: Optional[str] = None, *, history: int = 100) -> None:
        self.reply = reply
        self.requests: Deque[GenerateRequest] = deque(maxlen=history)

    async def generate(self, model: str, request: GenerateRequest, **options: Any) -> GenerateResponse:
        self.requests.append(request)
        if self.reply is not None:
            text = self.reply
        else:
            users = [m for m in request.messages if m.role == Role.user]
            text = users[-1].text() if users else ""
        return GenerateResponse.from_text(text, finish_reason="stop")
