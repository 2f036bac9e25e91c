from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .content import Document, MediaPart, Message, Role, text_part


# Option name -> value. Forwarded to backends untouched.
GenerationConfig = Dict[str, Any]


class ModelCapabilities(BaseModel):
    model_config = ConfigDict(frozen=True)

    multiturn: bool = Field(default=False, description="Accepts more than one conversational turn")
    system_role: bool = Field(default=False, description="Accepts messages with the system role")
    tools: bool = Field(default=False, description="Accepts tool definitions and tool calls")
    media: bool = Field(default=False, description="Accepts media parts")


class GenerateRequest(BaseModel):
    documents: List[Document] = Field(default_factory=list)
    messages: List[Message] = Field(default_factory=list)
    config: GenerationConfig = Field(default_factory=dict)

    def has_media(self) -> bool:
        for holder in [*self.documents, *self.messages]:
            if any(isinstance(p, MediaPart) for p in holder.content):
                return True
        return False


class Usage(BaseModel):
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None


class GenerateResponse(BaseModel):
    message: Message
    finish_reason: Optional[str] = None
    usage: Optional[Usage] = None
    # Raw backend payload, kept for debugging only
    raw: Optional[Dict[str, Any]] = Field(default=None, repr=False)

    @classmethod
    def from_text(cls, text: str, **kwargs: Any) -> "GenerateResponse":
        return cls(message=Message(role=Role.model, content=[text_part(text)]), **kwargs)
