from __future__ import annotations

import base64
import binascii
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ...engine.assembler import build_request
from ...engine.extract import extract_text
from ...media.asset import MediaAsset
from ...schemas.content import Document, Message, Role, text_part
from ..base import FlowContext
from ..registry import FlowRegistry

FLOW_NAME = "describeImageFlow"

DEFAULT_QUESTION = "What do you think about this animated character?"
DEFAULT_BACKGROUND = "Glasses are often a sign of evil people"
DEFAULT_CONFIG = {"temperature": 2.0, "top_k": 50, "top_p": 0.5}


class DescribeImageInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    image_b64: str = Field(min_length=1, description="Image bytes, base64 encoded")
    filename: Optional[str] = Field(default=None, description="Name used for extension-based type detection")
    question: str = Field(default=DEFAULT_QUESTION)
    background: Optional[str] = Field(default=DEFAULT_BACKGROUND, description="Background document text; empty to omit")

    def load_asset(self) -> MediaAsset:
        try:
            data = base64.b64decode(self.image_b64, validate=True)
        except binascii.Error as ex:
            raise ValueError(f"image_b64 is not valid base64: {ex}") from ex
        return MediaAsset.from_bytes(data, path=self.filename)


def define_describe_image_flow(flows: FlowRegistry, model: str) -> None:
    async def describe_image(ctx: FlowContext, payload: DescribeImageInput) -> str:
        if ctx.models is None:
            raise RuntimeError(f"{FLOW_NAME}: no model registry on context")
        asset = payload.load_asset()
        await ctx.log(f"{FLOW_NAME}: loaded image", {"mime_type": asset.mime_type, "size": asset.size})

        handle = ctx.models.resolve(model)
        documents = [Document(content=[text_part(payload.background)])] if payload.background else []
        message = Message(role=Role.user, content=[text_part(payload.question), asset.to_part()])
        request = build_request(documents, [message], DEFAULT_CONFIG, capabilities=handle.capabilities, model=handle.name)

        await ctx.log(f"{FLOW_NAME}: sending [{model}]")
        response = await handle.generate(request, ctx=ctx)
        return extract_text(response)

    flows.define(
        FLOW_NAME,
        describe_image,
        input_type=DescribeImageInput,
        output_type=str,
        summary="Ask a multimodal model about an image",
    )
