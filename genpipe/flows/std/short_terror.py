from __future__ import annotations

from ...engine.assembler import build_request
from ...engine.extract import extract_text
from ...schemas.content import user_text_message
from ..base import FlowContext, render_prompt
from ..registry import FlowRegistry

FLOW_NAME = "shortTerrorFlow"
PROMPT = "Write a small terror-based paragraph themed on {{ input }}"


def define_short_terror_flow(flows: FlowRegistry, model: str) -> None:
    async def short_terror(ctx: FlowContext, theme: str) -> str:
        if ctx.models is None:
            raise RuntimeError(f"{FLOW_NAME}: no model registry on context")
        handle = ctx.models.resolve(model)
        request = build_request(
            [],
            [user_text_message(render_prompt(PROMPT, input=theme))],
            {"temperature": 1},
            capabilities=handle.capabilities,
            model=handle.name,
        )
        await ctx.log(f"{FLOW_NAME}: sending [{model}]", {"theme": theme})
        response = await handle.generate(request, ctx=ctx)
        return extract_text(response)

    flows.define(
        FLOW_NAME,
        short_terror,
        input_type=str,
        output_type=str,
        summary="Write a short horror paragraph on a theme",
    )
