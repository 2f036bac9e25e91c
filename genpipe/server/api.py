from __future__ import annotations

import asyncio
import contextlib
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from ..errors import FlowNotFound
from ..flows.base import FlowContext
from ..pipeline import Pipeline
from ..schemas.run import RunFlowRequest

router = APIRouter()

# Non-standard "client closed request" status, used when a run is cancelled
STATUS_CANCELLED = 499


def _pipeline(request: Request) -> Pipeline:
    return request.app.state.pipeline


async def _cancel_on_disconnect(request: Request, ctx: FlowContext, poll_secs: float = 0.1) -> None:
    while not ctx.cancelled:
        if await request.is_disconnected():
            ctx.cancel("client disconnected")
            return
        await asyncio.sleep(poll_secs)


@router.get("/flows")
async def list_flows(request: Request) -> Dict[str, Any]:
    return {"flows": _pipeline(request).flows.names()}


@router.get("/flow-specs")
async def list_flow_specs(request: Request) -> Dict[str, Any]:
    return {"flows": _pipeline(request).flows.list_flow_specs()}


@router.get("/models")
async def list_models(request: Request) -> Dict[str, Any]:
    return {"models": _pipeline(request).models.list_model_specs()}


@router.post("/flows/{name}")
async def run_flow(name: str, body: RunFlowRequest, request: Request) -> JSONResponse:
    pipeline = _pipeline(request)
    if name not in pipeline.flows:
        raise HTTPException(status_code=404, detail=str(FlowNotFound(name)))

    ctx = pipeline.context()
    watcher = asyncio.create_task(_cancel_on_disconnect(request, ctx))
    try:
        run = await pipeline.execute(name, body.input, ctx)
    finally:
        watcher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await watcher

    status_code = STATUS_CANCELLED if run.status == "cancelled" else 200
    return JSONResponse(status_code=status_code, content=run.model_dump(mode="json"))
