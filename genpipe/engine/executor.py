from __future__ import annotations

import asyncio
import inspect
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel

from ..errors import FlowCancelled
from ..flows.base import Flow, FlowContext
from ..flows.registry import FlowRegistry
from ..schemas.run import FlowRun
from .logging import make_run_logger


class FlowExecutor:
    """Runs registered flows: pending -> running -> completed | failed | cancelled.

    Holds no locks and never retries; concurrent runs share nothing but the
    registries.
    """

    def __init__(self, flows: FlowRegistry) -> None:
        self.flows = flows

    async def execute(self, name: str, ctx: Optional[FlowContext] = None, input: Any = None) -> FlowRun:
        flow = self.flows.get(name)
        parent = ctx if ctx is not None else FlowContext()

        run = FlowRun(flow=name, input=_jsonable(input))
        run_ctx = parent.child(logger=make_run_logger(run, forward=parent.logger))
        try:
            await self._drive(flow, run, run_ctx, input)
        finally:
            parent.detach(run_ctx)
        return run

    async def _drive(self, flow: Flow, run: FlowRun, run_ctx: FlowContext, input: Any) -> None:
        name = flow.name
        _mark_running(run)
        await run_ctx.log(f"Starting flow {name}")
        try:
            value = flow.validate_input(input)
            result = flow.handler(run_ctx, value)
            if inspect.isawaitable(result):
                result = await result
            output = flow.validate_output(result)
        except FlowCancelled as ex:
            _mark_cancelled(run, ex.reason)
            await run_ctx.log(f"Flow {name} cancelled: {ex.reason}")
        except asyncio.CancelledError:
            _mark_cancelled(run, "task cancelled")
            raise
        except Exception as ex:
            _mark_failed(run, ex)
            await run_ctx.log(f"Flow {name} failed: {ex}", {"error": str(ex), "type": type(ex).__name__}, level="warning")
        else:
            _mark_completed(run, output)
            await run_ctx.log(f"Finished flow {name}")

    async def run(self, name: str, ctx: Optional[FlowContext] = None, input: Any = None) -> Any:
        """Execute a flow and return its output, raising whatever stopped it."""
        run = await self.execute(name, ctx, input)
        if run.status == "completed":
            return run.result
        if run.status == "cancelled":
            raise FlowCancelled(run.reason)
        raise run.exception  # type: ignore[misc]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _mark_running(run: FlowRun) -> None:
    run.status = "running"
    run.started_at = _now()


def _mark_completed(run: FlowRun, output: Any) -> None:
    run.status = "completed"
    run._result = output
    run.output = _jsonable(output)
    run.finished_at = _now()


def _mark_failed(run: FlowRun, ex: Exception) -> None:
    run.status = "failed"
    run._exception = ex
    run.error = str(ex)
    run.error_type = type(ex).__name__
    run.finished_at = _now()


def _mark_cancelled(run: FlowRun, reason: Optional[str]) -> None:
    run.status = "cancelled"
    run.reason = reason or "cancelled"
    run.finished_at = _now()


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return value
