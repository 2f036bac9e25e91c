from __future__ import annotations

import asyncio
import contextlib
import inspect
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional, Union

from ..engine.assembler import check_capabilities
from ..errors import BackendError, DuplicateModel, FlowCancelled, ModelNotFound, PipelineError
from ..schemas.generate import GenerateRequest, GenerateResponse, ModelCapabilities

if TYPE_CHECKING:
    from ..flows.base import FlowContext


Invoke = Callable[[GenerateRequest], Union[GenerateResponse, Awaitable[GenerateResponse]]]


@dataclass(frozen=True)
class ModelHandle:
    name: str
    capabilities: ModelCapabilities
    invoke: Invoke = field(repr=False, compare=False)

    async def generate(self, request: GenerateRequest, *, ctx: Optional["FlowContext"] = None) -> GenerateResponse:
        """Send a request to the backend.

        With ``ctx`` the call is abandoned as soon as the context is cancelled,
        raising FlowCancelled instead of waiting for the backend.
        """
        check_capabilities(request, self.capabilities, model=self.name)
        if ctx is None:
            return await self._call(request)

        ctx.raise_if_cancelled()
        call = asyncio.ensure_future(self._call(request))
        waiter = asyncio.ensure_future(ctx.wait())
        try:
            done, _ = await asyncio.wait({call, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not call.done():
                call.cancel()
        if call in done:
            return call.result()
        with contextlib.suppress(asyncio.CancelledError, PipelineError):
            await call
        raise FlowCancelled(ctx.reason)

    async def _call(self, request: GenerateRequest) -> GenerateResponse:
        try:
            response = self.invoke(request)
            if inspect.isawaitable(response):
                response = await response
        except PipelineError:
            raise
        except Exception as ex:
            raise BackendError(f"{self.name}: {ex}", backend=self.name) from ex
        if not isinstance(response, GenerateResponse):
            raise BackendError(f"{self.name}: backend returned {type(response).__name__}, expected GenerateResponse", backend=self.name)
        return response


class ModelRegistry:
    """Name -> ModelHandle map. Register everything before serving requests."""

    def __init__(self) -> None:
        self._models: Dict[str, ModelHandle] = {}

    def register(self, name: str, capabilities: Optional[ModelCapabilities], invoke: Invoke) -> ModelHandle:
        if not name:
            raise ValueError("model name must be non-empty")
        if name in self._models:
            raise DuplicateModel(name)
        handle = ModelHandle(name=name, capabilities=capabilities or ModelCapabilities(), invoke=invoke)
        self._models[name] = handle
        return handle

    def resolve(self, name: str) -> ModelHandle:
        handle = self._models.get(name)
        if handle is None:
            raise ModelNotFound(name)
        return handle

    def names(self) -> List[str]:
        return sorted(self._models.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._models

    def __len__(self) -> int:
        return len(self._models)

    def list_model_specs(self) -> List[Dict[str, Any]]:
        return [
            {"name": name, "capabilities": handle.capabilities.model_dump()}
            for name, handle in sorted(self._models.items(), key=lambda kv: kv[0])
        ]
