from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional, Union

import httpx
from jinja2 import Environment, StrictUndefined
from pydantic import TypeAdapter

from ..errors import FlowCancelled
from ..schemas.generate import GenerateRequest, GenerateResponse

if TYPE_CHECKING:
    from ..models.registry import ModelRegistry


RunLogger = Callable[..., Awaitable[None]]


@dataclass(eq=False)
class FlowContext:
    """Per-invocation context handed to flow handlers.

    Doubles as a cooperative cancellation token: ``cancel`` only flags the
    context, handlers notice it at their own suspension points (most often a
    backend call made through ``generate``).
    """

    models: Optional["ModelRegistry"] = None
    http: Optional[httpx.AsyncClient] = None
    logger: Optional[RunLogger] = None
    _event: asyncio.Event = field(default_factory=asyncio.Event, init=False, repr=False)
    _reason: Optional[str] = field(default=None, init=False, repr=False)
    _children: List["FlowContext"] = field(default_factory=list, init=False, repr=False)

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> None:
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()
        for child in self._children:
            child.cancel(reason)

    async def wait(self) -> None:
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise FlowCancelled(self._reason)

    def child(self, **overrides: Any) -> "FlowContext":
        """Derive a context that is cancelled whenever this one is."""
        values = {"models": self.models, "http": self.http, "logger": self.logger}
        values.update(overrides)
        sub = FlowContext(**values)
        self._children.append(sub)
        if self._event.is_set():
            sub.cancel(self._reason or "cancelled")
        return sub

    def detach(self, sub: "FlowContext") -> None:
        """Stop propagating cancellation to a context made by ``child``."""
        if sub in self._children:
            self._children.remove(sub)

    @property
    def children(self) -> List["FlowContext"]:
        return list(self._children)

    async def log(self, message: str, data: Dict[str, Any] | None = None, level: str = "info") -> None:
        if self.logger is not None:
            await self.logger(message, data, level=level)

    async def generate(self, model: str, request: GenerateRequest) -> GenerateResponse:
        if self.models is None:
            raise RuntimeError("FlowContext has no model registry")
        handle = self.models.resolve(model)
        return await handle.generate(request, ctx=self)


FlowHandler = Callable[[FlowContext, Any], Union[Any, Awaitable[Any]]]


@dataclass(frozen=True)
class Flow:
    name: str
    handler: FlowHandler = field(repr=False)
    input_type: Any = None
    output_type: Any = None
    summary: str = ""

    def validate_input(self, value: Any) -> Any:
        if self.input_type is None:
            return value
        return TypeAdapter(self.input_type).validate_python(value)

    def validate_output(self, value: Any) -> Any:
        if self.output_type is None:
            return value
        return TypeAdapter(self.output_type).validate_python(value)

    def input_schema(self) -> Optional[Dict[str, Any]]:
        if self.input_type is None:
            return None
        return TypeAdapter(self.input_type).json_schema()

    def output_schema(self) -> Optional[Dict[str, Any]]:
        if self.output_type is None:
            return None
        return TypeAdapter(self.output_type).json_schema()


def render_prompt(template: str, *, strict: bool = True, **values: Any) -> str:
    """Render a Jinja2 prompt template.

    With ``strict`` a missing variable raises ``jinja2.UndefinedError``;
    otherwise it renders as an empty string.
    """
    if not isinstance(template, str):
        return str(template)
    env = Environment(undefined=StrictUndefined, autoescape=False) if strict else Environment(autoescape=False)
    return env.from_string(template).render(**values)
