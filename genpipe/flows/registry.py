from __future__ import annotations

from typing import Any, Callable, Dict, List

from ..errors import DuplicateFlow, FlowNotFound
from .base import Flow, FlowHandler


class FlowRegistry:
    """Name -> Flow map, filled once at startup and read-only afterwards."""

    def __init__(self) -> None:
        self._flows: Dict[str, Flow] = {}

    def define(
        self,
        name: str,
        handler: FlowHandler,
        *,
        input_type: Any = None,
        output_type: Any = None,
        summary: str = "",
    ) -> Flow:
        if not name:
            raise ValueError("flow name must be non-empty")
        if name in self._flows:
            raise DuplicateFlow(name)
        flow = Flow(name=name, handler=handler, input_type=input_type, output_type=output_type, summary=summary)
        self._flows[name] = flow
        return flow

    def flow(self, name: str, **options: Any) -> Callable[[FlowHandler], FlowHandler]:
        def decorator(fn: FlowHandler) -> FlowHandler:
            self.define(name, fn, **options)
            return fn
        return decorator

    def get(self, name: str) -> Flow:
        flow = self._flows.get(name)
        if flow is None:
            raise FlowNotFound(name)
        return flow

    def names(self) -> List[str]:
        return sorted(self._flows.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._flows

    def __len__(self) -> int:
        return len(self._flows)

    def list_flow_specs(self) -> List[Dict[str, Any]]:
        specs: List[Dict[str, Any]] = []
        for name, flow in sorted(self._flows.items(), key=lambda kv: kv[0]):
            specs.append({
                "name": name,
                "summary": flow.summary,
                "input_schema": flow.input_schema(),
                "output_schema": flow.output_schema(),
            })
        return specs
