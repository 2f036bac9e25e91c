from __future__ import annotations

from .base import Flow, FlowContext, FlowHandler, render_prompt
from .registry import FlowRegistry

__all__ = ["Flow", "FlowContext", "FlowHandler", "FlowRegistry", "render_prompt"]
