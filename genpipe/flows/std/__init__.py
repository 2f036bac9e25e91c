from __future__ import annotations

from ..registry import FlowRegistry
from .describe_image import DescribeImageInput, define_describe_image_flow
from .short_terror import define_short_terror_flow


def register_std_flows(flows: FlowRegistry, model: str) -> None:
    define_short_terror_flow(flows, model)
    define_describe_image_flow(flows, model)


__all__ = ["DescribeImageInput", "define_describe_image_flow", "define_short_terror_flow", "register_std_flows"]
