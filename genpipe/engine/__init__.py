from __future__ import annotations

from .assembler import build_request, check_capabilities
from .executor import FlowExecutor
from .extract import extract_media, extract_text

__all__ = ["FlowExecutor", "build_request", "check_capabilities", "extract_media", "extract_text"]
