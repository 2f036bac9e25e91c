from __future__ import annotations

from .registry import Invoke, ModelHandle, ModelRegistry

__all__ = ["Invoke", "ModelHandle", "ModelRegistry"]
