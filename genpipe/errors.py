from __future__ import annotations

from typing import Optional


class PipelineError(Exception):
    """Base class for every error raised by the generation pipeline."""


class EmptyPayload(PipelineError, ValueError):
    def __init__(self, message: str = "cannot encode an empty media payload") -> None:
        super().__init__(message)


class EmptyContent(PipelineError, ValueError):
    def __init__(self, position: str) -> None:
        self.position = position
        super().__init__(f"{position} has no content parts")


class CapabilityViolation(PipelineError, ValueError):
    def __init__(self, model: Optional[str], capability: str, position: str) -> None:
        self.model = model
        self.capability = capability
        self.position = position
        target = f"model '{model}'" if model else "target model"
        super().__init__(f"{position}: {target} does not support {capability}")


class DuplicateModel(PipelineError, ValueError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Model already registered: {name}")


class DuplicateFlow(PipelineError, ValueError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Flow already defined: {name}")


class NotFound(PipelineError, LookupError):
    kind = "item"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown {self.kind}: {name}")


class ModelNotFound(NotFound):
    kind = "model"


class FlowNotFound(NotFound):
    kind = "flow"


class NoTextContent(PipelineError):
    def __init__(self, message: str = "response contains no text parts") -> None:
        super().__init__(message)


class BackendError(PipelineError, RuntimeError):
    """Opaque failure reported by a model backend."""

    def __init__(self, message: str, *, backend: Optional[str] = None, status_code: Optional[int] = None) -> None:
        self.backend = backend
        self.status_code = status_code
        super().__init__(message)


class FlowCancelled(PipelineError):
    """Raised when a flow observes that its context was cancelled.

    Not a failure: callers should not report it the way they report errors.
    """

    def __init__(self, reason: Optional[str] = None) -> None:
        self.reason = reason or "cancelled"
        super().__init__(self.reason)
