from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx

from .engine.executor import FlowExecutor
from .flows.base import FlowContext
from .flows.registry import FlowRegistry
from .flows.std import register_std_flows
from .models.registry import ModelRegistry
from .plugins.base import Backend
from .plugins.echo import EchoBackend
from .plugins.googleai import GoogleAIBackend
from .plugins.ollama import OllamaBackend
from .plugins.openai_compat import OpenAIBackend
from .schemas.run import FlowRun
from .server.settings import Settings
from .services.http import create_http_client

logger = logging.getLogger(__name__)


class Pipeline:
    """Registries, executor and backends of one process.

    Populate ``models`` and ``flows`` before the first ``run``; after that both
    are only read.
    """

    def __init__(self, *, http: Optional[httpx.AsyncClient] = None) -> None:
        self.models = ModelRegistry()
        self.flows = FlowRegistry()
        self.executor = FlowExecutor(self.flows)
        self.http = http
        self.backends: List[Backend] = []

    def add_backend(self, backend: Backend) -> Backend:
        self.backends.append(backend)
        return backend

    def context(self, **overrides: Any) -> FlowContext:
        values = {"models": self.models, "http": self.http}
        values.update(overrides)
        return FlowContext(**values)

    async def execute(self, name: str, input: Any = None, ctx: Optional[FlowContext] = None) -> FlowRun:
        return await self.executor.execute(name, ctx or self.context(), input)

    async def run(self, name: str, input: Any = None, ctx: Optional[FlowContext] = None) -> Any:
        return await self.executor.run(name, ctx or self.context(), input)

    async def aclose(self) -> None:
        for backend in self.backends:
            await backend.aclose()
        if self.http is not None:
            await self.http.aclose()

    @classmethod
    def from_settings(cls, settings: Settings) -> "Pipeline":
        http = create_http_client(settings.HTTP_TIMEOUT_SECS)
        pipeline = cls(http=http)
        backend = pipeline.add_backend(create_backend(settings, http))

        caps = backend.default_capabilities
        overrides = {}
        if settings.GENPIPE_MODEL_MEDIA is not None:
            overrides["media"] = settings.GENPIPE_MODEL_MEDIA
        if settings.GENPIPE_MODEL_MULTITURN is not None:
            overrides["multiturn"] = settings.GENPIPE_MODEL_MULTITURN
        if overrides:
            caps = caps.model_copy(update=overrides)

        if isinstance(backend, OllamaBackend):
            backend.define_model(pipeline.models, settings.GENPIPE_MODEL, caps, type=settings.OLLAMA_MODEL_TYPE)
        else:
            backend.define_model(pipeline.models, settings.GENPIPE_MODEL, caps)
        register_std_flows(pipeline.flows, settings.GENPIPE_MODEL)

        logger.info(
            "pipeline ready: backend=%s model=%s flows=%s",
            backend.name, settings.GENPIPE_MODEL, ",".join(pipeline.flows.names()),
        )
        return pipeline


def create_backend(settings: Settings, http: Optional[httpx.AsyncClient] = None) -> Backend:
    kind = settings.GENPIPE_BACKEND
    if kind == "echo":
        return EchoBackend()
    if kind == "ollama":
        return OllamaBackend(settings.OLLAMA_SERVER_ADDRESS, http=http)
    if kind == "googleai":
        return GoogleAIBackend(settings.GOOGLE_GENAI_API_KEY or "", http=http)
    if kind == "openai":
        if not settings.OPENAI_API_KEY and not settings.OPENAI_BASE_URL:
            raise ValueError("openai backend requires OPENAI_API_KEY or OPENAI_BASE_URL")
        return OpenAIBackend(settings.OPENAI_API_KEY, base_url=settings.OPENAI_BASE_URL)
    raise ValueError(f"Unknown backend: {kind}")

