from __future__ import annotations

import asyncio

import pytest

from genpipe.errors import BackendError, CapabilityViolation, DuplicateModel, FlowCancelled, ModelNotFound, NotFound
from genpipe.flows.base import FlowContext
from genpipe.media import encode
from genpipe.models.registry import ModelRegistry
from genpipe.schemas import GenerateRequest, GenerateResponse, Message, ModelCapabilities, Role, media_part, text_part, user_text_message


def _ok(request: GenerateRequest) -> GenerateResponse:
    return GenerateResponse.from_text("ok")


def test_register_and_resolve():
    reg = ModelRegistry()
    caps = ModelCapabilities(media=True, system_role=True)
    handle = reg.register("llava", caps, _ok)
    assert reg.resolve("llava") is handle
    assert handle.capabilities.media is True
    assert "llava" in reg
    assert reg.names() == ["llava"]
    assert reg.list_model_specs() == [{"name": "llava", "capabilities": caps.model_dump()}]


def test_resolve_unknown():
    reg = ModelRegistry()
    with pytest.raises(NotFound):
        reg.resolve("nonexistent")
    with pytest.raises(ModelNotFound):
        reg.resolve("nonexistent")


def test_duplicate_registration_is_an_error():
    reg = ModelRegistry()
    first = reg.register("m", None, _ok)
    with pytest.raises(DuplicateModel):
        reg.register("m", ModelCapabilities(media=True), _ok)
    assert reg.resolve("m") is first
    assert first.capabilities == ModelCapabilities()


@pytest.mark.asyncio
async def test_generate_accepts_sync_and_async_invoke():
    reg = ModelRegistry()

    async def async_invoke(request):
        return GenerateResponse.from_text("async")

    sync_handle = reg.register("sync", None, _ok)
    async_handle = reg.register("async", None, async_invoke)
    req = GenerateRequest(messages=[user_text_message("hi")])
    assert (await sync_handle.generate(req)).message.text() == "ok"
    assert (await async_handle.generate(req)).message.text() == "async"


@pytest.mark.asyncio
async def test_generate_wraps_backend_failures():
    reg = ModelRegistry()

    async def broken(request):
        raise ConnectionError("connection refused")

    handle = reg.register("broken", None, broken)
    with pytest.raises(BackendError) as exc:
        await handle.generate(GenerateRequest(messages=[user_text_message("hi")]))
    assert exc.value.backend == "broken"
    assert isinstance(exc.value.__cause__, ConnectionError)


@pytest.mark.asyncio
async def test_generate_rejects_wrong_return_type():
    reg = ModelRegistry()
    handle = reg.register("weird", None, lambda request: "just a string")
    with pytest.raises(BackendError):
        await handle.generate(GenerateRequest(messages=[user_text_message("hi")]))


@pytest.mark.asyncio
async def test_generate_checks_capabilities():
    calls = []
    reg = ModelRegistry()
    handle = reg.register("text-only", ModelCapabilities(media=False), lambda r: calls.append(r) or _ok(r))
    req = GenerateRequest(messages=[Message(role=Role.user, content=[text_part("hi"), media_part(encode(b"x", "image/png"))])])
    with pytest.raises(CapabilityViolation):
        await handle.generate(req)
    assert calls == []


@pytest.mark.asyncio
async def test_generate_stops_waiting_when_context_cancelled():
    started = asyncio.Event()
    backend_cancelled = asyncio.Event()

    async def slow(request):
        started.set()
        try:
            await asyncio.sleep(30)
        except asyncio.CancelledError:
            backend_cancelled.set()
            raise
        return GenerateResponse.from_text("too late")

    reg = ModelRegistry()
    handle = reg.register("slow", None, slow)
    ctx = FlowContext(models=reg)

    task = asyncio.create_task(handle.generate(GenerateRequest(messages=[user_text_message("hi")]), ctx=ctx))
    await started.wait()
    ctx.cancel("shutdown")

    with pytest.raises(FlowCancelled) as exc:
        await asyncio.wait_for(task, timeout=2)
    assert exc.value.reason == "shutdown"
    assert backend_cancelled.is_set()


@pytest.mark.asyncio
async def test_generate_with_already_cancelled_context_never_calls_backend():
    calls = []
    reg = ModelRegistry()
    handle = reg.register("m", None, lambda r: calls.append(r) or _ok(r))
    ctx = FlowContext()
    ctx.cancel()
    with pytest.raises(FlowCancelled):
        await handle.generate(GenerateRequest(messages=[user_text_message("hi")]), ctx=ctx)
    assert calls == []
