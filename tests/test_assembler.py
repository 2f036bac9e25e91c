from __future__ import annotations

import pytest

from genpipe.engine.assembler import build_request, check_capabilities
from genpipe.errors import CapabilityViolation, EmptyContent
from genpipe.media import encode
from genpipe.schemas import (
    Document,
    Message,
    ModelCapabilities,
    Role,
    media_part,
    system_text_message,
    text_document,
    text_part,
    user_text_message,
)

IMAGE = encode(b"\x89PNG\r\n\x1a\n....", "image/png")


def _multimodal_message() -> Message:
    return Message(role=Role.user, content=[text_part("What is this?"), media_part(IMAGE)])


def test_build_keeps_order_and_config():
    req = build_request(
        [text_document("background")],
        [_multimodal_message()],
        {"temperature": 2.0, "top_k": 50, "top_p": 0.5},
    )
    assert [p.kind for p in req.messages[0].content] == ["text", "media"]
    assert req.documents[0].content[0].text == "background"
    assert req.config == {"temperature": 2.0, "top_k": 50, "top_p": 0.5}


def test_build_is_idempotent():
    docs = [text_document("bg")]
    msgs = [_multimodal_message()]
    config = {"temperature": 1, "nested": {"a": [1, 2]}}
    first = build_request(docs, msgs, config)
    second = build_request(docs, msgs, config)
    assert first == second
    assert first.model_dump() == second.model_dump()


def test_build_does_not_alias_inputs():
    msgs = [user_text_message("hi")]
    config = {"stop_sequences": ["x"]}
    req = build_request([], msgs, config)
    msgs[0].content.append(text_part("later"))
    config["stop_sequences"].append("y")
    assert len(req.messages[0].content) == 1
    assert req.config == {"stop_sequences": ["x"]}


def test_empty_message_rejected():
    with pytest.raises(EmptyContent) as exc:
        build_request([], [user_text_message("ok"), Message(role=Role.user, content=[])])
    assert exc.value.position == "messages[1]"


def test_empty_document_rejected():
    with pytest.raises(EmptyContent) as exc:
        build_request([Document(content=[])], [user_text_message("ok")])
    assert exc.value.position == "documents[0]"


def test_media_rejected_for_text_only_model():
    caps = ModelCapabilities(media=False, system_role=True)
    with pytest.raises(CapabilityViolation) as exc:
        build_request([], [_multimodal_message()], capabilities=caps, model="gemini-text")
    assert exc.value.position == "messages[0].content[1]"
    assert exc.value.capability == "media"
    assert "gemini-text" in str(exc.value)


def test_media_in_document_rejected_for_text_only_model():
    caps = ModelCapabilities(media=False)
    doc = Document(content=[text_part("see"), media_part(IMAGE)])
    with pytest.raises(CapabilityViolation) as exc:
        build_request([doc], [user_text_message("hi")], capabilities=caps)
    assert exc.value.position == "documents[0].content[1]"


def test_media_accepted_for_media_model():
    caps = ModelCapabilities(media=True)
    req = build_request([], [_multimodal_message()], capabilities=caps)
    assert req.has_media()


def test_system_role_capability():
    msgs = [system_text_message("be terse"), user_text_message("hi")]
    with pytest.raises(CapabilityViolation) as exc:
        build_request([], msgs, capabilities=ModelCapabilities(system_role=False))
    assert exc.value.position == "messages[0]"
    build_request([], msgs, capabilities=ModelCapabilities(system_role=True))


def test_multiturn_capability():
    msgs = [
        user_text_message("hi"),
        Message(role=Role.model, content=[text_part("hello")]),
        user_text_message("again"),
    ]
    with pytest.raises(CapabilityViolation) as exc:
        build_request([], msgs, capabilities=ModelCapabilities(multiturn=False))
    assert exc.value.position == "messages[1]"
    build_request([], msgs, capabilities=ModelCapabilities(multiturn=True))


def test_tool_messages_need_tools():
    msgs = [Message(role=Role.tool, content=[text_part("{}")])]
    with pytest.raises(CapabilityViolation):
        build_request([], msgs, capabilities=ModelCapabilities(tools=False))
    check_capabilities(build_request([], msgs), ModelCapabilities(tools=True))


def test_no_capabilities_skips_checks():
    req = build_request([], [system_text_message("s"), _multimodal_message()])
    assert len(req.messages) == 2
