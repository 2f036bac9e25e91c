from __future__ import annotations

import pytest

from genpipe.engine.extract import extract_media, extract_text
from genpipe.errors import NoTextContent
from genpipe.media import encode
from genpipe.schemas import GenerateResponse, Message, Role, media_part, text_part

IMAGE = encode(b"GIF89a", "image/gif")


def _response(*parts) -> GenerateResponse:
    return GenerateResponse(message=Message(role=Role.model, content=list(parts)))


def test_text_parts_concatenated_in_order():
    resp = _response(text_part("a"), media_part(IMAGE), text_part("b"))
    assert extract_text(resp) == "ab"


def test_media_only_response_has_no_text():
    with pytest.raises(NoTextContent):
        extract_text(_response(media_part(IMAGE)))


def test_empty_response_has_no_text():
    with pytest.raises(NoTextContent):
        extract_text(_response())


def test_empty_text_is_an_answer():
    assert extract_text(_response(text_part(""))) == ""


def test_extract_media():
    resp = _response(text_part("a"), media_part(IMAGE))
    assert extract_media(resp) == [IMAGE]
    assert extract_media(_response(text_part("a"))) == []
