from __future__ import annotations

from typing import List

from ..errors import NoTextContent
from ..schemas.content import EncodedMedia, MediaPart, TextPart
from ..schemas.generate import GenerateResponse


def extract_text(response: GenerateResponse) -> str:
    """Concatenate every text part of the reply, in order, with no separator.

    Raises NoTextContent when the reply has no text part at all, so that "no
    answer" is distinguishable from an empty answer.
    """
    texts = [p.text for p in response.message.content if isinstance(p, TextPart)]
    if not texts:
        raise NoTextContent()
    return "".join(texts)


def extract_media(response: GenerateResponse) -> List[EncodedMedia]:
    return [p.media for p in response.message.content if isinstance(p, MediaPart)]
