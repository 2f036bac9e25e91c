"""Content-type detection for media payloads.

The leading bytes are authoritative; the filename extension is only consulted
when no known signature matches. Classification never fails: unknown content
falls back to ``DEFAULT_MIME_TYPE`` (or the caller's ``default``).
"""

from __future__ import annotations

import posixpath
from typing import Optional, Tuple

DEFAULT_MIME_TYPE = "image/png"

EXTENSION_TO_MIME = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".bmp": "image/bmp",
    ".svg": "image/svg+xml",
}

# (offset, magic) pairs; every pair must match
_SIGNATURES: Tuple[Tuple[Tuple[Tuple[int, bytes], ...], str], ...] = (
    (((0, b"\xff\xd8\xff"),), "image/jpeg"),
    (((0, b"\x89PNG\r\n\x1a\n"),), "image/png"),
    (((0, b"GIF87a"),), "image/gif"),
    (((0, b"GIF89a"),), "image/gif"),
    (((0, b"RIFF"), (8, b"WEBPVP")), "image/webp"),
    (((0, b"BM"),), "image/bmp"),
)


def sniff(data: bytes) -> Optional[str]:
    """Return the MIME type for a known binary signature, else None."""
    head = bytes(data[:16])
    for checks, mime in _SIGNATURES:
        if all(head[offset:offset + len(magic)] == magic for offset, magic in checks):
            return mime
    return None


def mime_from_extension(filename: Optional[str]) -> Optional[str]:
    if not filename:
        return None
    # Accept both separators so Windows-style paths resolve the same way
    name = filename.replace("\\", "/")
    _, ext = posixpath.splitext(name)
    return EXTENSION_TO_MIME.get(ext.lower())


def classify(data: bytes, filename: Optional[str] = None, *, default: str = DEFAULT_MIME_TYPE) -> str:
    return sniff(data) or mime_from_extension(filename) or default or DEFAULT_MIME_TYPE
