from __future__ import annotations

import base64

import pytest

from genpipe.errors import EmptyPayload
from genpipe.media import MediaAsset, classify, decode, encode, mime_from_extension, parse_data_url, sniff


SIGNATURES = {
    "image/jpeg": b"\xff\xd8\xff\xdb" + b"\x00" * 8,
    "image/png": b"\x89PNG\r\n\x1a\n" + b"\x00" * 8,
    "image/gif": b"GIF89a" + b"\x00" * 8,
    "image/webp": b"RIFF\x24\x00\x00\x00WEBPVP8 " + b"\x00" * 4,
    "image/bmp": b"BM" + b"\x00" * 12,
}


@pytest.mark.parametrize("mime", sorted(SIGNATURES))
def test_signature_wins_over_filename(mime):
    data = SIGNATURES[mime]
    assert classify(data) == mime
    assert classify(data, "picture.svg") == mime
    assert classify(data, "notes.txt") == mime


def test_gif87a_signature():
    assert sniff(b"GIF87a\x01\x00") == "image/gif"


def test_riff_without_webp_is_not_webp():
    assert sniff(b"RIFF\x24\x00\x00\x00WAVEfmt ") is None


@pytest.mark.parametrize(
    "filename,expected",
    [
        ("wally.jpeg", "image/jpeg"),
        ("WALLY.JPG", "image/jpeg"),
        ("a/b/c.png", "image/png"),
        ("anim.gif", "image/gif"),
        ("photo.WebP", "image/webp"),
        ("old.bmp", "image/bmp"),
        ("logo.svg", "image/svg+xml"),
        ("C:\\images\\logo.svg", "image/svg+xml"),
    ],
)
def test_extension_fallback(filename, expected):
    assert classify(b"<not a known signature>", filename) == expected


def test_unknown_everything_defaults_to_png():
    assert classify(b"plain text", "notes.txt") == "image/png"
    assert classify(b"plain text") == "image/png"
    assert classify(b"") == "image/png"


def test_default_is_configurable():
    assert classify(b"plain text", "notes.txt", default="application/octet-stream") == "application/octet-stream"
    # Never empty, even if asked to be
    assert classify(b"plain text", default="") == "image/png"


def test_mime_from_extension_unknown():
    assert mime_from_extension("archive.tar.gz") is None
    assert mime_from_extension(None) is None
    assert mime_from_extension("noext") is None


def test_encode_decode_inverse():
    for data in [b"\x00", b"hello world", bytes(range(256)), SIGNATURES["image/png"]]:
        media = encode(data, "image/png")
        assert "\n" not in media.data
        assert decode(media) == data
        assert base64.b64decode(media.data) == data


def test_encode_data_url_shape():
    media = encode(b"abc", "image/jpeg")
    assert media.url == "data:image/jpeg;base64,YWJj"


def test_encode_empty_fails():
    with pytest.raises(EmptyPayload):
        encode(b"", "image/png")


def test_parse_data_url():
    media = parse_data_url("data:image/gif;base64,R0lGODlh")
    assert media.mime_type == "image/gif"
    assert decode(media) == b"GIF89a"

    with pytest.raises(ValueError):
        parse_data_url("https://example.com/a.png")
    with pytest.raises(ValueError):
        parse_data_url("data:;base64,R0lGODlh")


def test_asset_mime_is_derived(jpeg_bytes):
    asset = MediaAsset.from_bytes(jpeg_bytes, path="looks-like.png")
    assert asset.mime_type == "image/jpeg"
    assert asset.size == len(jpeg_bytes)
    part = asset.to_part()
    assert part.media.mime_type == "image/jpeg"
    assert decode(part.media) == jpeg_bytes


def test_asset_from_file(tmp_path, png_bytes):
    path = tmp_path / "pic.bin"
    path.write_bytes(png_bytes)
    asset = MediaAsset.from_file(path)
    assert asset.mime_type == "image/png"
    assert asset.path == str(path)

    svg = tmp_path / "logo.svg"
    svg.write_bytes(b"<svg xmlns='http://www.w3.org/2000/svg'/>")
    assert MediaAsset.from_file(svg).mime_type == "image/svg+xml"


def test_asset_from_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        MediaAsset.from_file(tmp_path / "missing.jpeg")
