"""Media handling: content-type classification and transport encoding."""

from .asset import MediaAsset, encode_asset
from .classify import DEFAULT_MIME_TYPE, EXTENSION_TO_MIME, classify, mime_from_extension, sniff
from .encode import decode, encode, parse_data_url

__all__ = [
    "DEFAULT_MIME_TYPE",
    "EXTENSION_TO_MIME",
    "MediaAsset",
    "classify",
    "decode",
    "encode",
    "encode_asset",
    "mime_from_extension",
    "parse_data_url",
    "sniff",
]
