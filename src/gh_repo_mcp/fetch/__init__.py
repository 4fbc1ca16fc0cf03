"""Fetch resolution of search identifiers and explicit paths."""

from .decoding import DecodedText, decode_blob_payload, decode_bytes
from .resolver import (
    DEFAULT_REF,
    FETCH_FAILED_TITLE,
    UNKNOWN_ID_TITLE,
    FetchResolver,
    error_doc,
    unknown_id_doc,
)

__all__ = [
    "DEFAULT_REF",
    "DecodedText",
    "FETCH_FAILED_TITLE",
    "FetchResolver",
    "UNKNOWN_ID_TITLE",
    "decode_blob_payload",
    "decode_bytes",
    "error_doc",
    "unknown_id_doc",
]
