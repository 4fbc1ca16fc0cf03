"""Turn upstream blob payloads and raw bytes into plain text."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class DecodedText:
    text: str
    binary: bool


BINARY = DecodedText(text="", binary=True)


def decode_bytes(raw: bytes) -> DecodedText:
    """UTF-8 decode; undecodable content becomes empty text flagged as binary."""
    try:
        return DecodedText(text=raw.decode("utf-8"), binary=False)
    except UnicodeDecodeError:
        return BINARY


def decode_blob_payload(payload: dict[str, object]) -> DecodedText:
    """Decode a git blob ``{encoding, content}`` payload."""
    content = payload.get("content")
    if not isinstance(content, str):
        return BINARY
    encoding = payload.get("encoding")
    if encoding == "base64":
        try:
            raw = base64.b64decode("".join(content.split()), validate=True)
        except (binascii.Error, ValueError):
            return BINARY
        return decode_bytes(raw)
    if encoding in (None, "", "utf-8"):
        return DecodedText(text=content, binary=False)
    return BINARY
