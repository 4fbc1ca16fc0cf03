from __future__ import annotations

import base64

from gh_repo_mcp.fetch import decode_blob_payload, decode_bytes


def test_base64_blob_with_line_breaks_decodes_to_text() -> None:
    encoded = base64.b64encode("print('héllo')\n".encode()).decode()
    wrapped = "\n".join(encoded[index : index + 8] for index in range(0, len(encoded), 8))

    decoded = decode_blob_payload({"encoding": "base64", "content": wrapped})

    assert decoded.text == "print('héllo')\n"
    assert decoded.binary is False


def test_invalid_base64_yields_empty_binary_text() -> None:
    decoded = decode_blob_payload({"encoding": "base64", "content": "!!not base64!!"})

    assert decoded.text == ""
    assert decoded.binary is True


def test_non_utf8_bytes_are_flagged_binary() -> None:
    assert decode_bytes(b"\xff\xfe\x00").binary is True
    assert decode_blob_payload({"encoding": "utf-8", "content": "plain"}).text == "plain"
    assert decode_blob_payload({"encoding": "latin-1", "content": "x"}).binary is True
