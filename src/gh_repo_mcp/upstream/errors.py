"""Uniform upstream failure type."""

from __future__ import annotations

BODY_EXCERPT_CHARS = 500


def body_excerpt(body: str, limit: int = BODY_EXCERPT_CHARS) -> str:
    """Return a bounded, single-block excerpt of an upstream body."""
    stripped = body.strip()
    if len(stripped) <= limit:
        return stripped
    return stripped[:limit] + "..."


class UpstreamError(Exception):
    """Raised when the upstream API answers with a non-success or malformed response.

    ``status`` is 0 when no HTTP response was received at all.
    """

    def __init__(self, status: int, status_text: str, body: str = "", url: str = "") -> None:
        self.status = status
        self.status_text = status_text
        self.body_excerpt = body_excerpt(body)
        self.url = url
        super().__init__(self.describe())

    def describe(self) -> str:
        """Human readable one-line description with a bounded body excerpt."""
        message = f"GitHub API {self.status} {self.status_text}".rstrip()
        if self.url:
            message = f"{message} for {self.url}"
        if self.body_excerpt:
            message = f"{message}: {self.body_excerpt}"
        return message

    def to_dict(self) -> dict[str, object]:
        return {
            "status": self.status,
            "status_text": self.status_text,
            "body_excerpt": self.body_excerpt,
        }
