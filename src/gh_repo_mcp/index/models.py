"""Typed records shared by search, the locator index and fetch."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class ResultRecord:
    """Uniform search result across all categories."""

    id: str
    title: str
    url: str
    path: str | None = None
    snippet: str | None = None

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {"id": self.id, "title": self.title, "url": self.url}
        if self.path is not None:
            payload["path"] = self.path
        if self.snippet is not None:
            payload["snippet"] = self.snippet
        return payload


@dataclass(slots=True, frozen=True)
class IndexEntry:
    """Locator needed to redeem a code result for its bytes.

    Blob results carry ``content_hash``; branch scan results carry the ``ref``
    their path was listed at instead.
    """

    owner: str
    repo: str
    path: str
    canonical_url: str
    content_hash: str | None = None
    ref: str | None = None


@dataclass(slots=True, frozen=True)
class Doc:
    """Normalized fetch result; ``text`` is always decoded plain text."""

    id: str
    title: str
    text: str
    url: str
    metadata: dict[str, object] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "title": self.title,
            "text": self.text,
            "url": self.url,
            "metadata": dict(self.metadata),
        }
