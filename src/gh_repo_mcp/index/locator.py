"""Session-scoped map from result id to a redeemable locator."""

from __future__ import annotations

import threading

from gh_repo_mcp.index.models import IndexEntry


class ResourceLocatorIndex:
    """In-memory, grow-only index living as long as its session.

    Keys are overwritten on repeat; nothing is ever evicted.
    """

    def __init__(self) -> None:
        self._entries: dict[str, IndexEntry] = {}
        self._lock = threading.Lock()

    def put(self, result_id: str, entry: IndexEntry) -> None:
        with self._lock:
            self._entries[result_id] = entry

    def get(self, result_id: str) -> IndexEntry | None:
        with self._lock:
            return self._entries.get(result_id)

    def __contains__(self, result_id: object) -> bool:
        with self._lock:
            return result_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
