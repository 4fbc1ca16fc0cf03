"""Path normalization helpers for repository-relative fetches."""

from __future__ import annotations

import re
from typing import Final

WINDOWS_ABSOLUTE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z]:[\\/]")


class PathBlockedError(Exception):
    """Raised when a requested path cannot address a file inside the repository."""

    def __init__(self, reason: str, hint: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint


def _normalize_relative_input(candidate: str) -> tuple[str, bool]:
    """Normalize path separators and detect absolute-style inputs."""
    normalized = candidate.replace("\\", "/")
    if normalized.startswith("/"):
        return normalized, True
    if WINDOWS_ABSOLUTE_PATTERN.match(normalized):
        return normalized, True
    return normalized, False


def normalize_repo_path(candidate: str) -> str:
    """Return a POSIX repository-relative path or raise PathBlockedError."""
    normalized, is_absolute_style = _normalize_relative_input(candidate.strip())

    if not normalized:
        raise PathBlockedError(
            reason="Path is empty.",
            hint="Provide a repository-relative path such as 'src/module.py'.",
        )
    if is_absolute_style:
        raise PathBlockedError(
            reason="Absolute paths are not repository-relative.",
            hint="Drop the leading '/' or drive letter.",
        )

    parts = [part for part in normalized.split("/") if part not in ("", ".")]
    if any(part == ".." for part in parts):
        raise PathBlockedError(
            reason="Path traversal is blocked.",
            hint="Remove '..' segments and use a repository-relative path.",
        )
    if not parts:
        raise PathBlockedError(
            reason="Path does not name a file.",
            hint="Provide a repository-relative path such as 'src/module.py'.",
        )
    return "/".join(parts)
