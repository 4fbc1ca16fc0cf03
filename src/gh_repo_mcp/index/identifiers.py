"""Category-tagged result identifiers.

A search result id has the form ``<tag>:<value>``. The tag is the only thing
fetch dispatches on, so parsing turns the raw string into one variant of
:data:`ResultIdentifier`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

SEPARATOR = ":"
TAG_PATTERN = re.compile(r"[A-Za-z]+")


class Category(str, Enum):
    """Resource categories, valued by their identifier tag."""

    ISSUE = "issue"
    PULL_REQUEST = "pr"
    COMMIT = "commit"
    CODE = "code"


CATEGORY_ORDER: tuple[Category, ...] = (
    Category.ISSUE,
    Category.PULL_REQUEST,
    Category.COMMIT,
    Category.CODE,
)
VALID_TAGS: tuple[str, ...] = tuple(category.value for category in CATEGORY_ORDER)


@dataclass(slots=True, frozen=True)
class IssueId:
    number: int


@dataclass(slots=True, frozen=True)
class PullRequestId:
    number: int


@dataclass(slots=True, frozen=True)
class CommitId:
    sha: str


@dataclass(slots=True, frozen=True)
class CodeId:
    """Blob hash from default-branch search, or a path from a branch scan."""

    token: str

    @property
    def raw(self) -> str:
        return format_identifier(Category.CODE, self.token)


@dataclass(slots=True, frozen=True)
class PathId:
    """Untagged token, treated as a repository-relative path."""

    path: str


@dataclass(slots=True, frozen=True)
class UnknownId:
    raw: str


ResultIdentifier = IssueId | PullRequestId | CommitId | CodeId | PathId | UnknownId


def format_identifier(category: Category, value: str | int) -> str:
    """Build the opaque id string for a category value."""
    return f"{category.value}{SEPARATOR}{value}"


def _positive_int(value: str) -> int | None:
    if not (value.isascii() and value.isdigit()):
        return None
    number = int(value)
    return number if number > 0 else None


def parse_identifier(raw: str) -> ResultIdentifier:
    """Split at the first separator and map the tag onto a variant.

    Only a bare word before the separator is a tag; anything else, such as
    ``docs/v1:notes.md``, is a path.
    """
    tag, sep, value = raw.partition(SEPARATOR)
    if not sep or not TAG_PATTERN.fullmatch(tag):
        return PathId(path=raw)
    value = value.strip()
    if not value:
        return UnknownId(raw=raw)

    if tag == Category.ISSUE.value:
        number = _positive_int(value)
        return IssueId(number=number) if number is not None else UnknownId(raw=raw)
    if tag == Category.PULL_REQUEST.value:
        number = _positive_int(value)
        return PullRequestId(number=number) if number is not None else UnknownId(raw=raw)
    if tag == Category.COMMIT.value:
        return CommitId(sha=value)
    if tag == Category.CODE.value:
        return CodeId(token=value)
    return UnknownId(raw=raw)
