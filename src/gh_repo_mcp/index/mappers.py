"""Per-category mapping of upstream items onto ResultRecord."""

from __future__ import annotations

from gh_repo_mcp.index.identifiers import Category, format_identifier
from gh_repo_mcp.index.locator import ResourceLocatorIndex
from gh_repo_mcp.index.models import IndexEntry, ResultRecord
from gh_repo_mcp.upstream import RepositoryScope

SNIPPET_MAX_LINES = 3
SNIPPET_MAX_CHARS = 300


def build_snippet(text: str) -> str:
    """Build deterministic, bounded snippet."""
    lines = [line for line in text.splitlines() if line.strip()]
    snippet = "\n".join(lines[:SNIPPET_MAX_LINES])
    if len(snippet) > SNIPPET_MAX_CHARS:
        return snippet[:SNIPPET_MAX_CHARS]
    return snippet


def first_line(message: str) -> str:
    for line in message.splitlines():
        if line.strip():
            return line.strip()
    return ""


def _str_field(item: dict[str, object], key: str) -> str | None:
    value = item.get(key)
    if isinstance(value, str) and value:
        return value
    return None


def _number_field(item: dict[str, object]) -> int | None:
    value = item.get("number")
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _body_snippet(item: dict[str, object]) -> str | None:
    body = _str_field(item, "body")
    if body is None:
        return None
    return build_snippet(body) or None


def commit_message(item: dict[str, object]) -> str:
    """Message of a commit item from search, the commit list or the single-commit endpoint."""
    commit = item.get("commit")
    if isinstance(commit, dict):
        message = commit.get("message")
        if isinstance(message, str):
            return message
    return ""


def map_code_item(
    item: dict[str, object],
    scope: RepositoryScope,
    index: ResourceLocatorIndex,
) -> ResultRecord | None:
    """Map a code search item and record its locator for later blob redemption."""
    sha = _str_field(item, "sha")
    if sha is None:
        return None
    path = _str_field(item, "path")
    url = _str_field(item, "html_url") or scope.blob_url("HEAD", path or "")
    result_id = format_identifier(Category.CODE, sha)

    snippet: str | None = None
    text_matches = item.get("text_matches")
    if isinstance(text_matches, list) and text_matches:
        first = text_matches[0]
        if isinstance(first, dict) and isinstance(first.get("fragment"), str):
            snippet = str(first["fragment"])

    index.put(
        result_id,
        IndexEntry(
            owner=scope.owner,
            repo=scope.repo,
            path=path or "",
            canonical_url=url,
            content_hash=sha,
        ),
    )
    return ResultRecord(id=result_id, title=path or sha, url=url, path=path, snippet=snippet)


def map_issue_item(item: dict[str, object], scope: RepositoryScope) -> ResultRecord | None:
    number = _number_field(item)
    if number is None:
        return None
    return ResultRecord(
        id=format_identifier(Category.ISSUE, number),
        title=_str_field(item, "title") or f"Issue #{number}",
        url=_str_field(item, "html_url") or scope.issue_url(number),
        snippet=_body_snippet(item),
    )


def map_pull_request_item(
    item: dict[str, object],
    scope: RepositoryScope,
) -> ResultRecord | None:
    number = _number_field(item)
    if number is None:
        return None
    return ResultRecord(
        id=format_identifier(Category.PULL_REQUEST, number),
        title=_str_field(item, "title") or f"PR #{number}",
        url=_str_field(item, "html_url") or scope.pull_url(number),
        snippet=_body_snippet(item),
    )


def map_commit_item(item: dict[str, object], scope: RepositoryScope) -> ResultRecord | None:
    sha = _str_field(item, "sha")
    if sha is None:
        return None
    return ResultRecord(
        id=format_identifier(Category.COMMIT, sha),
        title=first_line(commit_message(item)) or f"Commit {sha[:7]}",
        url=_str_field(item, "html_url") or scope.commit_url(sha),
    )


def map_branch_tree_entry(
    entry: dict[str, object],
    scope: RepositoryScope,
    branch: str,
    index: ResourceLocatorIndex,
) -> ResultRecord | None:
    """Map a tree blob found by a branch scan and pin its path to ``branch``."""
    path = _str_field(entry, "path")
    if path is None:
        return None
    result_id = format_identifier(Category.CODE, path)
    url = scope.blob_url(branch, path)
    index.put(
        result_id,
        IndexEntry(
            owner=scope.owner,
            repo=scope.repo,
            path=path,
            canonical_url=url,
            ref=branch,
        ),
    )
    return ResultRecord(id=result_id, title=path, url=url, path=path)
