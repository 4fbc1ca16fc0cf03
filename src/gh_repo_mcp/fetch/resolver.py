"""Redeem search identifiers and explicit paths for their content."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import assert_never

from gh_repo_mcp.fetch.decoding import decode_blob_payload, decode_bytes
from gh_repo_mcp.index import (
    VALID_TAGS,
    Category,
    CodeId,
    CommitId,
    Doc,
    IndexEntry,
    IssueId,
    PathId,
    PullRequestId,
    ResourceLocatorIndex,
    ResultIdentifier,
    UnknownId,
    format_identifier,
    parse_identifier,
)
from gh_repo_mcp.index.mappers import commit_message, first_line
from gh_repo_mcp.security import PathBlockedError, normalize_repo_path
from gh_repo_mcp.upstream import GitHubClient, UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_REF = "HEAD"
UNKNOWN_ID_TITLE = "Unknown ID"
FETCH_FAILED_TITLE = "Fetch failed"

_VALUE_HINTS = {
    Category.ISSUE.value: "number",
    Category.PULL_REQUEST.value: "number",
    Category.COMMIT.value: "sha",
    Category.CODE.value: "blob sha or path",
}


def unknown_id_doc(raw: str) -> Doc:
    """Placeholder returned for identifiers with an unrecognized form."""
    forms = ", ".join(f"{tag}:<{_VALUE_HINTS[tag]}>" for tag in VALID_TAGS)
    return Doc(
        id=raw,
        title=UNKNOWN_ID_TITLE,
        text=f"Unrecognized identifier '{raw}'. Expected one of: {forms}.",
        url="",
        metadata={"error": "unknown_id", "valid_tags": list(VALID_TAGS)},
    )


def error_doc(raw: str, message: str, status: int) -> Doc:
    """Per-item failure marker; the rest of the batch is unaffected."""
    return Doc(
        id=raw,
        title=FETCH_FAILED_TITLE,
        text=message,
        url="",
        metadata={"error": message, "status": status},
    )


class FetchResolver:
    """Resolves each identifier independently, in input order."""

    def __init__(self, client: GitHubClient, index: ResourceLocatorIndex) -> None:
        self._client = client
        self._index = index

    def fetch(
        self,
        ids: Sequence[str],
        path: str | None = None,
        ref: str | None = None,
        branch: str | None = None,
    ) -> list[Doc]:
        """Resolve ``ids`` then the optional explicit ``path``.

        Path fallbacks for ids use ``branch`` (default ``HEAD``); the explicit
        path uses ``ref``, then ``branch``, then ``HEAD``.
        """
        id_ref = branch or DEFAULT_REF
        docs = [self.resolve(raw, id_ref) for raw in ids]
        if path is not None:
            docs.append(self._guarded(path, lambda: self._path_doc(path, path, ref or id_ref)))
        return docs

    def resolve(self, raw: str, ref: str = DEFAULT_REF) -> Doc:
        identifier = parse_identifier(raw)
        return self._guarded(raw, lambda: self._dispatch(raw, identifier, ref))

    def _guarded(self, raw: str, resolve: Callable[[], Doc]) -> Doc:
        try:
            return resolve()
        except UpstreamError as error:
            logger.info("fetch of %s failed: %s", raw, error.describe())
            return error_doc(raw, error.describe(), error.status)
        except PathBlockedError as error:
            return error_doc(raw, f"{error.reason} {error.hint}", 400)

    def _dispatch(self, raw: str, identifier: ResultIdentifier, ref: str) -> Doc:
        if isinstance(identifier, IssueId):
            return self._issue_doc(raw, identifier.number)
        if isinstance(identifier, PullRequestId):
            return self._pull_request_doc(raw, identifier.number)
        if isinstance(identifier, CommitId):
            return self._commit_doc(raw, identifier.sha)
        if isinstance(identifier, CodeId):
            return self._code_doc(raw, identifier.raw, identifier.token, ref)
        if isinstance(identifier, PathId):
            key = format_identifier(Category.CODE, identifier.path)
            return self._code_doc(raw, key, identifier.path, ref)
        if isinstance(identifier, UnknownId):
            return unknown_id_doc(raw)
        assert_never(identifier)

    def _code_doc(self, raw: str, key: str, token: str, ref: str) -> Doc:
        """Redeem from the locator when search recorded one, else read ``token`` as a path."""
        entry = self._index.get(key)
        if entry is None:
            return self._path_doc(raw, token, ref)
        if entry.content_hash:
            return self._blob_doc(raw, entry)
        return self._path_doc(raw, entry.path, entry.ref or ref)

    def _issue_doc(self, raw: str, number: int) -> Doc:
        issue = self._client.get_issue(number)
        labels = [
            label["name"]
            for label in _list_field(issue, "labels")
            if isinstance(label, dict) and isinstance(label.get("name"), str)
        ]
        return Doc(
            id=raw,
            title=_str(issue.get("title")) or f"Issue #{number}",
            text=_str(issue.get("body")),
            url=_str(issue.get("html_url")) or self._client.scope.issue_url(number),
            metadata={
                "category": Category.ISSUE.value,
                "number": number,
                "state": issue.get("state"),
                "labels": labels,
            },
        )

    def _pull_request_doc(self, raw: str, number: int) -> Doc:
        pull = self._client.get_pull_request(number)
        merged = pull.get("merged")
        if not isinstance(merged, bool):
            merged = pull.get("merged_at") is not None
        return Doc(
            id=raw,
            title=_str(pull.get("title")) or f"PR #{number}",
            text=_str(pull.get("body")),
            url=_str(pull.get("html_url")) or self._client.scope.pull_url(number),
            metadata={
                "category": Category.PULL_REQUEST.value,
                "number": number,
                "state": pull.get("state"),
                "merged": merged,
                "head": _ref_summary(pull.get("head")),
                "base": _ref_summary(pull.get("base")),
            },
        )

    def _commit_doc(self, raw: str, sha: str) -> Doc:
        commit = self._client.get_commit(sha)
        full_sha = _str(commit.get("sha")) or sha
        message = commit_message(commit)
        details = commit.get("commit")
        details = details if isinstance(details, dict) else {}
        return Doc(
            id=raw,
            title=first_line(message) or f"Commit {full_sha[:7]}",
            text=message,
            url=_str(commit.get("html_url")) or self._client.scope.commit_url(full_sha),
            metadata={
                "category": Category.COMMIT.value,
                "sha": full_sha,
                "author": _identity(details.get("author"), commit.get("author")),
                "committer": _identity(details.get("committer"), commit.get("committer")),
            },
        )

    def _blob_doc(self, raw: str, entry: IndexEntry) -> Doc:
        sha = entry.content_hash or ""
        blob = self._client.get_blob(sha)
        decoded = decode_blob_payload(blob)
        return Doc(
            id=raw,
            title=entry.path or sha,
            text=decoded.text,
            url=entry.canonical_url,
            metadata={
                "category": Category.CODE.value,
                "owner": entry.owner,
                "repo": entry.repo,
                "path": entry.path,
                "sha": sha,
                "size": blob.get("size"),
                "binary": decoded.binary,
            },
        )

    def _path_doc(self, raw: str, path: str, ref: str) -> Doc:
        normalized = normalize_repo_path(path)
        content = self._client.get_content_by_path(normalized, ref)
        decoded = decode_bytes(content)
        return Doc(
            id=raw,
            title=path,
            text=decoded.text,
            url=self._client.scope.blob_url(ref, normalized),
            metadata={
                "category": Category.CODE.value,
                "path": path,
                "normalized_path": normalized,
                "ref": ref,
                "size": len(content),
                "binary": decoded.binary,
            },
        )


def _str(value: object) -> str:
    return value if isinstance(value, str) else ""


def _list_field(payload: dict[str, object], key: str) -> list[object]:
    value = payload.get(key)
    return value if isinstance(value, list) else []


def _ref_summary(value: object) -> dict[str, object]:
    if not isinstance(value, dict):
        return {"ref": None, "sha": None}
    return {"ref": value.get("ref"), "sha": value.get("sha")}


def _identity(git_identity: object, account: object) -> dict[str, object]:
    identity: dict[str, object] = {"name": None, "email": None, "date": None, "login": None}
    if isinstance(git_identity, dict):
        identity["name"] = git_identity.get("name")
        identity["email"] = git_identity.get("email")
        identity["date"] = git_identity.get("date")
    if isinstance(account, dict):
        identity["login"] = account.get("login")
    return identity
