"""Thin GitHub REST client bound to one repository.

Every method either returns parsed JSON (or raw bytes for path-addressed
content) or raises :class:`UpstreamError`. Nothing here retries beyond the
connection retries configured on the underlying ``httpx`` transport.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from urllib.parse import quote

import httpx

from gh_repo_mcp.upstream.errors import UpstreamError
from gh_repo_mcp.upstream.scope import RepositoryScope

logger = logging.getLogger(__name__)

API_VERSION = "2022-11-28"
USER_AGENT = "gh-repo-mcp/1.0"
JSON_ACCEPT = "application/vnd.github+json"
RAW_ACCEPT = "application/vnd.github.raw+json"
TEXT_MATCH_ACCEPT = "application/vnd.github.text-match+json"

Params = Mapping[str, str | int | bool | None]


def build_headers(token: str | None) -> dict[str, str]:
    """Default request headers, with bearer auth when a token is configured."""
    headers = {
        "Accept": JSON_ACCEPT,
        "X-GitHub-Api-Version": API_VERSION,
        "User-Agent": USER_AGENT,
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _clean_params(params: Params | None) -> dict[str, str | int]:
    cleaned: dict[str, str | int] = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            cleaned[key] = "true" if value else "false"
            continue
        cleaned[key] = value
    return cleaned


class GitHubClient:
    """GitHub REST capability set used by search, fetch and repository tools."""

    def __init__(
        self,
        scope: RepositoryScope,
        api_url: str = "https://api.github.com",
        token: str | None = None,
        timeout_seconds: float = 30.0,
        connect_retries: int = 2,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._scope = scope
        self._http = httpx.Client(
            base_url=api_url,
            headers=build_headers(token),
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport or httpx.HTTPTransport(retries=connect_retries),
        )

    @property
    def scope(self) -> RepositoryScope:
        return self._scope

    def close(self) -> None:
        self._http.close()

    # -- transport -------------------------------------------------------

    def _request(self, path: str, params: Params | None, accept: str) -> httpx.Response:
        try:
            response = self._http.get(
                path, params=_clean_params(params), headers={"Accept": accept}
            )
        except httpx.HTTPError as error:
            logger.warning("GitHub request to %s failed: %s", path, error)
            raise UpstreamError(
                status=0,
                status_text=f"Transport error ({type(error).__name__})",
                body=str(error),
                url=path,
            ) from error
        if not response.is_success:
            logger.info("GitHub API %s for %s", response.status_code, path)
            raise UpstreamError(
                status=response.status_code,
                status_text=response.reason_phrase,
                body=response.text,
                url=path,
            )
        return response

    def _get_json(
        self, path: str, params: Params | None = None, accept: str = JSON_ACCEPT
    ) -> object:
        response = self._request(path, params, accept)
        try:
            return response.json()
        except ValueError as error:
            raise UpstreamError(
                status=response.status_code,
                status_text="Malformed JSON body",
                body=response.text,
                url=path,
            ) from error

    def _get_object(
        self, path: str, params: Params | None = None, accept: str = JSON_ACCEPT
    ) -> dict[str, object]:
        payload = self._get_json(path, params, accept)
        if not isinstance(payload, dict):
            raise UpstreamError(
                status=200, status_text="Unexpected response shape (expected object)", url=path
            )
        return payload

    def _get_list(self, path: str, params: Params | None = None) -> list[dict[str, object]]:
        payload = self._get_json(path, params)
        if not isinstance(payload, list):
            raise UpstreamError(
                status=200, status_text="Unexpected response shape (expected array)", url=path
            )
        return [item for item in payload if isinstance(item, dict)]

    def _repo_path(self, suffix: str) -> str:
        return f"{self._scope.api_prefix}/{suffix}"

    def _search(
        self, kind: str, q: str, limit: int, accept: str = JSON_ACCEPT
    ) -> list[dict[str, object]]:
        payload = self._get_object(f"/search/{kind}", {"q": q, "per_page": limit}, accept)
        items = payload.get("items")
        if not isinstance(items, list):
            return []
        return [item for item in items if isinstance(item, dict)][:limit]

    # -- search ----------------------------------------------------------

    def search_issues(self, text: str, qualifier: str, limit: int) -> list[dict[str, object]]:
        """Search issues or pull requests (``qualifier`` is ``is:issue`` or ``is:pr``)."""
        parts = (text.strip(), f"repo:{self._scope.full_name}", qualifier)
        q = " ".join(part for part in parts if part)
        return self._search("issues", q, limit)

    def search_commits(self, text: str, limit: int) -> list[dict[str, object]]:
        q = " ".join(part for part in (text.strip(), f"repo:{self._scope.full_name}") if part)
        return self._search("commits", q, limit)

    def search_code(
        self, text: str, limit: int, qualifiers: Sequence[str] = ()
    ) -> list[dict[str, object]]:
        """Code search with text-match fragments."""
        parts = [text.strip(), f"repo:{self._scope.full_name}", "in:file", *qualifiers]
        q = " ".join(part for part in parts if part)
        return self._search("code", q, limit, accept=TEXT_MATCH_ACCEPT)

    # -- single resources --------------------------------------------------

    def get_issue(self, number: int) -> dict[str, object]:
        return self._get_object(self._repo_path(f"issues/{number}"))

    def get_pull_request(self, number: int) -> dict[str, object]:
        return self._get_object(self._repo_path(f"pulls/{number}"))

    def get_commit(self, sha: str) -> dict[str, object]:
        return self._get_object(self._repo_path(f"commits/{quote(sha, safe='')}"))

    def get_branch_head(self, branch: str) -> str | None:
        """Return the head commit sha of a branch, or None when the branch does not exist."""
        try:
            payload = self._get_object(self._repo_path(f"branches/{quote(branch, safe='')}"))
        except UpstreamError as error:
            if error.status == 404:
                return None
            raise
        commit = payload.get("commit")
        if isinstance(commit, dict) and isinstance(commit.get("sha"), str):
            return str(commit["sha"])
        return None

    def list_commits(self, params: Params | None = None) -> list[dict[str, object]]:
        """List commits, newest first; ``params`` may carry ``sha`` (branch), ``per_page`` etc."""
        return self._get_list(self._repo_path("commits"), params)

    def get_tree_recursive(self, sha: str) -> list[dict[str, object]]:
        payload = self._get_object(
            self._repo_path(f"git/trees/{quote(sha, safe='')}"), {"recursive": 1}
        )
        if payload.get("truncated") is True:
            logger.warning("Tree %s for %s is truncated upstream", sha, self._scope.full_name)
        tree = payload.get("tree")
        if not isinstance(tree, list):
            return []
        return [entry for entry in tree if isinstance(entry, dict)]

    def get_blob(self, sha: str) -> dict[str, object]:
        """Blob as ``{encoding, content, size}``; content is usually base64."""
        return self._get_object(self._repo_path(f"git/blobs/{quote(sha, safe='')}"))

    def get_content_by_path(self, path: str, ref: str) -> bytes:
        """Raw bytes of a file at ``ref``."""
        response = self._request(
            self._repo_path(f"contents/{quote(path, safe='/')}"), {"ref": ref}, RAW_ACCEPT
        )
        return response.content

    # -- repository tools --------------------------------------------------

    def list_pulls(self, params: Params | None = None) -> list[dict[str, object]]:
        return self._get_list(self._repo_path("pulls"), params)

    def list_pull_commits(
        self, number: int, params: Params | None = None
    ) -> list[dict[str, object]]:
        return self._get_list(self._repo_path(f"pulls/{number}/commits"), params)

    def get_combined_status(self, ref: str) -> dict[str, object]:
        return self._get_object(self._repo_path(f"commits/{quote(ref, safe='')}/status"))

    def list_check_runs(self, ref: str) -> dict[str, object]:
        return self._get_object(self._repo_path(f"commits/{quote(ref, safe='')}/check-runs"))

    def list_workflows(self) -> dict[str, object]:
        return self._get_object(self._repo_path("actions/workflows"))

    def list_workflow_runs(self, params: Params | None = None) -> dict[str, object]:
        return self._get_object(self._repo_path("actions/runs"), params)

    def get_workflow_run(self, run_id: int) -> dict[str, object]:
        return self._get_object(self._repo_path(f"actions/runs/{run_id}"))

    def list_run_jobs(self, run_id: int, params: Params | None = None) -> dict[str, object]:
        return self._get_object(self._repo_path(f"actions/runs/{run_id}/jobs"), params)

    def list_directory(self, path: str, ref: str | None = None) -> list[dict[str, object]]:
        """Directory listing via the contents endpoint."""
        return self._get_list(self._repo_path(f"contents/{quote(path, safe='/')}"), {"ref": ref})
