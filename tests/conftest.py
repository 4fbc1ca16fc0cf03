from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from gh_repo_mcp.config import CliOverrides
from gh_repo_mcp.security import SecurityLimits
from gh_repo_mcp.server import StdioServer, create_server
from gh_repo_mcp.session import RepoSession
from gh_repo_mcp.upstream import GitHubClient, RepositoryScope

Route = Callable[[httpx.Request], httpx.Response]

OWNER = "octo"
REPO = "demo"
PREFIX = f"/repos/{OWNER}/{REPO}"


class FakeGitHub:
    """Path-routed stand-in for the GitHub REST API."""

    def __init__(self) -> None:
        self.routes: dict[str, Route] = {}
        self.requests: list[httpx.Request] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"})
        return route(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def json(self, path: str, payload: object, status: int = 200) -> None:
        self.routes[path] = lambda _: httpx.Response(status, json=payload)

    def raw(self, path: str, content: bytes) -> None:
        self.routes[path] = lambda _: httpx.Response(200, content=content)

    def fail(self, path: str, status: int, message: str = "boom") -> None:
        self.routes[path] = lambda _: httpx.Response(status, json={"message": message})

    def search_issues(
        self,
        issues: list[dict[str, object]],
        pulls: list[dict[str, object]],
    ) -> None:
        def route(request: httpx.Request) -> httpx.Response:
            items = pulls if "is:pr" in request.url.params["q"] else issues
            return httpx.Response(200, json={"total_count": len(items), "items": items})

        self.routes["/search/issues"] = route

    def search(self, kind: str, items: list[dict[str, object]]) -> None:
        self.json(f"/search/{kind}", {"total_count": len(items), "items": items})

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]

    def client(self, owner: str = OWNER, repo: str = REPO) -> GitHubClient:
        return GitHubClient(RepositoryScope(owner=owner, repo=repo), transport=self.transport)

    def session(
        self,
        owner: str = OWNER,
        repo: str = REPO,
        limits: SecurityLimits | None = None,
    ) -> RepoSession:
        scope = RepositoryScope(owner=owner, repo=repo)
        return RepoSession(
            scope=scope,
            client=GitHubClient(scope, transport=self.transport),
            limits=limits or SecurityLimits(),
        )


@pytest.fixture
def github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def make_server(
    tmp_path: Path,
    github: FakeGitHub,
) -> Callable[..., StdioServer]:
    def factory(**overrides: Any) -> StdioServer:
        cli = CliOverrides(repository=f"{OWNER}/{REPO}", **overrides)
        return create_server(
            config_dir=str(tmp_path),
            cli_overrides=cli,
            environ={},
            transport=github.transport,
        )

    return factory


def read_audit(tmp_path: Path) -> list[dict[str, object]]:
    audit_path = tmp_path / ".gh_repo_mcp" / "audit.jsonl"
    return [json.loads(line) for line in audit_path.read_text(encoding="utf-8").splitlines()]


def issue_item(number: int, title: str, body: str | None = None) -> dict[str, object]:
    return {
        "number": number,
        "title": title,
        "body": body,
        "state": "open",
        "html_url": f"https://github.com/{OWNER}/{REPO}/issues/{number}",
    }


def pull_item(number: int, title: str) -> dict[str, object]:
    return {
        "number": number,
        "title": title,
        "body": None,
        "state": "open",
        "html_url": f"https://github.com/{OWNER}/{REPO}/pull/{number}",
        "pull_request": {},
    }


def commit_item(sha: str, message: str) -> dict[str, object]:
    return {
        "sha": sha,
        "html_url": f"https://github.com/{OWNER}/{REPO}/commit/{sha}",
        "commit": {
            "message": message,
            "author": {"name": "Ada", "email": "ada@example.com", "date": "2024-01-02T03:04:05Z"},
            "committer": {"name": "Bot", "email": "bot@example.com", "date": "2024-01-02T03:04:06"},
        },
        "author": {"login": "ada"},
        "committer": {"login": "web-flow"},
    }


def code_item(sha: str, path: str, fragment: str | None = None) -> dict[str, object]:
    item: dict[str, object] = {
        "sha": sha,
        "path": path,
        "name": path.rsplit("/", 1)[-1],
        "html_url": f"https://github.com/{OWNER}/{REPO}/blob/{sha[:7]}/{path}",
    }
    if fragment is not None:
        item["text_matches"] = [{"fragment": fragment, "property": "content"}]
    return item
