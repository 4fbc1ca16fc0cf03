"""Per-session repository context."""

from __future__ import annotations

from collections.abc import Sequence

import httpx

from gh_repo_mcp.config import ServerConfig
from gh_repo_mcp.fetch import FetchResolver
from gh_repo_mcp.index import Doc, ResourceLocatorIndex
from gh_repo_mcp.search import SearchAggregator, SearchOutcome
from gh_repo_mcp.security import SecurityLimits
from gh_repo_mcp.upstream import GitHubClient, RepositoryScope


class RepoSession:
    """One bound repository with its own upstream client and locator index.

    Sessions never share an index, so two sessions on different (or the same)
    repositories cannot observe each other's search results. Callers must not
    run two operations on one session at the same time.
    """

    def __init__(
        self,
        scope: RepositoryScope,
        client: GitHubClient,
        limits: SecurityLimits,
    ) -> None:
        self.scope = scope
        self.client = client
        self.limits = limits
        self.index = ResourceLocatorIndex()
        self._aggregator = SearchAggregator(client, self.index, limits)
        self._resolver = FetchResolver(client, self.index)

    @classmethod
    def from_config(
        cls,
        config: ServerConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> RepoSession:
        owner = config.repository.owner
        name = config.repository.name
        if owner is None or name is None:
            raise ValueError(
                "Repository is not configured; pass --repo owner/name or set "
                "[repository] owner and name in gh_repo_mcp.toml."
            )
        scope = RepositoryScope(owner=owner, repo=name, web_url=config.github.web_url)
        client = GitHubClient(
            scope,
            api_url=config.github.api_url,
            token=config.github.token,
            timeout_seconds=config.github.timeout_seconds,
            connect_retries=config.github.connect_retries,
            transport=transport,
        )
        return cls(scope=scope, client=client, limits=config.limits)

    def search(
        self,
        query: str,
        branch: str | None = None,
        limit: int | None = None,
        code_qualifiers: Sequence[str] = (),
    ) -> SearchOutcome:
        return self._aggregator.search(
            query, branch=branch, limit=limit, code_qualifiers=code_qualifiers
        )

    def fetch(
        self,
        ids: Sequence[str],
        path: str | None = None,
        ref: str | None = None,
        branch: str | None = None,
    ) -> list[Doc]:
        return self._resolver.fetch(ids, path=path, ref=ref, branch=branch)

    def close(self) -> None:
        self.client.close()
