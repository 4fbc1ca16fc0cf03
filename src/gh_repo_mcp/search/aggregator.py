"""Multi-category search over one repository."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from gh_repo_mcp.index import (
    CATEGORY_ORDER,
    Category,
    ResourceLocatorIndex,
    ResultRecord,
    map_code_item,
    map_commit_item,
    map_issue_item,
    map_pull_request_item,
)
from gh_repo_mcp.search.branch import scan_branch_code_paths, scan_branch_commits
from gh_repo_mcp.security import SecurityLimits
from gh_repo_mcp.upstream import GitHubClient, UpstreamError

logger = logging.getLogger(__name__)

CategoryJob = Callable[[], list[ResultRecord]]


@dataclass(slots=True, frozen=True)
class CategoryFailure:
    """One category whose upstream call failed; the others still return."""

    category: Category
    message: str
    status: int

    def to_warning(self) -> str:
        return f"{self.category.value} search failed: {self.message}"


@dataclass(slots=True, frozen=True)
class SearchOutcome:
    results: list[ResultRecord] = field(default_factory=list)
    failures: list[CategoryFailure] = field(default_factory=list)

    @property
    def all_failed(self) -> bool:
        return len(self.failures) == len(CATEGORY_ORDER)


class SearchAggregator:
    """Runs the four category queries concurrently and merges them in fixed order.

    Without a branch, ordering and filtering come from the upstream search API.
    With a branch, commits and code are found by scanning the branch directly.
    A failing category yields no results plus a :class:`CategoryFailure`.
    """

    def __init__(
        self,
        client: GitHubClient,
        index: ResourceLocatorIndex,
        limits: SecurityLimits,
    ) -> None:
        self._client = client
        self._index = index
        self._limits = limits

    def search(
        self,
        query: str,
        branch: str | None = None,
        limit: int | None = None,
        code_qualifiers: Sequence[str] = (),
    ) -> SearchOutcome:
        per_category = limit if limit is not None else self._limits.max_results_per_category
        jobs = self._category_jobs(query, branch, per_category, code_qualifiers)

        with ThreadPoolExecutor(max_workers=len(jobs), thread_name_prefix="search") as executor:
            futures = {category: executor.submit(jobs[category]) for category in CATEGORY_ORDER}

        results: list[ResultRecord] = []
        failures: list[CategoryFailure] = []
        for category in CATEGORY_ORDER:
            try:
                results.extend(futures[category].result())
            except UpstreamError as error:
                logger.warning("%s search failed: %s", category.value, error.describe())
                failure = CategoryFailure(
                    category=category, message=error.describe(), status=error.status
                )
                failures.append(failure)
        return SearchOutcome(results=results, failures=failures)

    def _category_jobs(
        self,
        query: str,
        branch: str | None,
        limit: int,
        code_qualifiers: Sequence[str],
    ) -> dict[Category, CategoryJob]:
        client = self._client
        scope = client.scope
        jobs: dict[Category, CategoryJob] = {
            Category.ISSUE: lambda: _map_all(
                client.search_issues(query, "is:issue", limit),
                lambda item: map_issue_item(item, scope),
            ),
            Category.PULL_REQUEST: lambda: _map_all(
                client.search_issues(query, "is:pr", limit),
                lambda item: map_pull_request_item(item, scope),
            ),
        }
        if branch is None:
            jobs[Category.COMMIT] = lambda: _map_all(
                client.search_commits(query, limit),
                lambda item: map_commit_item(item, scope),
            )
            jobs[Category.CODE] = lambda: _map_all(
                client.search_code(query, limit, code_qualifiers),
                lambda item: map_code_item(item, scope, self._index),
            )
        else:
            window = self._limits.branch_commit_window
            jobs[Category.COMMIT] = lambda: scan_branch_commits(
                client, branch, query, limit, window
            )
            jobs[Category.CODE] = lambda: scan_branch_code_paths(
                client, branch, query, limit, self._index
            )
        return jobs


def _map_all(
    items: list[dict[str, object]],
    mapper: Callable[[dict[str, object]], ResultRecord | None],
) -> list[ResultRecord]:
    records: list[ResultRecord] = []
    for item in items:
        record = mapper(item)
        if record is not None:
            records.append(record)
    return records
