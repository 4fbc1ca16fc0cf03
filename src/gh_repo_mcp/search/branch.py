"""Local scans used when a search is pinned to an explicit branch.

Upstream commit and code search only see the default branch, so these walk
the branch's commit log and tree directly and filter by substring.
"""

from __future__ import annotations

from gh_repo_mcp.index import (
    ResourceLocatorIndex,
    ResultRecord,
    map_branch_tree_entry,
    map_commit_item,
)
from gh_repo_mcp.index.mappers import commit_message, first_line
from gh_repo_mcp.upstream import GitHubClient, UpstreamError


def _commit_matches(item: dict[str, object], needle: str) -> bool:
    sha = item.get("sha")
    if isinstance(sha, str) and needle in sha.lower():
        return True
    return needle in first_line(commit_message(item)).lower()


def scan_branch_commits(
    client: GitHubClient,
    branch: str,
    query: str,
    limit: int,
    window: int,
) -> list[ResultRecord]:
    """Filter the newest ``window`` commits of a branch; empty query keeps them all."""
    needle = query.strip().lower()
    commits = client.list_commits({"sha": branch, "per_page": window})
    results: list[ResultRecord] = []
    for item in commits[:window]:
        if len(results) >= limit:
            break
        if needle and not _commit_matches(item, needle):
            continue
        record = map_commit_item(item, client.scope)
        if record is not None:
            results.append(record)
    return results


def scan_branch_code_paths(
    client: GitHubClient,
    branch: str,
    query: str,
    limit: int,
    index: ResourceLocatorIndex,
) -> list[ResultRecord]:
    """Match blob paths at the branch head; empty query keeps every file.

    Matches are recorded in ``index`` so fetch reads them back at ``branch``.
    """
    head_sha = client.get_branch_head(branch)
    if head_sha is None:
        raise UpstreamError(
            status=404,
            status_text="Branch not found",
            url=f"{client.scope.api_prefix}/branches/{branch}",
        )
    needle = query.strip().lower()
    results: list[ResultRecord] = []
    for entry in client.get_tree_recursive(head_sha):
        if len(results) >= limit:
            break
        if entry.get("type") != "blob":
            continue
        path = entry.get("path")
        if not isinstance(path, str):
            continue
        if needle and needle not in path.lower():
            continue
        record = map_branch_tree_entry(entry, client.scope, branch, index)
        if record is not None:
            results.append(record)
    return results
