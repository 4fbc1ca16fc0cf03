"""Repository inspection tools: pull requests, commits, checks and Actions.

Each handler validates its arguments, calls one or a few upstream endpoints
and returns a trimmed projection of the payload.
"""

from __future__ import annotations

import re

from gh_repo_mcp.session import RepoSession
from gh_repo_mcp.tools.arguments import (
    optional_choice,
    optional_int,
    optional_str,
    required_int,
    required_str,
)
from gh_repo_mcp.tools.registry import ToolHandler, ToolRegistry
from gh_repo_mcp.upstream import GitHubClient, UpstreamError

MAX_PER_PAGE = 100
MAX_PAGE = 50
DEFAULT_PER_PAGE = 30
STATUS_RUNS_PER_PAGE = 10
WORKFLOWS_DIR = ".github/workflows"
WORKFLOW_FILE_PATTERN = re.compile(r"\.ya?ml$", re.IGNORECASE)

PR_STATES = ("open", "closed", "all")
PR_SORTS = ("created", "updated", "popularity", "long-running")
DIRECTIONS = ("asc", "desc")


def register_repository_tools(registry: ToolRegistry, session: RepoSession) -> None:
    """Register pull request, commit, check and workflow tools."""
    client = session.client
    registry.register("list_prs", _list_prs_handler(client), "List pull requests.")
    registry.register("get_pr", _get_pr_handler(client), "Get a single pull request by number.")
    registry.register(
        "list_pr_commits", _list_pr_commits_handler(client), "List commits that belong to a PR."
    )
    registry.register(
        "list_commits", _list_commits_handler(client), "List commits on a branch or the repo."
    )
    registry.register(
        "get_commit_status",
        _commit_status_handler(client),
        "Combined commit status, check runs and recent workflow runs for a ref.",
    )
    registry.register(
        "list_check_runs", _list_check_runs_handler(client), "List check runs for a ref."
    )
    registry.register(
        "list_workflows", _list_workflows_handler(client), "List Actions workflows."
    )
    registry.register(
        "list_workflow_files",
        _list_workflow_files_handler(client),
        "List YAML files in .github/workflows.",
    )
    registry.register(
        "get_workflow_file",
        _get_workflow_file_handler(session),
        "Fetch the contents of a workflow YAML path.",
    )
    registry.register(
        "list_workflow_runs", _list_workflow_runs_handler(client), "List workflow runs."
    )
    registry.register(
        "get_workflow_run", _get_workflow_run_handler(client), "Get a workflow run by run_id."
    )
    registry.register(
        "list_run_jobs", _list_run_jobs_handler(client), "List jobs for a workflow run."
    )


def _paging(arguments: dict[str, object], tool: str) -> dict[str, int]:
    per_page = optional_int(arguments, "per_page", tool, maximum=MAX_PER_PAGE)
    page = optional_int(arguments, "page", tool, maximum=MAX_PAGE)
    return {
        "per_page": per_page if per_page is not None else DEFAULT_PER_PAGE,
        "page": page if page is not None else 1,
    }


def _get(payload: object, *keys: str) -> object:
    current = payload
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def _items(payload: dict[str, object], key: str) -> list[dict[str, object]]:
    value = payload.get(key)
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def pull_summary(pull: dict[str, object]) -> dict[str, object]:
    return {
        "id": pull.get("id"),
        "number": pull.get("number"),
        "title": pull.get("title"),
        "state": pull.get("state"),
        "draft": pull.get("draft"),
        "user": _get(pull, "user", "login"),
        "head": {"ref": _get(pull, "head", "ref"), "sha": _get(pull, "head", "sha")},
        "base": {"ref": _get(pull, "base", "ref"), "sha": _get(pull, "base", "sha")},
        "html_url": pull.get("html_url"),
        "created_at": pull.get("created_at"),
        "updated_at": pull.get("updated_at"),
        "merged_at": pull.get("merged_at"),
    }


def commit_summary(commit: dict[str, object], client: GitHubClient) -> dict[str, object]:
    sha = commit.get("sha")
    html_url = commit.get("html_url")
    if not isinstance(html_url, str) and isinstance(sha, str):
        html_url = client.scope.commit_url(sha)
    return {
        "sha": sha,
        "message": _get(commit, "commit", "message"),
        "author": _get(commit, "commit", "author", "name") or _get(commit, "author", "login"),
        "date": _get(commit, "commit", "author", "date"),
        "html_url": html_url,
    }


def run_summary(run: dict[str, object]) -> dict[str, object]:
    keys = (
        "id",
        "name",
        "status",
        "conclusion",
        "event",
        "head_branch",
        "head_sha",
        "html_url",
        "run_number",
        "created_at",
        "updated_at",
    )
    return {key: run.get(key) for key in keys}


def check_run_summary(check: dict[str, object]) -> dict[str, object]:
    return {
        "id": check.get("id"),
        "name": check.get("name"),
        "status": check.get("status"),
        "conclusion": check.get("conclusion"),
        "app": _get(check, "app", "slug"),
        "started_at": check.get("started_at"),
        "completed_at": check.get("completed_at"),
        "html_url": check.get("html_url"),
    }


def _list_prs_handler(client: GitHubClient) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        params: dict[str, str | int | None] = {
            "state": optional_choice(arguments, "state", "list_prs", PR_STATES) or "open",
            "head": optional_str(arguments, "head", "list_prs"),
            "base": optional_str(arguments, "base", "list_prs"),
            "sort": optional_choice(arguments, "sort", "list_prs", PR_SORTS),
            "direction": optional_choice(arguments, "direction", "list_prs", DIRECTIONS),
            **_paging(arguments, "list_prs"),
        }
        return {"pulls": [pull_summary(pull) for pull in client.list_pulls(params)]}

    return handler


def _get_pr_handler(client: GitHubClient) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        number = required_int(arguments, "number", "get_pr")
        pull = client.get_pull_request(number)
        return {"pr": {**pull_summary(pull), "body": pull.get("body")}}

    return handler


def _list_pr_commits_handler(client: GitHubClient) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        number = required_int(arguments, "number", "list_pr_commits")
        commits = client.list_pull_commits(number, _paging(arguments, "list_pr_commits"))
        return {"commits": [commit_summary(commit, client) for commit in commits]}

    return handler


def _list_commits_handler(client: GitHubClient) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        params: dict[str, str | int | None] = {
            key: optional_str(arguments, key, "list_commits")
            for key in ("sha", "path", "author", "since", "until")
        }
        params.update(_paging(arguments, "list_commits"))
        commits = client.list_commits(params)
        return {"commits": [commit_summary(commit, client) for commit in commits]}

    return handler


def _commit_status_handler(client: GitHubClient) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        ref = required_str(arguments, "ref", "get_commit_status")
        combined = client.get_combined_status(ref)
        checks = client.list_check_runs(ref)
        runs = client.list_workflow_runs({"head_sha": ref, "per_page": STATUS_RUNS_PER_PAGE})
        return {
            "state": combined.get("state"),
            "statuses": [
                {
                    "context": status.get("context"),
                    "state": status.get("state"),
                    "description": status.get("description"),
                    "target_url": status.get("target_url"),
                    "created_at": status.get("created_at"),
                    "updated_at": status.get("updated_at"),
                }
                for status in _items(combined, "statuses")
            ],
            "checks": [check_run_summary(check) for check in _items(checks, "check_runs")],
            "runs": [run_summary(run) for run in _items(runs, "workflow_runs")],
        }

    return handler


def _list_check_runs_handler(client: GitHubClient) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        ref = required_str(arguments, "ref", "list_check_runs")
        payload = client.list_check_runs(ref)
        return {
            "total_count": payload.get("total_count"),
            "check_runs": [check_run_summary(check) for check in _items(payload, "check_runs")],
        }

    return handler


def _list_workflows_handler(client: GitHubClient) -> ToolHandler:
    def handler(_: dict[str, object]) -> dict[str, object]:
        payload = client.list_workflows()
        keys = ("id", "name", "path", "state", "html_url", "created_at", "updated_at")
        return {
            "workflows": [
                {key: workflow.get(key) for key in keys}
                for workflow in _items(payload, "workflows")
            ]
        }

    return handler


def _list_workflow_files_handler(client: GitHubClient) -> ToolHandler:
    def handler(_: dict[str, object]) -> dict[str, object]:
        try:
            entries = client.list_directory(WORKFLOWS_DIR)
        except UpstreamError as error:
            if error.status == 404:
                return {"files": []}
            raise
        files = [
            {
                "name": entry.get("name"),
                "path": entry.get("path"),
                "download_url": entry.get("download_url"),
            }
            for entry in entries
            if entry.get("type") == "file"
            and isinstance(entry.get("name"), str)
            and WORKFLOW_FILE_PATTERN.search(str(entry["name"]))
        ]
        return {"files": files}

    return handler


def _get_workflow_file_handler(session: RepoSession) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        path = required_str(arguments, "path", "get_workflow_file")
        ref = optional_str(arguments, "ref", "get_workflow_file")
        docs = session.fetch([], path=path, ref=ref)
        doc = docs[0]
        if "error" in doc.metadata:
            return {"path": path, "content": "", "error": doc.text}
        return {"path": path, "content": doc.text}

    return handler


def _list_workflow_runs_handler(client: GitHubClient) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        params: dict[str, str | int | None] = {
            key: optional_str(arguments, key, "list_workflow_runs")
            for key in ("branch", "event", "status")
        }
        params.update(_paging(arguments, "list_workflow_runs"))
        payload = client.list_workflow_runs(params)
        return {"runs": [run_summary(run) for run in _items(payload, "workflow_runs")]}

    return handler


def _get_workflow_run_handler(client: GitHubClient) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        run_id = required_int(arguments, "run_id", "get_workflow_run")
        return {"run": run_summary(client.get_workflow_run(run_id))}

    return handler


def _list_run_jobs_handler(client: GitHubClient) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        run_id = required_int(arguments, "run_id", "list_run_jobs")
        payload = client.list_run_jobs(run_id, _paging(arguments, "list_run_jobs"))
        step_keys = ("name", "status", "conclusion", "number", "started_at", "completed_at")
        jobs = [
            {
                "id": job.get("id"),
                "name": job.get("name"),
                "status": job.get("status"),
                "conclusion": job.get("conclusion"),
                "started_at": job.get("started_at"),
                "completed_at": job.get("completed_at"),
                "html_url": job.get("html_url"),
                "steps": [
                    {key: step.get(key) for key in step_keys} for step in _items(job, "steps")
                ],
            }
            for job in _items(payload, "jobs")
        ]
        return {"jobs": jobs}

    return handler
