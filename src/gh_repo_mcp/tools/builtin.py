"""Core search/fetch tools plus status and audit log."""

from __future__ import annotations

from collections.abc import Callable

from gh_repo_mcp.config import ServerConfig
from gh_repo_mcp.security import enforce_fetch_batch_limit, enforce_result_limit
from gh_repo_mcp.session import RepoSession
from gh_repo_mcp.tools.arguments import invalid, optional_int, optional_str
from gh_repo_mcp.tools.registry import ToolHandler, ToolRegistry

SEARCH_DESCRIPTION = (
    "Search issues, pull requests, commits and code in this repository and return "
    "ids usable by fetch(). Arguments: query (string), optional branch, limit, "
    "language, filename, extension."
)
FETCH_DESCRIPTION = (
    "Fetch content for ids returned by search() or repository-relative paths. "
    "Arguments: ids (list of strings), optional path, ref, branch."
)
AUDIT_LOG_MAX_ENTRIES = 50


def register_builtin_tools(
    registry: ToolRegistry,
    session: RepoSession,
    config: ServerConfig,
    read_audit_entries: Callable[[str | None, int], list[dict[str, object]]],
) -> None:
    """Register search, fetch, status and audit_log."""
    registry.register("search", _search_handler(session), SEARCH_DESCRIPTION)
    registry.register("fetch", _fetch_handler(session), FETCH_DESCRIPTION)
    registry.register(
        "status",
        _status_handler(session, config, registry),
        "Bound repository, locator index size, limits and effective config.",
    )
    registry.register(
        "audit_log",
        _audit_log_handler(read_audit_entries),
        "Recent sanitized request audit entries.",
    )


def _search_handler(session: RepoSession) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        query_value = arguments.get("query", "")
        if not isinstance(query_value, str):
            raise invalid("search", "query must be a string.")
        branch = optional_str(arguments, "branch", "search")
        limit = optional_int(arguments, "limit", "search")
        if limit is not None:
            enforce_result_limit(limit, session.limits)

        qualifiers: list[str] = []
        for key in ("language", "filename", "extension"):
            value = optional_str(arguments, key, "search")
            if value is not None:
                qualifiers.append(f"{key}:{value}")

        outcome = session.search(
            query_value, branch=branch, limit=limit, code_qualifiers=qualifiers
        )
        warnings = [failure.to_warning() for failure in outcome.failures]
        if outcome.all_failed:
            return {"error": outcome.failures[0].message, "__warnings__": warnings}
        response: dict[str, object] = {
            "results": [record.to_dict() for record in outcome.results]
        }
        if warnings:
            response["__warnings__"] = warnings
        return response

    return handler


def _fetch_ids(arguments: dict[str, object]) -> list[str]:
    ids_value = arguments.get("ids", arguments.get("id"))
    if ids_value is None:
        return []
    if isinstance(ids_value, str):
        ids_value = [ids_value]
    if not isinstance(ids_value, list):
        raise invalid("fetch", "ids must be a list of strings.")
    ids: list[str] = []
    for item in ids_value:
        if not isinstance(item, str) or not item.strip():
            raise invalid("fetch", "ids must contain only non-empty strings.")
        ids.append(item.strip())
    return ids


def _fetch_handler(session: RepoSession) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        ids = _fetch_ids(arguments)
        path = optional_str(arguments, "path", "fetch")
        ref = optional_str(arguments, "ref", "fetch")
        branch = optional_str(arguments, "branch", "fetch")
        if not ids and path is None:
            raise invalid("fetch", "requires ids or path.")
        enforce_fetch_batch_limit(len(ids) + (1 if path is not None else 0), session.limits)

        docs = session.fetch(ids, path=path, ref=ref, branch=branch)
        return {"files": [doc.to_dict() for doc in docs]}

    return handler


def _status_handler(
    session: RepoSession,
    config: ServerConfig,
    registry: ToolRegistry,
) -> ToolHandler:
    def handler(_: dict[str, object]) -> dict[str, object]:
        return {
            "repository": session.scope.full_name,
            "indexed_result_count": len(session.index),
            "tools": list(registry.names()),
            "limits_summary": {
                "max_results_per_category": session.limits.max_results_per_category,
                "branch_commit_window": session.limits.branch_commit_window,
                "max_fetch_ids": session.limits.max_fetch_ids,
                "max_total_bytes_per_response": session.limits.max_total_bytes_per_response,
            },
            "effective_config": config.to_public_dict(),
        }

    return handler


def _audit_log_handler(
    read_audit_entries: Callable[[str | None, int], list[dict[str, object]]],
) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        since_value = arguments.get("since")
        limit_value = arguments.get("limit", AUDIT_LOG_MAX_ENTRIES)

        since: str | None = since_value if isinstance(since_value, str) else None
        limit = limit_value if isinstance(limit_value, int) else AUDIT_LOG_MAX_ENTRIES
        limit = max(1, min(limit, AUDIT_LOG_MAX_ENTRIES))

        return {"entries": read_audit_entries(since, limit)}

    return handler
