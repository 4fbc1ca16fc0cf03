from __future__ import annotations

from collections.abc import Callable

from conftest import PREFIX, FakeGitHub, issue_item

from gh_repo_mcp.server import StdioServer

ServerFactory = Callable[..., StdioServer]


def _empty_search(github: FakeGitHub) -> None:
    github.search_issues(issues=[], pulls=[])
    github.search("commits", [])
    github.search("code", [])


def test_search_without_hits_returns_empty_results(
    make_server: ServerFactory,
    github: FakeGitHub,
) -> None:
    _empty_search(github)

    response = make_server().handle_payload(
        {"id": "req-1", "method": "search", "params": {"query": "nothing"}}
    )

    assert response["ok"] is True
    assert response["result"] == {"results": []}
    assert response["warnings"] == []


def test_search_code_qualifiers_are_forwarded(
    make_server: ServerFactory,
    github: FakeGitHub,
) -> None:
    _empty_search(github)

    make_server().handle_payload(
        {
            "id": "req-2",
            "method": "search",
            "params": {"query": "parser", "language": "python", "extension": "py"},
        }
    )

    code_request = next(r for r in github.requests if r.url.path == "/search/code")
    assert code_request.url.params["q"].endswith("in:file language:python extension:py")


def test_partial_failure_surfaces_as_warning(
    make_server: ServerFactory,
    github: FakeGitHub,
) -> None:
    github.search_issues(issues=[issue_item(1, "a")], pulls=[])
    github.search("commits", [])
    github.fail("/search/code", 403, "forbidden")

    response = make_server().handle_payload(
        {"id": "req-3", "method": "search", "params": {"query": "a"}}
    )

    assert response["ok"] is True
    assert response["result"] == {
        "results": [
            {
                "id": "issue:1",
                "title": "a",
                "url": "https://github.com/octo/demo/issues/1",
            }
        ]
    }
    [warning] = response["warnings"]
    assert warning.startswith("code search failed: GitHub API 403")


def test_fetch_accepts_single_id_string(make_server: ServerFactory, github: FakeGitHub) -> None:
    github.raw(f"{PREFIX}/contents/README.md", b"hi\n")

    response = make_server().handle_payload(
        {"id": "req-4", "method": "fetch", "params": {"id": "README.md"}}
    )

    assert response["ok"] is True
    [doc] = response["result"]["files"]
    assert doc["text"] == "hi\n"
    assert set(doc.keys()) == {"id", "title", "text", "url", "metadata"}


def test_fetch_requires_ids_or_path(make_server: ServerFactory) -> None:
    response = make_server().handle_payload({"id": "req-5", "method": "fetch", "params": {}})

    assert response["error"] == {"code": "INVALID_PARAMS", "message": "fetch requires ids or path."}


def test_fetch_rejects_non_string_ids(make_server: ServerFactory) -> None:
    response = make_server().handle_payload(
        {"id": "req-6", "method": "fetch", "params": {"ids": ["issue:1", 2]}}
    )

    assert response["error"] == {
        "code": "INVALID_PARAMS",
        "message": "fetch ids must contain only non-empty strings.",
    }
