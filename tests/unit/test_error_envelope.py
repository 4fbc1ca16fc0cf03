from __future__ import annotations

import json
from collections.abc import Callable

from conftest import PREFIX, FakeGitHub

from gh_repo_mcp.server import StdioServer

ServerFactory = Callable[..., StdioServer]


def test_malformed_json_returns_invalid_json_error(make_server: ServerFactory) -> None:
    server = make_server()

    response = server.handle_json_line("{not-json")

    assert response["ok"] is False
    assert response["error"] == {
        "code": "INVALID_JSON",
        "message": "Request must be valid JSON.",
    }
    assert str(response["request_id"]).startswith("req-")


def test_unknown_tool_returns_explicit_error(make_server: ServerFactory) -> None:
    server = make_server()

    response = server.handle_payload({"id": "abc-123", "method": "wiki", "params": {"k": "v"}})

    assert response["ok"] is False
    assert response["request_id"] == "abc-123"
    assert response["error"] == {"code": "UNKNOWN_TOOL", "message": "Unknown tool: wiki"}


def test_invalid_tools_call_params_returns_invalid_params_error(
    make_server: ServerFactory,
) -> None:
    server = make_server()
    payload = {"id": 7, "method": "tools/call", "params": {"name": "status", "arguments": []}}

    response = server.handle_payload(json.loads(json.dumps(payload)))

    assert response["ok"] is False
    assert response["request_id"] == "7"
    assert response["error"] == {
        "code": "INVALID_PARAMS",
        "message": "tools/call params.arguments must be an object.",
    }


def test_invalid_argument_type_returns_invalid_params(make_server: ServerFactory) -> None:
    server = make_server()

    response = server.handle_payload(
        {"id": "req-bad", "method": "search", "params": {"query": 12}}
    )

    assert response["error"] == {
        "code": "INVALID_PARAMS",
        "message": "search query must be a string.",
    }


def test_upstream_failure_in_repository_tool_returns_upstream_error(
    make_server: ServerFactory,
    github: FakeGitHub,
) -> None:
    github.fail(f"{PREFIX}/pulls/3", 404, "Not Found")
    server = make_server()

    response = server.handle_payload(
        {"id": "req-up", "method": "get_pr", "params": {"number": 3}}
    )

    assert response["ok"] is False
    assert response["blocked"] is False
    error = response["error"]
    assert isinstance(error, dict)
    assert error["code"] == "UPSTREAM_ERROR"
    assert str(error["message"]).startswith("GitHub API 404 Not Found")


def test_all_categories_failing_is_an_in_band_tool_error(
    make_server: ServerFactory,
    github: FakeGitHub,
) -> None:
    for kind in ("issues", "commits", "code"):
        github.fail(f"/search/{kind}", 401, "Bad credentials")
    server = make_server()

    response = server.handle_payload({"id": "req-s", "method": "search", "params": {"query": "x"}})

    assert response["ok"] is True
    result = response["result"]
    assert isinstance(result, dict)
    assert str(result["error"]).startswith("GitHub API 401")
    assert "results" not in result
    assert len(response["warnings"]) == 4
