from __future__ import annotations

from conftest import code_item, commit_item, issue_item

from gh_repo_mcp.index import (
    ResourceLocatorIndex,
    build_snippet,
    map_branch_tree_entry,
    map_code_item,
    map_commit_item,
    map_issue_item,
    map_pull_request_item,
)
from gh_repo_mcp.upstream import RepositoryScope

SCOPE = RepositoryScope(owner="octo", repo="demo")


def test_code_item_is_indexed_under_blob_identifier() -> None:
    index = ResourceLocatorIndex()

    record = map_code_item(code_item("abc123", "src/app.py", "def main():"), SCOPE, index)

    assert record is not None
    assert record.id == "code:abc123"
    assert record.title == "src/app.py"
    assert record.path == "src/app.py"
    assert record.snippet == "def main():"
    entry = index.get("code:abc123")
    assert entry is not None
    assert entry.content_hash == "abc123"
    assert entry.path == "src/app.py"
    assert entry.canonical_url == record.url


def test_code_item_without_html_url_points_at_head_blob() -> None:
    index = ResourceLocatorIndex()
    item = code_item("abc123", "src/app.py")
    del item["html_url"]

    record = map_code_item(item, SCOPE, index)

    assert record is not None
    assert record.url == "https://github.com/octo/demo/blob/HEAD/src/app.py"
    assert record.snippet is None


def test_code_item_without_sha_is_skipped() -> None:
    index = ResourceLocatorIndex()

    assert map_code_item({"path": "a.py"}, SCOPE, index) is None
    assert len(index) == 0


def test_issue_and_pull_request_fall_back_to_numbered_titles() -> None:
    issue = map_issue_item(issue_item(5, "", "line one\n\nline two"), SCOPE)
    pull = map_pull_request_item({"number": 9, "html_url": "u"}, SCOPE)

    assert issue is not None and pull is not None
    assert issue.title == "Issue #5"
    assert issue.snippet == "line one\nline two"
    assert pull.title == "PR #9"
    assert pull.to_dict() == {"id": "pr:9", "title": "PR #9", "url": "u"}


def test_commit_title_is_first_message_line() -> None:
    record = map_commit_item(commit_item("deadbeef00", "\nFix parser\n\nLonger body"), SCOPE)

    assert record is not None
    assert record.id == "commit:deadbeef00"
    assert record.title == "Fix parser"


def test_commit_without_message_uses_short_sha() -> None:
    record = map_commit_item({"sha": "deadbeef00"}, SCOPE)

    assert record is not None
    assert record.title == "Commit deadbee"
    assert record.url == "https://github.com/octo/demo/commit/deadbeef00"


def test_issue_and_pull_request_without_html_url_link_to_repository() -> None:
    issue = map_issue_item({"number": 5, "title": "Crash"}, SCOPE)
    pull = map_pull_request_item({"number": 9, "title": "Fix"}, SCOPE)

    assert issue is not None and pull is not None
    assert issue.url == "https://github.com/octo/demo/issues/5"
    assert pull.url == "https://github.com/octo/demo/pull/9"


def test_branch_tree_entry_is_indexed_at_its_branch() -> None:
    index = ResourceLocatorIndex()

    record = map_branch_tree_entry(
        {"path": "lib/x.py", "type": "blob"}, SCOPE, "feature/y", index
    )

    assert record is not None
    assert record.id == "code:lib/x.py"
    assert record.url == "https://github.com/octo/demo/blob/feature/y/lib/x.py"
    entry = index.get("code:lib/x.py")
    assert entry is not None
    assert entry.ref == "feature/y"
    assert entry.content_hash is None
    assert entry.canonical_url == record.url


def test_build_snippet_is_bounded() -> None:
    text = "\n".join(["x" * 200] * 5)

    snippet = build_snippet(text)

    assert len(snippet) == 300
    assert build_snippet("a\n\n\nb\nc\nd") == "a\nb\nc"
