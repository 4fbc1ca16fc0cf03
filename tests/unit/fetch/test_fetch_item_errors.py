from __future__ import annotations

from conftest import PREFIX, FakeGitHub

from gh_repo_mcp.fetch import FETCH_FAILED_TITLE


def test_failed_item_does_not_abort_the_batch(github: FakeGitHub) -> None:
    github.fail(f"{PREFIX}/issues/1", 404, "Not Found")
    github.raw(f"{PREFIX}/contents/README.md", b"ok\n")

    docs = github.session().fetch(["issue:1", "README.md"])

    assert [doc.id for doc in docs] == ["issue:1", "README.md"]
    failed, fetched = docs
    assert failed.title == FETCH_FAILED_TITLE
    assert failed.metadata["status"] == 404
    assert "GitHub API 404" in str(failed.metadata["error"])
    assert fetched.text == "ok\n"


def test_traversal_path_becomes_blocked_error_doc(github: FakeGitHub) -> None:
    [doc] = github.session().fetch(["../outside.txt"])

    assert doc.title == FETCH_FAILED_TITLE
    assert doc.metadata["status"] == 400
    assert github.requests == []


def test_undecodable_blob_yields_binary_doc(github: FakeGitHub) -> None:
    github.raw(f"{PREFIX}/contents/logo.png", b"\x89PNG\r\n\x1a\n\xff\xfe")

    [doc] = github.session().fetch(["logo.png"])

    assert doc.text == ""
    assert doc.metadata["binary"] is True


def test_corrupt_base64_blob_yields_binary_doc(github: FakeGitHub) -> None:
    github.search_issues(issues=[], pulls=[])
    github.search("commits", [])
    github.search("code", [{"sha": "bad0", "path": "x.bin"}])
    github.json(f"{PREFIX}/git/blobs/bad0", {"encoding": "base64", "content": "@@@", "size": 3})
    session = github.session()
    session.search("x")

    [doc] = session.fetch(["code:bad0"])

    assert doc.title == "x.bin"
    assert doc.text == ""
    assert doc.metadata["binary"] is True
