from __future__ import annotations

from conftest import PREFIX, FakeGitHub, code_item


def test_sessions_never_share_locator_entries(github: FakeGitHub) -> None:
    github.search_issues(issues=[], pulls=[])
    github.search("commits", [])
    github.search("code", [code_item("beef02", "src/a.py")])
    github.json(f"{PREFIX}/git/blobs/beef02", {"encoding": "base64", "content": "YQ=="})
    first = github.session()
    second = github.session(owner="other", repo="thing")

    first.search("a")

    assert "code:beef02" in first.index
    assert len(second.index) == 0
    [doc] = second.fetch(["code:beef02"])
    assert doc.metadata["status"] == 404
    assert github.requests[-1].url.path == "/repos/other/thing/contents/beef02"
    assert first.fetch(["code:beef02"])[0].text == "a"
