from __future__ import annotations

from conftest import FakeGitHub, code_item, commit_item, issue_item, pull_item


def test_results_are_grouped_issue_pr_commit_code(github: FakeGitHub) -> None:
    github.search_issues(
        issues=[issue_item(1, "Parser crash"), issue_item(2, "Parser slow")],
        pulls=[pull_item(3, "Fix parser")],
    )
    github.search("commits", [commit_item("aaa111", "parser: handle tabs")])
    github.search("code", [code_item("bbb222", "src/parser.py", "class Parser:")])
    session = github.session()

    outcome = session.search("parser")

    assert outcome.failures == []
    assert [record.id for record in outcome.results] == [
        "issue:1",
        "issue:2",
        "pr:3",
        "commit:aaa111",
        "code:bbb222",
    ]


def test_limit_applies_per_category(github: FakeGitHub) -> None:
    github.search_issues(issues=[issue_item(n, f"i{n}") for n in range(1, 6)], pulls=[])
    github.search("commits", [commit_item(f"c{n}", "m") for n in range(5)])
    github.search("code", [])
    session = github.session()

    outcome = session.search("x", limit=2)

    assert [record.id for record in outcome.results] == [
        "issue:1",
        "issue:2",
        "commit:c0",
        "commit:c1",
    ]
    search_requests = [r for r in github.requests if r.url.path.startswith("/search/")]
    assert {r.url.params["per_page"] for r in search_requests} == {"2"}


def test_zero_hits_everywhere_is_an_empty_success(github: FakeGitHub) -> None:
    github.search_issues(issues=[], pulls=[])
    github.search("commits", [])
    github.search("code", [])

    outcome = github.session().search("nothing-matches")

    assert outcome.results == []
    assert outcome.failures == []
    assert outcome.all_failed is False


def test_code_results_are_indexed_for_fetch(github: FakeGitHub) -> None:
    github.search_issues(issues=[], pulls=[])
    github.search("commits", [])
    github.search("code", [code_item("bbb222", "src/parser.py")])
    session = github.session()

    session.search("parser")

    assert "code:bbb222" in session.index
    assert len(session.index) == 1
