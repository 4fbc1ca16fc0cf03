"""Result identifiers, records and the session locator index."""

from .identifiers import (
    CATEGORY_ORDER,
    VALID_TAGS,
    Category,
    CodeId,
    CommitId,
    IssueId,
    PathId,
    PullRequestId,
    ResultIdentifier,
    UnknownId,
    format_identifier,
    parse_identifier,
)
from .locator import ResourceLocatorIndex
from .mappers import (
    build_snippet,
    map_branch_tree_entry,
    map_code_item,
    map_commit_item,
    map_issue_item,
    map_pull_request_item,
)
from .models import Doc, IndexEntry, ResultRecord

__all__ = [
    "CATEGORY_ORDER",
    "Category",
    "CodeId",
    "CommitId",
    "Doc",
    "IndexEntry",
    "IssueId",
    "PathId",
    "PullRequestId",
    "ResourceLocatorIndex",
    "ResultIdentifier",
    "ResultRecord",
    "UnknownId",
    "VALID_TAGS",
    "build_snippet",
    "format_identifier",
    "map_branch_tree_entry",
    "map_code_item",
    "map_commit_item",
    "map_issue_item",
    "map_pull_request_item",
    "parse_identifier",
]
