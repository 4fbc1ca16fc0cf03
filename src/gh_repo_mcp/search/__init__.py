"""Search aggregation across issues, pull requests, commits and code."""

from .aggregator import CategoryFailure, SearchAggregator, SearchOutcome
from .branch import scan_branch_code_paths, scan_branch_commits

__all__ = [
    "CategoryFailure",
    "SearchAggregator",
    "SearchOutcome",
    "scan_branch_code_paths",
    "scan_branch_commits",
]
