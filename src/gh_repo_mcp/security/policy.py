"""Result and batch limits applied to tool arguments."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class SecurityLimits:
    """Runtime limits for upstream volume and tool responses."""

    max_results_per_category: int = 10
    branch_commit_window: int = 100
    max_fetch_ids: int = 20
    max_total_bytes_per_response: int = 1024 * 1024


@dataclass(slots=True, frozen=True)
class PolicyBlockedError(Exception):
    """Raised when a requested volume exceeds a configured limit."""

    reason: str
    hint: str


def enforce_result_limit(limit: int, limits: SecurityLimits) -> None:
    """Raise PolicyBlockedError when a per-category limit exceeds the configured cap."""
    if limit > limits.max_results_per_category:
        raise PolicyBlockedError(
            reason="Requested limit exceeds max_results_per_category.",
            hint="Reduce limit or adjust the configured per-category limit.",
        )


def enforce_fetch_batch_limit(count: int, limits: SecurityLimits) -> None:
    """Raise PolicyBlockedError when a fetch batch is larger than max_fetch_ids."""
    if count > limits.max_fetch_ids:
        raise PolicyBlockedError(
            reason="Requested ids exceed max_fetch_ids limit.",
            hint="Split the fetch into smaller batches.",
        )
