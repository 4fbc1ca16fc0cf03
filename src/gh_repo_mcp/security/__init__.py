"""Path safety and limit primitives."""

from .paths import PathBlockedError, normalize_repo_path
from .policy import (
    PolicyBlockedError,
    SecurityLimits,
    enforce_fetch_batch_limit,
    enforce_result_limit,
)

__all__ = [
    "PathBlockedError",
    "PolicyBlockedError",
    "SecurityLimits",
    "enforce_fetch_batch_limit",
    "enforce_result_limit",
    "normalize_repo_path",
]
