"""Upstream GitHub API access."""

from .client import GitHubClient, build_headers
from .errors import UpstreamError, body_excerpt
from .scope import RepositoryScope

__all__ = ["GitHubClient", "RepositoryScope", "UpstreamError", "body_excerpt", "build_headers"]
