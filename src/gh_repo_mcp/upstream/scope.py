"""Repository scope carried by each session."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote


@dataclass(slots=True, frozen=True)
class RepositoryScope:
    """Single repository bound to a session."""

    owner: str
    repo: str
    web_url: str = "https://github.com"

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def api_prefix(self) -> str:
        """Path prefix for repository-scoped REST endpoints."""
        return f"/repos/{quote(self.owner, safe='')}/{quote(self.repo, safe='')}"

    def blob_url(self, ref: str, path: str) -> str:
        """Browsable URL of a file at a ref."""
        return f"{self.web_url}/{self.full_name}/blob/{ref}/{path}"

    def commit_url(self, sha: str) -> str:
        return f"{self.web_url}/{self.full_name}/commit/{sha}"

    def issue_url(self, number: int) -> str:
        return f"{self.web_url}/{self.full_name}/issues/{number}"

    def pull_url(self, number: int) -> str:
        return f"{self.web_url}/{self.full_name}/pull/{number}"
