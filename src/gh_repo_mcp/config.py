"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from gh_repo_mcp.security import SecurityLimits

CONFIG_FILE_NAME = "gh_repo_mcp.toml"
TOKEN_ENV_VAR = "GITHUB_TOKEN"

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_WEB_URL = "https://github.com"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_CONNECT_RETRIES = 2

MAX_RESULTS_PER_CATEGORY_CAP = 100
BRANCH_COMMIT_WINDOW_CAP = 100
MAX_FETCH_IDS_CAP = 100
MAX_TOTAL_BYTES_PER_RESPONSE_CAP = 4 * 1024 * 1024
CONNECT_RETRIES_CAP = 10


@dataclass(slots=True, frozen=True)
class RepositoryConfig:
    """Repository bound to the session."""

    owner: str | None
    name: str | None


@dataclass(slots=True, frozen=True)
class GitHubConfig:
    """Upstream API endpoint and transport settings."""

    api_url: str
    web_url: str
    timeout_seconds: float
    connect_retries: int
    token: str | None


@dataclass(slots=True, frozen=True)
class ServerConfig:
    """Fully merged server configuration."""

    config_dir: Path
    data_dir: Path
    repository: RepositoryConfig
    github: GitHubConfig
    limits: SecurityLimits

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot for tool responses."""
        return {
            "config_dir": str(self.config_dir),
            "data_dir": str(self.data_dir),
            "repository": {
                "owner": self.repository.owner,
                "name": self.repository.name,
            },
            "github": {
                "api_url": self.github.api_url,
                "web_url": self.github.web_url,
                "timeout_seconds": self.github.timeout_seconds,
                "connect_retries": self.github.connect_retries,
                "token_configured": self.github.token is not None,
            },
            "limits": {
                "max_results_per_category": self.limits.max_results_per_category,
                "branch_commit_window": self.limits.branch_commit_window,
                "max_fetch_ids": self.limits.max_fetch_ids,
                "max_total_bytes_per_response": self.limits.max_total_bytes_per_response,
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    data_dir: Path | None = None
    repository: str | None = None
    api_url: str | None = None
    timeout_seconds: float | None = None
    max_results_per_category: int | None = None
    branch_commit_window: int | None = None
    max_fetch_ids: int | None = None
    max_total_bytes_per_response: int | None = None


def default_config(config_dir: Path) -> ServerConfig:
    """Build default config rooted at a configuration directory."""
    resolved = config_dir.resolve()
    return ServerConfig(
        config_dir=resolved,
        data_dir=resolved / ".gh_repo_mcp",
        repository=RepositoryConfig(owner=None, name=None),
        github=GitHubConfig(
            api_url=DEFAULT_API_URL,
            web_url=DEFAULT_WEB_URL,
            timeout_seconds=DEFAULT_TIMEOUT_SECONDS,
            connect_retries=DEFAULT_CONNECT_RETRIES,
            token=None,
        ),
        limits=SecurityLimits(),
    )


def load_config_file(config_dir: Path) -> dict[str, object]:
    """Load optional gh_repo_mcp.toml from the config directory."""
    config_path = config_dir / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def parse_repository(value: str) -> RepositoryConfig:
    """Parse an 'owner/name' string."""
    owner, sep, name = value.strip().partition("/")
    if not sep or not owner or not name or "/" in name:
        raise ValueError(f"Repository '{value}' must have the form 'owner/name'.")
    return RepositoryConfig(owner=owner, name=name)


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _optional_str(value: object, name: str, default: str | None) -> str | None:
    if value is None:
        return default
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Config field '{name}' must be a non-empty string.")
    return value.strip()


def merge_config(
    base: ServerConfig,
    file_payload: dict[str, object],
    environ: Mapping[str, str],
    overrides: CliOverrides,
) -> ServerConfig:
    """Merge defaults, config file, environment, then CLI/startup overrides."""
    repository_payload = _get_table(file_payload, "repository")
    github_payload = _get_table(file_payload, "github")
    limits_payload = _get_table(file_payload, "limits")

    if "token" in github_payload:
        raise ValueError(
            f"Config field 'github.token' is not supported; set {TOKEN_ENV_VAR} instead."
        )

    repository = RepositoryConfig(
        owner=_optional_str(
            repository_payload.get("owner"), "repository.owner", base.repository.owner
        ),
        name=_optional_str(repository_payload.get("name"), "repository.name", base.repository.name),
    )
    api_url = _optional_str(github_payload.get("api_url"), "github.api_url", base.github.api_url)
    web_url = _optional_str(github_payload.get("web_url"), "github.web_url", base.github.web_url)
    timeout_seconds = _optional_positive_float(
        github_payload.get("timeout_seconds"),
        "github.timeout_seconds",
        base.github.timeout_seconds,
    )
    connect_retries = _optional_non_negative_int_with_cap(
        github_payload.get("connect_retries"),
        "github.connect_retries",
        base.github.connect_retries,
        CONNECT_RETRIES_CAP,
    )

    token = environ.get(TOKEN_ENV_VAR, "").strip() or base.github.token

    merged = ServerConfig(
        config_dir=base.config_dir,
        data_dir=base.data_dir,
        repository=repository,
        github=GitHubConfig(
            api_url=(api_url or DEFAULT_API_URL).rstrip("/"),
            web_url=(web_url or DEFAULT_WEB_URL).rstrip("/"),
            timeout_seconds=timeout_seconds,
            connect_retries=connect_retries,
            token=token,
        ),
        limits=_merge_limits(base.limits, limits_payload),
    )
    return apply_cli_overrides(merged, overrides)


def _merge_limits(base: SecurityLimits, payload: dict[str, object]) -> SecurityLimits:
    return SecurityLimits(
        max_results_per_category=_optional_positive_int_with_cap(
            payload.get("max_results_per_category"),
            "limits.max_results_per_category",
            base.max_results_per_category,
            MAX_RESULTS_PER_CATEGORY_CAP,
        ),
        branch_commit_window=_optional_positive_int_with_cap(
            payload.get("branch_commit_window"),
            "limits.branch_commit_window",
            base.branch_commit_window,
            BRANCH_COMMIT_WINDOW_CAP,
        ),
        max_fetch_ids=_optional_positive_int_with_cap(
            payload.get("max_fetch_ids"),
            "limits.max_fetch_ids",
            base.max_fetch_ids,
            MAX_FETCH_IDS_CAP,
        ),
        max_total_bytes_per_response=_optional_positive_int_with_cap(
            payload.get("max_total_bytes_per_response"),
            "limits.max_total_bytes_per_response",
            base.max_total_bytes_per_response,
            MAX_TOTAL_BYTES_PER_RESPONSE_CAP,
        ),
    )


def apply_cli_overrides(config: ServerConfig, overrides: CliOverrides) -> ServerConfig:
    """Apply startup overrides at highest precedence."""
    repository = config.repository
    if overrides.repository is not None:
        repository = parse_repository(overrides.repository)

    limits = SecurityLimits(
        max_results_per_category=_optional_positive_int_with_cap(
            overrides.max_results_per_category,
            "overrides.max_results_per_category",
            config.limits.max_results_per_category,
            MAX_RESULTS_PER_CATEGORY_CAP,
        ),
        branch_commit_window=_optional_positive_int_with_cap(
            overrides.branch_commit_window,
            "overrides.branch_commit_window",
            config.limits.branch_commit_window,
            BRANCH_COMMIT_WINDOW_CAP,
        ),
        max_fetch_ids=_optional_positive_int_with_cap(
            overrides.max_fetch_ids,
            "overrides.max_fetch_ids",
            config.limits.max_fetch_ids,
            MAX_FETCH_IDS_CAP,
        ),
        max_total_bytes_per_response=_optional_positive_int_with_cap(
            overrides.max_total_bytes_per_response,
            "overrides.max_total_bytes_per_response",
            config.limits.max_total_bytes_per_response,
            MAX_TOTAL_BYTES_PER_RESPONSE_CAP,
        ),
    )
    github = GitHubConfig(
        api_url=(overrides.api_url or config.github.api_url).rstrip("/"),
        web_url=config.github.web_url,
        timeout_seconds=_optional_positive_float(
            overrides.timeout_seconds,
            "overrides.timeout_seconds",
            config.github.timeout_seconds,
        ),
        connect_retries=config.github.connect_retries,
        token=config.github.token,
    )
    data_dir = overrides.data_dir or config.data_dir
    return ServerConfig(
        config_dir=config.config_dir,
        data_dir=data_dir.resolve(),
        repository=repository,
        github=github,
        limits=limits,
    )


def load_effective_config(
    config_dir: Path,
    overrides: CliOverrides | None = None,
    environ: Mapping[str, str] | None = None,
) -> ServerConfig:
    """Load effective config using merge order defaults -> file -> env -> overrides."""
    resolved = config_dir.resolve()
    base = default_config(resolved)
    payload = load_config_file(resolved)
    return merge_config(
        base,
        payload,
        os.environ if environ is None else environ,
        overrides or CliOverrides(),
    )


def _optional_positive_int_with_cap(
    value: object,
    name: str,
    default: int,
    cap: int | None,
) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Config field '{name}' must be a positive integer.")
    if cap is not None and value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value


def _optional_non_negative_int_with_cap(value: object, name: str, default: int, cap: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"Config field '{name}' must be a non-negative integer.")
    if value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value


def _optional_positive_float(value: object, name: str, default: float) -> float:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValueError(f"Config field '{name}' must be a positive number.")
    return float(value)
