from __future__ import annotations

from pathlib import Path

import pytest

from gh_repo_mcp.config import CliOverrides, load_effective_config, parse_repository


def _write(tmp_path: Path, text: str) -> None:
    (tmp_path / "gh_repo_mcp.toml").write_text(text, encoding="utf-8")


def test_limit_above_cap_is_rejected(tmp_path: Path) -> None:
    _write(tmp_path, "[limits]\nmax_results_per_category = 101\n")

    with pytest.raises(ValueError, match="limits.max_results_per_category' must be <= 100"):
        load_effective_config(tmp_path, environ={})


def test_non_positive_limit_is_rejected(tmp_path: Path) -> None:
    _write(tmp_path, "[limits]\nbranch_commit_window = 0\n")

    with pytest.raises(ValueError, match="must be a positive integer"):
        load_effective_config(tmp_path, environ={})


def test_token_in_config_file_is_rejected(tmp_path: Path) -> None:
    _write(tmp_path, '[github]\ntoken = "ghp_x"\n')

    with pytest.raises(ValueError, match="GITHUB_TOKEN"):
        load_effective_config(tmp_path, environ={})


def test_section_must_be_a_table(tmp_path: Path) -> None:
    _write(tmp_path, 'limits = "none"\n')

    with pytest.raises(ValueError, match="Config section 'limits' must be a table."):
        load_effective_config(tmp_path, environ={})


def test_cli_override_above_cap_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="overrides.max_fetch_ids"):
        load_effective_config(tmp_path, overrides=CliOverrides(max_fetch_ids=500), environ={})


@pytest.mark.parametrize("value", ["octo", "octo/", "/demo", "octo/demo/extra"])
def test_repository_must_be_owner_slash_name(value: str) -> None:
    with pytest.raises(ValueError, match="owner/name"):
        parse_repository(value)
