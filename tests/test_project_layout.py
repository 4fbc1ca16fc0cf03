from __future__ import annotations

from pathlib import Path


def test_required_package_paths_exist() -> None:
    root = Path(__file__).resolve().parents[1]
    required = [
        "pyproject.toml",
        "src/gh_repo_mcp/server.py",
        "src/gh_repo_mcp/session.py",
        "src/gh_repo_mcp/config.py",
        "src/gh_repo_mcp/tools/__init__.py",
        "src/gh_repo_mcp/index/__init__.py",
        "src/gh_repo_mcp/search/__init__.py",
        "src/gh_repo_mcp/fetch/__init__.py",
        "src/gh_repo_mcp/upstream/__init__.py",
        "src/gh_repo_mcp/security/__init__.py",
        "src/gh_repo_mcp/logging/__init__.py",
    ]
    for rel in required:
        assert (root / rel).exists(), rel
