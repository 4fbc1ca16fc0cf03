"""Argument validation shared by tool handlers."""

from __future__ import annotations

from collections.abc import Collection

from gh_repo_mcp.tools.registry import ToolDispatchError


def invalid(tool: str, message: str) -> ToolDispatchError:
    return ToolDispatchError(code="INVALID_PARAMS", message=f"{tool} {message}")


def optional_str(arguments: dict[str, object], key: str, tool: str) -> str | None:
    """Return a stripped non-empty string, None when absent, or raise INVALID_PARAMS."""
    value = arguments.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise invalid(tool, f"{key} must be a non-empty string.")
    return value.strip()


def required_str(arguments: dict[str, object], key: str, tool: str) -> str:
    value = optional_str(arguments, key, tool)
    if value is None:
        raise invalid(tool, f"{key} must be a non-empty string.")
    return value


def optional_int(
    arguments: dict[str, object],
    key: str,
    tool: str,
    minimum: int = 1,
    maximum: int | None = None,
) -> int | None:
    value = arguments.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise invalid(tool, f"{key} must be an integer.")
    if value < minimum:
        raise invalid(tool, f"{key} must be >= {minimum}.")
    if maximum is not None and value > maximum:
        raise invalid(tool, f"{key} must be <= {maximum}.")
    return value


def required_int(arguments: dict[str, object], key: str, tool: str) -> int:
    value = optional_int(arguments, key, tool)
    if value is None:
        raise invalid(tool, f"{key} must be an integer.")
    return value


def optional_choice(
    arguments: dict[str, object],
    key: str,
    tool: str,
    choices: Collection[str],
) -> str | None:
    value = optional_str(arguments, key, tool)
    if value is not None and value not in choices:
        allowed = ", ".join(sorted(choices))
        raise invalid(tool, f"{key} must be one of: {allowed}.")
    return value
