"""Parsers turning compound CLI values into option mappings."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import typer


_FILTER_TYPES = ("lua", "json")


def _entries(values: Iterable[str] | None) -> list[str]:
    if not values:
        return []
    return [value.strip() for value in values if value and value.strip()]


def _split(raw: str) -> tuple[str, str | None]:
    key, sep, value = raw.partition(":")
    return key.strip(), value if sep else None


def parse_filters(values: Iterable[str] | None) -> list[dict[str, Any]]:
    """Parse ``[lua|json:]path`` declarations."""
    filters: list[dict[str, Any]] = []
    for raw in _entries(values):
        prefix, sep, remainder = raw.partition(":")
        if sep and prefix in _FILTER_TYPES:
            filter_type, path = prefix, remainder.strip()
        elif sep and prefix.isalpha() and len(prefix) > 1:
            # Single letters are drive letters; longer words are mistyped filter types.
            raise typer.BadParameter(
                f"Unknown filter type '{prefix}' in '{raw}', expected 'lua' or 'json'.",
                param_hint="--filter",
            )
        else:
            filter_type, path = "lua", raw
        if not path:
            raise typer.BadParameter(
                f"Invalid filter '{raw}', expected format '[lua|json:]path'.",
                param_hint="--filter",
            )
        filters.append({"type": filter_type, "path": path})
    return filters


def parse_variables(values: Iterable[str] | None) -> list[dict[str, Any]]:
    """Parse ``key[:value]`` template variables."""
    variables: list[dict[str, Any]] = []
    for raw in _entries(values):
        key, value = _split(raw)
        if not key:
            raise typer.BadParameter(
                f"Invalid variable '{raw}', expected format 'key[:value]'.",
                param_hint="--variable",
            )
        variables.append({"key": key, "value": value})
    return variables


def parse_styles(values: Iterable[str] | None) -> list[dict[str, Any]]:
    """Parse ``name:className`` style declarations."""
    styles: list[dict[str, Any]] = []
    for raw in _entries(values):
        name, class_name = _split(raw)
        if not name or class_name is None or not class_name.strip():
            raise typer.BadParameter(
                f"Invalid style '{raw}', expected format 'name:className'.",
                param_hint="--style",
            )
        styles.append({"name": name, "className": class_name.strip()})
    return styles


def parse_additional_options(
    values: Iterable[str] | None,
    *,
    param_hint: str,
) -> list[dict[str, Any]]:
    """Parse ``option[:value]`` passthrough options."""
    options: list[dict[str, Any]] = []
    for raw in _entries(values):
        option, value = _split(raw)
        if not option:
            raise typer.BadParameter(
                f"Invalid option '{raw}', expected format 'option[:value]'.",
                param_hint=param_hint,
            )
        options.append({"option": option, "value": value})
    return options


def list_or_none(values: list[Any]) -> list[Any] | None:
    """Return ``None`` for an empty list so it does not override the options file."""
    return values or None


__all__ = [
    "list_or_none",
    "parse_additional_options",
    "parse_filters",
    "parse_styles",
    "parse_variables",
]
