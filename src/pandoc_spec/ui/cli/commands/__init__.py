"""CLI command implementations."""

from __future__ import annotations

from .build import build


__all__ = ["build"]
