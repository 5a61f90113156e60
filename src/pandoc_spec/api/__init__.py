"""Library entry points for running pandoc-spec from Python."""

from __future__ import annotations

from .service import LOG_LEVELS, PandocSpec, RunPlan, apply_log_level, pandoc_spec


__all__ = [
    "LOG_LEVELS",
    "PandocSpec",
    "RunPlan",
    "apply_log_level",
    "pandoc_spec",
]
