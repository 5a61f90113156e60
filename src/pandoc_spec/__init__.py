"""Primary public API for pandoc-spec."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _pkg_version

from pandoc_spec.api import PandocSpec, RunPlan, pandoc_spec
from pandoc_spec.core.exceptions import (
    OptionsError,
    PandocSpecError,
    PipelineError,
    ResourceCopyError,
    StageFailedError,
    StageSignalError,
    StageSpawnError,
)
from pandoc_spec.core.options import (
    AdditionalOption,
    Filter,
    Options,
    Style,
    Variable,
    merge_options,
    resolve_options,
)


try:
    __version__ = _pkg_version("pandoc-spec")
except PackageNotFoundError:
    __version__ = "0.0.0"


__all__ = [
    "AdditionalOption",
    "Filter",
    "Options",
    "OptionsError",
    "PandocSpec",
    "PandocSpecError",
    "PipelineError",
    "ResourceCopyError",
    "RunPlan",
    "StageFailedError",
    "StageSignalError",
    "StageSpawnError",
    "Style",
    "Variable",
    "__version__",
    "merge_options",
    "pandoc_spec",
    "resolve_options",
]
