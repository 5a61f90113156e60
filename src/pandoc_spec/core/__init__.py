"""Pipeline building blocks shared by the library API and the CLI."""

from __future__ import annotations

from .arguments import arg, build_reader_args, build_writer_args, template_variables
from .exceptions import (
    OptionsError,
    PandocSpecError,
    PipelineError,
    ResourceCopyError,
    StageFailedError,
    StageSignalError,
    StageSpawnError,
)
from .options import (
    AdditionalOption,
    Filter,
    Options,
    Style,
    Variable,
    merge_options,
    resolve_options,
)
from .pipeline import PipelinePlan, PipelineStage, build_pipeline
from .supervisor import ChainState, ProcessChain, StageOutcome, run_chain


__all__ = [
    "AdditionalOption",
    "ChainState",
    "Filter",
    "Options",
    "OptionsError",
    "PandocSpecError",
    "PipelineError",
    "PipelinePlan",
    "PipelineStage",
    "ProcessChain",
    "ResourceCopyError",
    "StageFailedError",
    "StageOutcome",
    "StageSignalError",
    "StageSpawnError",
    "Style",
    "Variable",
    "arg",
    "build_pipeline",
    "build_reader_args",
    "build_writer_args",
    "merge_options",
    "resolve_options",
    "run_chain",
    "template_variables",
]
