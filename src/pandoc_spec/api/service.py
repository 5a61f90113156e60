"""Run orchestration utilities for CLI and embedding integrations."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import logging
import os
from pathlib import Path
import shutil
from typing import Any

from pandoc_spec.core.arguments import (
    DEFAULT_OUTPUT_FORMAT,
    build_reader_args,
    build_writer_args,
    json_filter_commands,
    template_file,
)
from pandoc_spec.core.exceptions import PandocSpecError
from pandoc_spec.core.options import Options, resolve_options
from pandoc_spec.core.pipeline import PipelinePlan, build_pipeline, describe
from pandoc_spec.core.resources import resource_patterns
from pandoc_spec.core.supervisor import StageOutcome, run_chain
from pandoc_spec.core.watcher import ChangeWatcher, build_watch_spec, in_ci_environment


__all__ = [
    "LOG_LEVELS",
    "PandocSpec",
    "RunPlan",
    "apply_log_level",
    "pandoc_spec",
]

logger = logging.getLogger(__name__)

LOG_LEVELS = {
    "silly": logging.DEBUG,
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "critical": logging.CRITICAL,
}


def apply_log_level(level: str | None) -> None:
    """Apply a named log level to the package logger; unknown names are ignored."""
    if level is None:
        return
    resolved = LOG_LEVELS.get(level.strip().lower())
    if resolved is None:
        logger.warning("Unknown log level '%s' ignored", level)
        return
    logging.getLogger("pandoc_spec").setLevel(resolved)


@dataclass(slots=True)
class RunPlan:
    """Everything needed to execute one run, derived from resolved options."""

    options: Options
    options_file: Path
    input_directory: Path
    output_directory: Path
    pipeline: PipelinePlan
    resource_patterns: list[str] = field(default_factory=list)
    template_file: Path | None = None

    @property
    def output_path(self) -> Path:
        return (self.output_directory / self.options.output_file).resolve()


def _contains(directory: Path, path: Path) -> bool:
    return path == directory or directory in path.parents


class PandocSpec:
    """High-level façade that resolves options, runs the chain and optionally watches."""

    def __init__(
        self,
        parameter_options: Mapping[str, Any] | None = None,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.parameter_options = dict(parameter_options or {})
        self.environ = os.environ if environ is None else environ
        self.runs = 0
        self.watcher: ChangeWatcher | None = None

    def resolve(self) -> tuple[Options, Path]:
        """Resolve options afresh from the options file and the parameter overlay."""
        options, options_file = resolve_options(self.parameter_options)
        apply_log_level(options.log_level)
        return options, options_file

    def plan(self, options: Options, options_file: Path) -> RunPlan:
        """Derive the directories, stages and resources for a run."""
        input_directory = Path(options.input_directory or ".").resolve()
        output_directory = Path(options.output_directory or ".").resolve()

        reader_args = build_reader_args(options, input_directory=input_directory)
        writer_args = build_writer_args(
            options,
            input_directory=input_directory,
            output_directory=output_directory,
        )
        pipeline = build_pipeline(
            reader_args,
            writer_args,
            json_filter_commands(options, input_directory=input_directory),
            options.output_format or DEFAULT_OUTPUT_FORMAT,
        )

        logger.debug("Input directory: %s", input_directory)
        logger.debug("Output directory: %s", output_directory)
        logger.debug("Pipeline: %s", describe(pipeline))

        return RunPlan(
            options=options,
            options_file=options_file,
            input_directory=input_directory,
            output_directory=output_directory,
            pipeline=pipeline,
            resource_patterns=resource_patterns(options),
            template_file=template_file(options, input_directory),
        )

    def _clean_output(self, plan: RunPlan) -> None:
        if _contains(plan.output_directory, plan.input_directory):
            raise PandocSpecError(
                f"Refusing to clean output directory {plan.output_directory}: "
                "it contains the input directory"
            )
        if plan.output_directory.exists():
            logger.info("Cleaning output directory %s", plan.output_directory)
            shutil.rmtree(plan.output_directory)

    def run_once(self) -> RunPlan:
        """Resolve, plan and execute a single run."""
        first = self.runs == 0
        self.runs += 1
        plan = self.plan(*self.resolve())

        if first and plan.options.clean_output:
            self._clean_output(plan)
        plan.output_directory.mkdir(parents=True, exist_ok=True)

        outcomes: list[StageOutcome] = run_chain(
            plan.pipeline.stages,
            input_directory=plan.input_directory,
            output_directory=plan.output_directory,
            resource_patterns=plan.resource_patterns,
        )
        logger.debug("Stage outcomes: %s", outcomes)
        logger.info("Wrote %s", plan.output_path)
        return plan

    def _rerun(self) -> None:
        try:
            self.run_once()
        finally:
            logger.info("Watching for changes...")

    def watch(self, plan: RunPlan) -> ChangeWatcher:
        """Build the change watcher for a completed run."""
        spec = build_watch_spec(
            input_directory=plan.input_directory,
            output_directory=plan.output_directory,
            options_file=plan.options_file,
            resource_patterns=plan.resource_patterns,
            template_file=plan.template_file,
            output_file=plan.output_path,
        )
        return ChangeWatcher(spec, wait_ms=plan.options.watch_wait, rerun=self._rerun)

    def run(self) -> RunPlan:
        """Run once and, when watching is enabled, rerun on change until interrupted.

        The first run must succeed for watching to start; its failure is raised.
        """
        plan = self.run_once()
        if not plan.options.watch:
            return plan
        if in_ci_environment(self.environ):
            logger.info("Running in a CI environment; watch ignored")
            return plan

        self.watcher = self.watch(plan)
        try:
            self.watcher.serve_forever()
        except KeyboardInterrupt:
            logger.info("Watch interrupted")
        return plan


def pandoc_spec(parameter_options: Mapping[str, Any] | None = None) -> RunPlan:
    """Run pandoc-spec with the given parameter options."""
    return PandocSpec(parameter_options).run()
