"""Stage descriptors for the Pandoc process chain."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
import shlex
import subprocess
import sys


PANDOC_COMMAND = "pandoc"
CROSS_REFERENCE_FILTER = "pandoc-defref"
DIAGRAM_FILTER = "mermaid-filter"
DIAGRAM_FILTER_ENV = {"MERMAID_FILTER_FORMAT": "svg"}
DIAGRAM_FILTER_ERROR_FILE = "mermaid-filter.err"


@dataclass(slots=True)
class PipelineStage:
    """One external process in the chain."""

    command: str
    args: list[str]
    shell: bool = False
    env: Mapping[str, str] | None = None
    pipes_output: bool = True

    @property
    def argv(self) -> list[str]:
        return [self.command, *self.args]

    @property
    def display(self) -> str:
        if sys.platform == "win32":
            return subprocess.list2cmdline(self.argv)
        return shlex.join(self.argv)

    def popen_args(self) -> str | list[str]:
        """Return the argument accepted by ``subprocess.Popen`` for this stage."""
        return self.display if self.shell else self.argv


@dataclass(slots=True)
class PipelinePlan:
    """Ordered stages built for one run."""

    stages: list[PipelineStage] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.stages)

    @property
    def commands(self) -> list[str]:
        return [stage.command for stage in self.stages]


def build_pipeline(
    reader_args: Sequence[str],
    writer_args: Sequence[str],
    json_filters: Sequence[str],
    output_format: str,
    *,
    platform: str | None = None,
) -> PipelinePlan:
    """Build the reader, filter and writer stages in execution order."""
    # Filters are frequently scripts, which Windows cannot spawn directly.
    filter_shell = (platform or sys.platform) == "win32"

    stages = [PipelineStage(command=PANDOC_COMMAND, args=list(reader_args))]

    for command in (CROSS_REFERENCE_FILTER, DIAGRAM_FILTER, *json_filters):
        stages.append(
            PipelineStage(
                command=command,
                args=[output_format],
                shell=filter_shell,
                env=dict(DIAGRAM_FILTER_ENV) if command == DIAGRAM_FILTER else None,
            )
        )

    stages.append(
        PipelineStage(command=PANDOC_COMMAND, args=list(writer_args), pipes_output=False)
    )
    return PipelinePlan(stages=stages)


def describe(plan: PipelinePlan) -> str:
    """Render the chain the way a shell pipeline would read."""
    return " | ".join(stage.display for stage in plan.stages)


__all__ = [
    "CROSS_REFERENCE_FILTER",
    "DIAGRAM_FILTER",
    "DIAGRAM_FILTER_ENV",
    "DIAGRAM_FILTER_ERROR_FILE",
    "PANDOC_COMMAND",
    "PipelinePlan",
    "PipelineStage",
    "build_pipeline",
    "describe",
]
