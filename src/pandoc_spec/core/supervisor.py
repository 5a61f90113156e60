"""Process chain supervision: spawn, stream, wait and finalize."""

from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
import enum
import logging
import os
from pathlib import Path
import signal
import subprocess
from typing import IO, Any

from .exceptions import PipelineError, StageFailedError, StageSignalError, StageSpawnError
from .pipeline import DIAGRAM_FILTER_ERROR_FILE, PipelineStage
from .resources import copy_files
from .sandbox import SandboxConfiguration


logger = logging.getLogger(__name__)


class ChainState(enum.Enum):
    """Lifecycle of a single chain run."""

    IDLE = "idle"
    SPAWNING = "spawning"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(slots=True)
class StageOutcome:
    """Exit status of one stage, recorded in completion order."""

    index: int
    command: str
    returncode: int


def signal_name(returncode: int) -> str:
    """Return the signal name for a negative ``Popen`` return code."""
    try:
        return signal.Signals(-returncode).name
    except ValueError:
        return str(-returncode)


def _failure(index: int, stage: PipelineStage, returncode: int) -> PipelineError:
    if returncode < 0:
        return StageSignalError(index, stage.command, signal_name(returncode))
    return StageFailedError(index, stage.command, returncode)


class ProcessChain:
    """Run stages concurrently with each stdout piped into the next stdin."""

    def __init__(
        self,
        stages: Sequence[PipelineStage],
        *,
        workdir: Path,
        stdin: IO[Any] | int | None = None,
    ) -> None:
        if not stages:
            raise ValueError("A process chain needs at least one stage.")
        self.stages = list(stages)
        self.workdir = workdir
        self.stdin = stdin
        self.state = ChainState.IDLE
        self.outcomes: list[StageOutcome] = []

    def _spawn(self) -> list[subprocess.Popen[bytes]]:
        processes: list[subprocess.Popen[bytes]] = []
        upstream = self.stdin
        for index, stage in enumerate(self.stages):
            self.state = ChainState.SPAWNING
            logger.debug("Command[%d]: %s", index, stage.command)
            logger.debug("Arguments[%d]: [%s]", index, ", ".join(stage.args))
            env = None if stage.env is None else {**os.environ, **stage.env}
            try:
                process = subprocess.Popen(
                    stage.popen_args(),
                    shell=stage.shell,
                    cwd=self.workdir,
                    env=env,
                    stdin=upstream,
                    stdout=subprocess.PIPE if stage.pipes_output else None,
                )
            except OSError as exc:
                self._abandon(processes)
                self.state = ChainState.FAILED
                raise StageSpawnError(index, stage.command, str(exc)) from exc
            finally:
                # The next stage owns the read end now.
                if processes and processes[-1].stdout is not None:
                    processes[-1].stdout.close()
            processes.append(process)
            upstream = process.stdout
        self.state = ChainState.RUNNING
        return processes

    @staticmethod
    def _abandon(processes: Sequence[subprocess.Popen[bytes]]) -> None:
        for process in processes:
            if process.stdout is not None:
                process.stdout.close()
            if process.poll() is None:
                process.kill()
            process.wait()

    def run(self) -> None:
        """Run the chain to completion, raising on the first abnormal exit."""
        processes = self._spawn()
        failure: PipelineError | None = None

        with ThreadPoolExecutor(
            max_workers=len(processes), thread_name_prefix="pandoc-spec-stage"
        ) as pool:
            futures = {pool.submit(process.wait): index for index, process in enumerate(processes)}
            for future in as_completed(futures):
                index = futures[future]
                returncode = future.result()
                stage = self.stages[index]
                self.outcomes.append(StageOutcome(index, stage.command, returncode))
                logger.debug("Code[%d]: %s", index, returncode)
                if failure is None and returncode != 0:
                    failure = _failure(index, stage, returncode)

        if failure is not None:
            self.state = ChainState.FAILED
            raise failure
        self.state = ChainState.SUCCEEDED


def _finalize(sandbox: SandboxConfiguration | None, input_directory: Path) -> None:
    if sandbox is not None:
        try:
            sandbox.restore()
        except OSError as exc:
            logger.warning("Unable to restore Puppeteer configuration %s: %s", sandbox.path, exc)

    error_file = input_directory / DIAGRAM_FILTER_ERROR_FILE
    try:
        if error_file.is_file() and error_file.stat().st_size == 0:
            error_file.unlink()
    except OSError as exc:
        logger.warning("Unable to remove %s: %s", error_file, exc)


def run_chain(
    stages: Sequence[PipelineStage],
    *,
    input_directory: Path,
    output_directory: Path,
    resource_patterns: Sequence[str] = (),
    stdin: IO[Any] | int | None = None,
) -> list[StageOutcome]:
    """Run one chain with sandbox preparation, cleanup and resource copying."""
    chain = ProcessChain(stages, workdir=input_directory, stdin=stdin)
    sandbox: SandboxConfiguration | None = None
    try:
        sandbox = SandboxConfiguration.prepare(input_directory)
        chain.run()
    finally:
        _finalize(sandbox, input_directory)

    if output_directory.resolve() != input_directory.resolve():
        copy_files(resource_patterns, output_directory, base_directory=input_directory)
    return chain.outcomes


__all__ = [
    "ChainState",
    "ProcessChain",
    "StageOutcome",
    "run_chain",
    "signal_name",
]
