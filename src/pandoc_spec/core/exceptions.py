"""Exception hierarchy for the pandoc pipeline."""

from __future__ import annotations


class PandocSpecError(RuntimeError):
    """Base exception for pandoc-spec failures."""


class OptionsError(PandocSpecError):
    """Raised when options from the file and/or parameters are invalid."""


class PipelineError(PandocSpecError):
    """Raised when the process chain does not complete successfully."""


class StageSpawnError(PipelineError):
    """Raised when a stage command cannot be started."""

    def __init__(self, index: int, command: str, reason: str) -> None:
        self.index = index
        self.command = command
        super().__init__(f"Command[{index}] {command} could not be started: {reason}")


class StageFailedError(PipelineError):
    """Raised when a stage exits with a nonzero status."""

    def __init__(self, index: int, command: str, returncode: int) -> None:
        self.index = index
        self.command = command
        self.returncode = returncode
        super().__init__(f"Command[{index}] {command} failed with status {returncode}")


class StageSignalError(PipelineError):
    """Raised when a stage is terminated by a signal instead of exiting."""

    def __init__(self, index: int, command: str, signal_name: str) -> None:
        self.index = index
        self.command = command
        self.signal_name = signal_name
        super().__init__(f"Command[{index}] {command} terminated by signal {signal_name}")


class ResourceCopyError(PandocSpecError):
    """Raised when a resource file cannot be copied to the output directory."""


__all__ = [
    "OptionsError",
    "PandocSpecError",
    "PipelineError",
    "ResourceCopyError",
    "StageFailedError",
    "StageSignalError",
    "StageSpawnError",
]
