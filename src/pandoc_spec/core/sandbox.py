"""Puppeteer configuration required by the Mermaid diagram filter.

The Mermaid filter drives a headless Chromium through Puppeteer, which must run
with ``--no-sandbox`` on some CI hosts. Before a run the configuration file in
the input directory is created or completed; afterwards it is put back exactly
as it was found.
"""

from __future__ import annotations

import enum
import json
import logging
from pathlib import Path
from types import TracebackType
from typing import Any

from .exceptions import PandocSpecError


logger = logging.getLogger(__name__)

CONFIGURATION_FILE = ".puppeteer.json"
NO_SANDBOX_ARG = "--no-sandbox"


class SandboxState(enum.Enum):
    """Where the configuration came from, which decides how it is restored."""

    NOT_FOUND = "not-found"
    FROM_WORKING = "from-working"
    FROM_INPUT_PARTIAL = "from-input-partial"
    FROM_INPUT_COMPLETE = "from-input-complete"


class SandboxConfiguration:
    """Ensure the input directory carries a Puppeteer configuration with ``--no-sandbox``."""

    def __init__(self, state: SandboxState, path: Path, original: str) -> None:
        self.state = state
        self.path = path
        self.original = original

    @classmethod
    def prepare(
        cls,
        input_directory: Path,
        working_directory: Path | None = None,
    ) -> SandboxConfiguration:
        input_file = (input_directory / CONFIGURATION_FILE).resolve()
        working_file = ((working_directory or Path.cwd()) / CONFIGURATION_FILE).resolve()

        if input_file.exists():
            state = SandboxState.FROM_INPUT_PARTIAL
            content = input_file.read_text(encoding="utf-8")
        elif working_file.exists():
            state = SandboxState.FROM_WORKING
            content = working_file.read_text(encoding="utf-8")
        else:
            state = SandboxState.NOT_FOUND
            content = "{}"

        try:
            configuration: dict[str, Any] = json.loads(content)
        except json.JSONDecodeError as exc:
            raise PandocSpecError(f"Invalid Puppeteer configuration: {exc}") from exc
        if not isinstance(configuration, dict):
            raise PandocSpecError("Puppeteer configuration does not contain an object")
        args = configuration.setdefault("args", [])

        if NO_SANDBOX_ARG not in args:
            args.append(NO_SANDBOX_ARG)
        elif state is SandboxState.FROM_INPUT_PARTIAL:
            state = SandboxState.FROM_INPUT_COMPLETE

        if state is not SandboxState.FROM_INPUT_COMPLETE:
            input_file.write_text(f"{json.dumps(configuration, indent=2)}\n", encoding="utf-8")

        logger.debug("Puppeteer configuration %s prepared (%s)", input_file, state.value)
        return cls(state, input_file, content)

    def restore(self) -> None:
        """Put the input directory configuration back in its original state."""
        if self.state in (SandboxState.NOT_FOUND, SandboxState.FROM_WORKING):
            self.path.unlink(missing_ok=True)
        elif self.state is SandboxState.FROM_INPUT_PARTIAL:
            self.path.write_text(self.original, encoding="utf-8")
        logger.debug("Puppeteer configuration %s restored (%s)", self.path, self.state.value)

    def __enter__(self) -> SandboxConfiguration:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.restore()


__all__ = ["CONFIGURATION_FILE", "NO_SANDBOX_ARG", "SandboxConfiguration", "SandboxState"]
