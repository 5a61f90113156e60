from __future__ import annotations

import json
from pathlib import Path

import pytest

from pandoc_spec.core.exceptions import PandocSpecError
from pandoc_spec.core.sandbox import (
    CONFIGURATION_FILE,
    NO_SANDBOX_ARG,
    SandboxConfiguration,
    SandboxState,
)


def _dirs(tmp_path: Path) -> tuple[Path, Path]:
    input_directory = tmp_path / "input"
    working_directory = tmp_path / "work"
    input_directory.mkdir()
    working_directory.mkdir()
    return input_directory, working_directory


def _read(path: Path) -> dict[str, object]:
    return json.loads(path.read_text(encoding="utf-8"))


def test_not_found_creates_then_removes(tmp_path: Path) -> None:
    input_directory, working_directory = _dirs(tmp_path)
    target = input_directory / CONFIGURATION_FILE

    sandbox = SandboxConfiguration.prepare(input_directory, working_directory)

    assert sandbox.state is SandboxState.NOT_FOUND
    assert _read(target) == {"args": [NO_SANDBOX_ARG]}
    sandbox.restore()
    assert not target.exists()


def test_working_directory_configuration_is_copied_then_removed(tmp_path: Path) -> None:
    input_directory, working_directory = _dirs(tmp_path)
    source = working_directory / CONFIGURATION_FILE
    source.write_text(json.dumps({"args": ["--disable-gpu"]}), encoding="utf-8")

    with SandboxConfiguration.prepare(input_directory, working_directory) as sandbox:
        assert sandbox.state is SandboxState.FROM_WORKING
        assert _read(input_directory / CONFIGURATION_FILE) == {
            "args": ["--disable-gpu", NO_SANDBOX_ARG]
        }

    assert not (input_directory / CONFIGURATION_FILE).exists()
    assert _read(source) == {"args": ["--disable-gpu"]}


def test_partial_configuration_is_restored_byte_for_byte(tmp_path: Path) -> None:
    input_directory, working_directory = _dirs(tmp_path)
    target = input_directory / CONFIGURATION_FILE
    original = '{"headless":true}'
    target.write_text(original, encoding="utf-8")

    sandbox = SandboxConfiguration.prepare(input_directory, working_directory)

    assert sandbox.state is SandboxState.FROM_INPUT_PARTIAL
    assert _read(target) == {"headless": True, "args": [NO_SANDBOX_ARG]}
    assert target.read_text(encoding="utf-8").endswith("}\n")
    sandbox.restore()
    assert target.read_text(encoding="utf-8") == original


def test_complete_configuration_is_left_untouched(tmp_path: Path) -> None:
    input_directory, working_directory = _dirs(tmp_path)
    target = input_directory / CONFIGURATION_FILE
    original = json.dumps({"args": [NO_SANDBOX_ARG]})
    target.write_text(original, encoding="utf-8")

    sandbox = SandboxConfiguration.prepare(input_directory, working_directory)
    sandbox.restore()

    assert sandbox.state is SandboxState.FROM_INPUT_COMPLETE
    assert target.read_text(encoding="utf-8") == original


def test_input_directory_takes_precedence_over_working_directory(tmp_path: Path) -> None:
    input_directory, working_directory = _dirs(tmp_path)
    (input_directory / CONFIGURATION_FILE).write_text("{}", encoding="utf-8")
    (working_directory / CONFIGURATION_FILE).write_text(
        json.dumps({"args": ["--other"]}), encoding="utf-8"
    )

    sandbox = SandboxConfiguration.prepare(input_directory, working_directory)

    assert sandbox.state is SandboxState.FROM_INPUT_PARTIAL
    assert _read(input_directory / CONFIGURATION_FILE) == {"args": [NO_SANDBOX_ARG]}
    sandbox.restore()


def test_invalid_configuration_raises(tmp_path: Path) -> None:
    input_directory, working_directory = _dirs(tmp_path)
    (input_directory / CONFIGURATION_FILE).write_text("not json", encoding="utf-8")

    with pytest.raises(PandocSpecError, match="Invalid Puppeteer configuration"):
        SandboxConfiguration.prepare(input_directory, working_directory)

    assert (input_directory / CONFIGURATION_FILE).read_text(encoding="utf-8") == "not json"
