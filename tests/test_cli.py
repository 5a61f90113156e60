from __future__ import annotations

import importlib
from typing import Any

import pytest
import typer
from typer.testing import CliRunner

from pandoc_spec.core.exceptions import OptionsError, StageFailedError, StageSignalError
from pandoc_spec.ui.cli import app
from pandoc_spec.ui.cli.utils import (
    parse_additional_options,
    parse_filters,
    parse_styles,
    parse_variables,
)


build_module = importlib.import_module("pandoc_spec.ui.cli.commands.build")


class _RecordingService:
    calls: list[dict[str, Any]] = []
    error: Exception | None = None

    def __init__(self, parameter_options: dict[str, Any]) -> None:
        self.parameter_options = parameter_options

    def run(self) -> None:
        type(self).calls.append(self.parameter_options)
        if type(self).error is not None:
            raise type(self).error


@pytest.fixture
def recorder(monkeypatch: pytest.MonkeyPatch) -> type[_RecordingService]:
    monkeypatch.setattr(_RecordingService, "calls", [])
    monkeypatch.setattr(_RecordingService, "error", None)
    monkeypatch.setattr(build_module, "PandocSpec", _RecordingService)
    return _RecordingService


def test_unspecified_flags_do_not_override_file_options(
    recorder: type[_RecordingService],
) -> None:
    result = CliRunner().invoke(app, [])

    assert result.exit_code == 0, result.output
    assert recorder.calls == [dict.fromkeys(recorder.calls[0])]


def test_flags_map_onto_option_keys(recorder: type[_RecordingService]) -> None:
    result = CliRunner().invoke(
        app,
        [
            "--input-file",
            "spec.md",
            "-i",
            "annex.md",
            "--output-file",
            "index.html",
            "--output-directory",
            "site",
            "--no-generate-toc",
            "--number-sections",
            "--shift-heading-level-by",
            "0",
            "--filter",
            "json:pandoc-crossref",
            "--filter",
            "toc.lua",
            "--variable",
            "draft",
            "-V",
            "lang:en",
            "--style",
            "body:dark",
            "--additional-writer-option=--wrap:none",
            "--watch",
            "--watch-wait",
            "500",
            "--css-file",
            "a.css",
        ],
    )

    assert result.exit_code == 0, result.output
    options = recorder.calls[0]
    assert options["inputFiles"] == ["spec.md", "annex.md"]
    assert options["outputFile"] == "index.html"
    assert options["outputDirectory"] == "site"
    assert options["generateTOC"] is False
    assert options["numberSections"] is True
    assert options["shiftHeadingLevelBy"] == 0
    assert options["filters"] == [
        {"type": "json", "path": "pandoc-crossref"},
        {"type": "lua", "path": "toc.lua"},
    ]
    assert options["variables"] == [{"key": "draft", "value": None}, {"key": "lang", "value": "en"}]
    assert options["styles"] == [{"name": "body", "className": "dark"}]
    assert options["additionalWriterOptions"] == [{"option": "--wrap", "value": "none"}]
    assert options["additionalReaderOptions"] is None
    assert options["watch"] is True
    assert options["watchWait"] == 500
    assert options["cssFiles"] == ["a.css"]
    assert options["verbose"] is None


def test_malformed_style_is_a_usage_error(recorder: type[_RecordingService]) -> None:
    result = CliRunner().invoke(app, ["--style", "body"])

    assert result.exit_code == 2
    assert recorder.calls == []


def test_unknown_flag_is_rejected(recorder: type[_RecordingService]) -> None:
    result = CliRunner().invoke(app, ["--bogus"])

    assert result.exit_code == 2
    assert recorder.calls == []


def test_unknown_log_level_is_rejected(recorder: type[_RecordingService]) -> None:
    result = CliRunner().invoke(app, ["--log-level", "loud"])

    assert result.exit_code == 2


def test_stage_failure_exit_code_is_propagated(recorder: type[_RecordingService]) -> None:
    recorder.error = StageFailedError(4, "pandoc", 3)

    result = CliRunner().invoke(app, [])

    assert result.exit_code == 3
    assert "Command[4] pandoc failed with status 3" in result.output


def test_signal_failure_exits_with_one(recorder: type[_RecordingService]) -> None:
    recorder.error = StageSignalError(1, "pandoc-defref", "SIGKILL")

    result = CliRunner().invoke(app, [])

    assert result.exit_code == 1
    assert "terminated by signal SIGKILL" in result.output


def test_options_error_exits_with_one(recorder: type[_RecordingService]) -> None:
    recorder.error = OptionsError("Options file custom.json not found")

    result = CliRunner().invoke(app, ["--options-file", "custom.json"])

    assert result.exit_code == 1
    assert "custom.json not found" in result.output
    assert recorder.calls[0]["optionsFile"] == "custom.json"


def test_cli_verbose_reports_error_causes(recorder: type[_RecordingService]) -> None:
    error = OptionsError("Unable to read options file custom.json")
    error.__cause__ = ValueError("Expecting value")
    recorder.error = error

    quiet = CliRunner().invoke(app, [])
    detailed = CliRunner().invoke(app, ["-v"])

    assert quiet.exit_code == 1
    assert "caused by:" not in quiet.output
    assert detailed.exit_code == 1
    assert "type: OptionsError" in detailed.output
    assert "caused by:" in detailed.output
    assert "ValueError: Expecting value" in detailed.output


def test_silly_log_level_is_accepted(recorder: type[_RecordingService]) -> None:
    result = CliRunner().invoke(app, ["--log-level", "silly"])

    assert result.exit_code == 0, result.output
    assert recorder.calls[0]["logLevel"] == "silly"


def test_debug_reraises_errors(recorder: type[_RecordingService]) -> None:
    recorder.error = OptionsError("broken")

    result = CliRunner().invoke(app, ["--debug"])

    assert result.exit_code == 1
    assert isinstance(result.exception, OptionsError)


def test_parse_filters_defaults_to_lua() -> None:
    assert parse_filters(["a.lua", "lua:b.lua", "json:c", "C:\\filters\\d.lua"]) == [
        {"type": "lua", "path": "a.lua"},
        {"type": "lua", "path": "b.lua"},
        {"type": "json", "path": "c"},
        {"type": "lua", "path": "C:\\filters\\d.lua"},
    ]


def test_parse_filters_rejects_unknown_type_prefix() -> None:
    with pytest.raises(typer.BadParameter, match="Unknown filter type 'jsn'"):
        parse_filters(["jsn:tool.py"])
    assert parse_filters(["D:/filters/tool.lua"]) == [
        {"type": "lua", "path": "D:/filters/tool.lua"}
    ]


def test_parse_filters_rejects_empty_path() -> None:
    with pytest.raises(typer.BadParameter):
        parse_filters(["json:"])


def test_parse_variables_keeps_colons_in_values() -> None:
    assert parse_variables(["url:https://example.com", "flag", " "]) == [
        {"key": "url", "value": "https://example.com"},
        {"key": "flag", "value": None},
    ]


def test_parse_variables_rejects_missing_key() -> None:
    with pytest.raises(typer.BadParameter):
        parse_variables([":value"])


def test_parse_styles_requires_class_name() -> None:
    assert parse_styles(["toc:side"]) == [{"name": "toc", "className": "side"}]
    with pytest.raises(typer.BadParameter):
        parse_styles(["toc:"])


def test_parse_additional_options() -> None:
    assert parse_additional_options(
        ["--strip-comments", "--metadata:lang:en"], param_hint="--additional-reader-option"
    ) == [
        {"option": "--strip-comments", "value": None},
        {"option": "--metadata", "value": "lang:en"},
    ]
