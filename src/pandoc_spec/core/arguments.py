"""Pandoc command-line construction for the reader and writer stages."""

from __future__ import annotations

from datetime import date
import os
from pathlib import Path
from typing import Any

from .options import AdditionalOption, Options, Variable
from .resources import (
    INCLUDE_CODE_FILES_FILTER,
    INCLUDE_FILES_FILTER,
    TEMPLATE_ASSET,
    bundled_asset,
    resolve_path,
)


DEFAULT_INPUT_FORMAT = "markdown"
DEFAULT_OUTPUT_FORMAT = "html"
DEFAULT_SHIFT_HEADING_LEVEL_BY = -1
INTERMEDIATE_FORMAT = "json"
TOC_HEADER_KEY = "toc-header"
TOC_HEADER_DEFAULT = "Table of Contents"


def arg(option: str, value: Any, default: Any = None) -> list[str]:
    """Render an option according to its value, falling back to ``default``.

    No value renders nothing, ``True`` renders the bare option, ``False``
    renders nothing and anything else renders ``option=value``.
    """
    final = value if value is not None else default
    if final is None:
        return []
    if isinstance(final, bool):
        return [option] if final else []
    return [f"{option}={final}"]


def _passthrough(additional: list[AdditionalOption]) -> list[str]:
    args: list[str] = []
    for entry in additional:
        args += arg(entry.option, entry.value, True)
    return args


def template_variables(options: Options) -> list[Variable]:
    """Return the template variables including style-derived entries."""
    variables = list(options.variables)
    # The template concatenates class tokens, hence the leading space.
    variables.extend(
        Variable(key=f"{style.name}-style", value=f" {style.class_name}")
        for style in options.styles
    )
    if not any(variable.key == TOC_HEADER_KEY for variable in variables):
        variables.append(Variable(key=TOC_HEADER_KEY, value=TOC_HEADER_DEFAULT))
    return variables


def template_file(options: Options, input_directory: Path) -> Path | None:
    """Return the template path; the bundled template applies to HTML output only."""
    if options.template_file is not None:
        return resolve_path(options.template_file, input_directory)
    if options.html_output:
        return bundled_asset(TEMPLATE_ASSET)
    return None


def build_reader_args(
    options: Options,
    *,
    input_directory: Path,
    today: date | None = None,
) -> list[str]:
    """Arguments for the Pandoc stage that parses the inputs into JSON."""
    args = arg("--verbose", options.verbose)
    args += arg("--from", options.input_format, DEFAULT_INPUT_FORMAT)
    args += arg("--to", INTERMEDIATE_FORMAT)
    if options.auto_date:
        stamp = (today or date.today()).isoformat()
        args += arg("--metadata", f"date:{stamp}")
    args += arg(
        "--shift-heading-level-by",
        options.shift_heading_level_by,
        DEFAULT_SHIFT_HEADING_LEVEL_BY,
    )
    args += arg("--lua-filter", bundled_asset(INCLUDE_FILES_FILTER))
    args += arg("--lua-filter", bundled_asset(INCLUDE_CODE_FILES_FILTER))
    for entry in options.filters:
        if not entry.is_external:
            args += arg("--lua-filter", resolve_path(entry.path, input_directory))
    args += _passthrough(options.additional_reader_options)
    args.extend(options.input_files)
    return args


def build_writer_args(
    options: Options,
    *,
    input_directory: Path,
    output_directory: Path,
) -> list[str]:
    """Arguments for the Pandoc stage that renders JSON into the output file."""
    args = arg("--verbose", options.verbose)
    args += arg("--standalone", True)
    args += arg("--from", INTERMEDIATE_FORMAT)
    args += arg("--to", options.output_format, DEFAULT_OUTPUT_FORMAT)
    args += arg("--output", (output_directory / options.output_file).resolve())
    args += arg("--number-sections", options.number_sections, True)
    args += arg("--toc", options.generate_toc, True)
    args += arg("--template", template_file(options, input_directory))
    args += arg("--include-before-body", resolve_path(options.header_file, input_directory))
    args += arg("--include-after-body", resolve_path(options.footer_file, input_directory))
    for variable in template_variables(options):
        rendered = variable.key if variable.value is None else f"{variable.key}:{variable.value}"
        args += arg("--variable", rendered)
    for css in options.css_files:
        args += arg("--css", css)
    args += _passthrough(options.additional_writer_options)
    return args


def json_filter_commands(options: Options, *, input_directory: Path) -> list[str]:
    """Commands for external JSON filters; bare names are left to ``PATH`` lookup."""
    commands: list[str] = []
    for entry in options.filters:
        if not entry.is_external:
            continue
        separators = {os.sep, os.altsep} - {None}
        if any(sep in entry.path for sep in separators):
            commands.append(str(resolve_path(entry.path, input_directory)))
        else:
            commands.append(entry.path)
    return commands


__all__ = [
    "DEFAULT_INPUT_FORMAT",
    "DEFAULT_OUTPUT_FORMAT",
    "DEFAULT_SHIFT_HEADING_LEVEL_BY",
    "INTERMEDIATE_FORMAT",
    "TOC_HEADER_DEFAULT",
    "TOC_HEADER_KEY",
    "arg",
    "build_reader_args",
    "build_writer_args",
    "json_filter_commands",
    "template_file",
    "template_variables",
]
