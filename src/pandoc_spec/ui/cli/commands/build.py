"""Implementation of the primary ``pandoc-spec`` CLI command."""

from __future__ import annotations

import logging
from typing import Annotated, Any

import typer

from pandoc_spec.api.service import LOG_LEVELS, PandocSpec
from pandoc_spec.core.exceptions import PandocSpecError, StageFailedError
from pandoc_spec.version import get_version

from .._options import (
    DIAGNOSTICS_PANEL,
    AutoDateOption,
    CleanOutputOption,
    CliVerboseOption,
    CssFileOption,
    DebugOption,
    FilterOption,
    FooterFileOption,
    GenerateTocOption,
    HeaderFileOption,
    InputDirectoryOption,
    InputFileOption,
    InputFormatOption,
    LogLevelOption,
    NumberSectionsOption,
    OptionsFileOption,
    OutputDirectoryOption,
    OutputFileOption,
    OutputFormatOption,
    ReaderOption,
    ResourceFileOption,
    ShiftHeadingLevelByOption,
    StyleOption,
    TemplateFileOption,
    VariableOption,
    VerboseOption,
    WatchOption,
    WatchWaitOption,
    WriterOption,
)
from ..state import configure_logging, debug_enabled, emit_error, set_cli_state
from ..utils import (
    list_or_none,
    parse_additional_options,
    parse_filters,
    parse_styles,
    parse_variables,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(get_version())
        raise typer.Exit()


def _exit_code(exc: PandocSpecError) -> int:
    if isinstance(exc, StageFailedError) and exc.returncode > 0:
        return exc.returncode
    return 1


def build(
    ctx: typer.Context,
    options_file: OptionsFileOption = None,
    input_directory: InputDirectoryOption = None,
    input_files: InputFileOption = None,
    input_format: InputFormatOption = None,
    auto_date: AutoDateOption = None,
    output_directory: OutputDirectoryOption = None,
    output_file: OutputFileOption = None,
    output_format: OutputFormatOption = None,
    clean_output: CleanOutputOption = None,
    css_files: CssFileOption = None,
    resource_files: ResourceFileOption = None,
    shift_heading_level_by: ShiftHeadingLevelByOption = None,
    number_sections: NumberSectionsOption = None,
    generate_toc: GenerateTocOption = None,
    template_file: TemplateFileOption = None,
    header_file: HeaderFileOption = None,
    footer_file: FooterFileOption = None,
    variables: VariableOption = None,
    styles: StyleOption = None,
    filters: FilterOption = None,
    verbose: VerboseOption = None,
    additional_reader_options: ReaderOption = None,
    additional_writer_options: WriterOption = None,
    watch: WatchOption = None,
    watch_wait: WatchWaitOption = None,
    log_level: LogLevelOption = None,
    cli_verbose: CliVerboseOption = 0,
    debug: DebugOption = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the pandoc-spec version and exit.",
            rich_help_panel=DIAGNOSTICS_PANEL,
        ),
    ] = False,
) -> None:
    """Build a document through the Pandoc filter chain."""
    state = set_cli_state(ctx=ctx, verbosity=cli_verbose, debug=debug)

    level = logging.INFO
    if log_level is not None:
        if log_level.strip().lower() not in LOG_LEVELS:
            raise typer.BadParameter(
                f"Unknown log level '{log_level}'.", param_hint="--log-level"
            )
        level = LOG_LEVELS[log_level.strip().lower()]
    parameter_options: dict[str, Any] = {
        "optionsFile": options_file,
        "logLevel": log_level,
        "verbose": verbose,
        "autoDate": auto_date,
        "inputFormat": input_format,
        "outputFormat": output_format,
        "shiftHeadingLevelBy": shift_heading_level_by,
        "numberSections": number_sections,
        "generateTOC": generate_toc,
        "filters": list_or_none(parse_filters(filters)),
        "templateFile": template_file,
        "headerFile": header_file,
        "footerFile": footer_file,
        "variables": list_or_none(parse_variables(variables)),
        "styles": list_or_none(parse_styles(styles)),
        "inputDirectory": input_directory,
        "inputFiles": list_or_none(list(input_files or [])),
        "cssFiles": list_or_none(list(css_files or [])),
        "resourceFiles": list_or_none(list(resource_files or [])),
        "outputDirectory": output_directory,
        "cleanOutput": clean_output,
        "outputFile": output_file,
        "additionalReaderOptions": list_or_none(
            parse_additional_options(
                additional_reader_options, param_hint="--additional-reader-option"
            )
        ),
        "additionalWriterOptions": list_or_none(
            parse_additional_options(
                additional_writer_options, param_hint="--additional-writer-option"
            )
        ),
        "watch": watch,
        "watchWait": watch_wait,
    }

    handler = configure_logging(level, state=state)
    try:
        PandocSpec(parameter_options).run()
    except PandocSpecError as exc:
        if debug_enabled():
            raise
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=_exit_code(exc)) from exc
    finally:
        logging.getLogger("pandoc_spec").removeHandler(handler)


__all__ = ["build"]
