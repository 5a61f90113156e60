"""Shared Typer option definitions for CLI commands."""

from __future__ import annotations

from typing import Annotated

import typer


INPUT_PANEL = "Input"
OUTPUT_PANEL = "Output"
FORMAT_PANEL = "Formatting"
TEMPLATE_PANEL = "Template"
PANDOC_PANEL = "Pandoc"
WATCH_PANEL = "Watch"
DIAGNOSTICS_PANEL = "Diagnostics"

OptionsFileOption = Annotated[
    str | None,
    typer.Option(
        "--options-file",
        metavar="PATH",
        help="Options file to read; defaults to pandoc-spec.options.json when present.",
        rich_help_panel=INPUT_PANEL,
    ),
]

InputDirectoryOption = Annotated[
    str | None,
    typer.Option(
        "--input-directory",
        metavar="DIR",
        help="Directory Pandoc runs in; input files are relative to it.",
        rich_help_panel=INPUT_PANEL,
    ),
]

InputFileOption = Annotated[
    list[str] | None,
    typer.Option(
        "--input-file",
        "-i",
        metavar="FILE",
        help="Input file, relative to the input directory. Repeat for several files.",
        rich_help_panel=INPUT_PANEL,
    ),
]

InputFormatOption = Annotated[
    str | None,
    typer.Option(
        "--input-format",
        metavar="FORMAT",
        help='Pandoc reader format (defaults to "markdown").',
        rich_help_panel=INPUT_PANEL,
    ),
]

AutoDateOption = Annotated[
    bool | None,
    typer.Option(
        "--auto-date/--no-auto-date",
        help="Set the document date metadata to today.",
        rich_help_panel=INPUT_PANEL,
    ),
]

OutputDirectoryOption = Annotated[
    str | None,
    typer.Option(
        "--output-directory",
        metavar="DIR",
        help="Directory receiving the output file and copied resources.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

OutputFileOption = Annotated[
    str | None,
    typer.Option(
        "--output-file",
        "-o",
        metavar="FILE",
        help="Output file name, relative to the output directory.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

OutputFormatOption = Annotated[
    str | None,
    typer.Option(
        "--output-format",
        metavar="FORMAT",
        help='Pandoc writer format (defaults to "html").',
        rich_help_panel=OUTPUT_PANEL,
    ),
]

CleanOutputOption = Annotated[
    bool | None,
    typer.Option(
        "--clean-output/--no-clean-output",
        help="Remove the output directory before the first run.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

CssFileOption = Annotated[
    list[str] | None,
    typer.Option(
        "--css-file",
        metavar="FILE",
        help="CSS file or URI linked from the output; local files are copied.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

ResourceFileOption = Annotated[
    list[str] | None,
    typer.Option(
        "--resource-file",
        metavar="PATTERN",
        help="File or glob pattern copied to the output directory.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

ShiftHeadingLevelByOption = Annotated[
    int | None,
    typer.Option(
        "--shift-heading-level-by",
        metavar="N",
        help="Shift heading levels by N (defaults to -1).",
        rich_help_panel=FORMAT_PANEL,
    ),
]

NumberSectionsOption = Annotated[
    bool | None,
    typer.Option(
        "--number-sections/--no-number-sections",
        help="Number section headings (enabled by default).",
        rich_help_panel=FORMAT_PANEL,
    ),
]

GenerateTocOption = Annotated[
    bool | None,
    typer.Option(
        "--generate-toc/--no-generate-toc",
        help="Generate a table of contents (enabled by default).",
        rich_help_panel=FORMAT_PANEL,
    ),
]

TemplateFileOption = Annotated[
    str | None,
    typer.Option(
        "--template-file",
        metavar="FILE",
        help="Pandoc template; the bundled template is used for HTML output otherwise.",
        rich_help_panel=TEMPLATE_PANEL,
    ),
]

HeaderFileOption = Annotated[
    str | None,
    typer.Option(
        "--header-file",
        metavar="FILE",
        help="File included before the body.",
        rich_help_panel=TEMPLATE_PANEL,
    ),
]

FooterFileOption = Annotated[
    str | None,
    typer.Option(
        "--footer-file",
        metavar="FILE",
        help="File included after the body.",
        rich_help_panel=TEMPLATE_PANEL,
    ),
]

VariableOption = Annotated[
    list[str] | None,
    typer.Option(
        "--variable",
        "-V",
        metavar="KEY[:VALUE]",
        help="Template variable. Repeat for several variables.",
        rich_help_panel=TEMPLATE_PANEL,
    ),
]

StyleOption = Annotated[
    list[str] | None,
    typer.Option(
        "--style",
        metavar="NAME:CLASS",
        help="Class name added to a template component.",
        rich_help_panel=TEMPLATE_PANEL,
    ),
]

FilterOption = Annotated[
    list[str] | None,
    typer.Option(
        "--filter",
        "-F",
        metavar="[lua|json:]PATH",
        help="Pandoc filter; lua filters are the default.",
        rich_help_panel=PANDOC_PANEL,
    ),
]

VerboseOption = Annotated[
    bool | None,
    typer.Option(
        "--verbose/--no-verbose",
        help="Pass --verbose to both Pandoc invocations.",
        rich_help_panel=PANDOC_PANEL,
    ),
]

ReaderOption = Annotated[
    list[str] | None,
    typer.Option(
        "--additional-reader-option",
        metavar="OPTION[:VALUE]",
        help="Option passed verbatim to the Pandoc reader invocation.",
        rich_help_panel=PANDOC_PANEL,
    ),
]

WriterOption = Annotated[
    list[str] | None,
    typer.Option(
        "--additional-writer-option",
        metavar="OPTION[:VALUE]",
        help="Option passed verbatim to the Pandoc writer invocation.",
        rich_help_panel=PANDOC_PANEL,
    ),
]

WatchOption = Annotated[
    bool | None,
    typer.Option(
        "--watch/--no-watch",
        help="Rerun whenever an input, template or resource file changes.",
        rich_help_panel=WATCH_PANEL,
    ),
]

WatchWaitOption = Annotated[
    int | None,
    typer.Option(
        "--watch-wait",
        metavar="MS",
        min=0,
        help="Quiet period in milliseconds before a rerun (defaults to 2000).",
        rich_help_panel=WATCH_PANEL,
    ),
]

LogLevelOption = Annotated[
    str | None,
    typer.Option(
        "--log-level",
        metavar="LEVEL",
        help="Log level: silly, trace, debug, info, warn, error or fatal.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

CliVerboseOption = Annotated[
    int,
    typer.Option(
        "--cli-verbose",
        "-v",
        count=True,
        help="Increase error detail. Combine multiple times for additional diagnostics.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Show full tracebacks when an unexpected error occurs.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]
