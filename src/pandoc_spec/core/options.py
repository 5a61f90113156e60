"""Options model and merger for pandoc-spec runs.

Options are read from a JSON options file and overlaid with parameter options
supplied by the caller (command-line flags or a programmatic mapping). Keys
may use either the camelCase spelling of the options file or the snake_case
field name.

`inputFiles` (`list[str]`, required)
: Input files, relative to the input directory, passed to Pandoc in order.

`outputFile` (`str`, required)
: Output file name, relative to the output directory.

`inputFormat` / `outputFormat` (`str | None`)
: Pandoc reader and writer formats; default to `markdown` and `html`.

`shiftHeadingLevelBy` (`int | None`)
: Heading shift; defaults to `-1` so the first level-one heading is the title.

`numberSections` / `generateTOC` (`bool | None`)
: Section numbering and table of contents; both default to `True`.

`filters` (`list[Filter]`)
: `lua` filters run inside Pandoc, `json` filters run as separate processes.

`variables` / `styles` (`list[Variable]` / `list[Style]`)
: Template variables; styles become `<name>-style` variables.

`cssFiles` / `resourceFiles` (`list[str]`)
: Files (glob patterns permitted) copied to the output directory.

`additionalReaderOptions` / `additionalWriterOptions` (`list[AdditionalOption]`)
: Verbatim options for the reader and writer Pandoc invocations.

`watch` / `watchWait` (`bool | None` / `int`)
: Rerun on change and the quiet period in milliseconds (default 2000).
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
import json
import logging
from pathlib import Path
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .exceptions import OptionsError


logger = logging.getLogger(__name__)

DEFAULT_OPTIONS_FILE = "pandoc-spec.options.json"
DEFAULT_WATCH_WAIT_MS = 2000

_REQUIRED_KEYS = ("input_files", "output_file")

_T = TypeVar("_T")


class _OptionsModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class Filter(_OptionsModel):
    """Pandoc filter declaration."""

    type: Literal["lua", "json"] = "lua"
    path: str = Field(min_length=1)

    @property
    def kind(self) -> str:
        return "inline-transform" if self.type == "lua" else "external-process"

    @property
    def locator(self) -> str:
        return self.path

    @property
    def is_external(self) -> bool:
        return self.type == "json"


class Variable(_OptionsModel):
    """Template variable; a missing value renders as the bare key."""

    key: str = Field(min_length=1)
    value: str | None = None


class Style(_OptionsModel):
    """Class name added to the template component with the matching name."""

    name: str = Field(min_length=1)
    class_name: str


class AdditionalOption(_OptionsModel):
    """Pandoc option passed through verbatim."""

    option: str = Field(min_length=1)
    value: str | None = None


def _dedupe(items: Iterable[_T], key: Callable[[_T], str]) -> list[_T]:
    """Keep the last value for each key at the position of its first occurrence."""
    survivors: dict[str, _T] = {}
    for item in items:
        survivors[key(item)] = item
    return list(survivors.values())


class Options(_OptionsModel):
    """Resolved options for a single run."""

    options_file: str | None = None
    log_level: str | None = None
    verbose: bool | None = None
    auto_date: bool | None = None
    input_format: str | None = None
    output_format: str | None = None
    shift_heading_level_by: int | None = None
    number_sections: bool | None = None
    generate_toc: bool | None = Field(default=None, alias="generateTOC")
    filters: list[Filter] = Field(default_factory=list)
    template_file: str | None = None
    header_file: str | None = None
    footer_file: str | None = None
    variables: list[Variable] = Field(default_factory=list)
    styles: list[Style] = Field(default_factory=list)
    input_directory: str | None = None
    input_files: list[str] = Field(min_length=1)
    css_files: list[str] = Field(default_factory=list)
    resource_files: list[str] = Field(default_factory=list)
    output_directory: str | None = None
    clean_output: bool | None = None
    output_file: str = Field(min_length=1)
    additional_reader_options: list[AdditionalOption] = Field(default_factory=list)
    additional_writer_options: list[AdditionalOption] = Field(default_factory=list)
    watch: bool | None = None
    watch_wait: int = Field(default=DEFAULT_WATCH_WAIT_MS, ge=0)

    @field_validator("variables", mode="after")
    @classmethod
    def _unique_variables(cls, value: list[Variable]) -> list[Variable]:
        return _dedupe(value, lambda variable: variable.key)

    @field_validator("styles", mode="after")
    @classmethod
    def _unique_styles(cls, value: list[Style]) -> list[Style]:
        return _dedupe(value, lambda style: style.name)

    @property
    def html_output(self) -> bool:
        return self.output_format is None or self.output_format == "html"

    def to_mapping(self) -> dict[str, Any]:
        """Return the options keyed by their options-file spelling."""
        return self.model_dump(by_alias=True, exclude_none=True)


def _field_keys() -> dict[str, str]:
    keys: dict[str, str] = {}
    for name, info in Options.model_fields.items():
        keys[name] = name
        if info.alias:
            keys[info.alias] = name
    return keys


_FIELD_KEYS = _field_keys()


def normalize_keys(partial: Mapping[str, Any] | None) -> dict[str, Any]:
    """Map camelCase or snake_case keys onto option field names.

    Keys whose value is ``None`` are treated as absent.
    """
    normalized: dict[str, Any] = {}
    if not partial:
        return normalized
    for key, value in partial.items():
        if value is None:
            continue
        field_name = _FIELD_KEYS.get(str(key))
        if field_name is None:
            raise OptionsError(f"Unknown option '{key}'")
        normalized[field_name] = value
    return normalized


def _is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def merge_options(
    file_options: Mapping[str, Any] | None,
    parameter_options: Mapping[str, Any] | None,
) -> Options:
    """Merge file options with parameter options.

    Parameter values override file scalars and are appended to file arrays.
    """
    merged = normalize_keys(file_options)

    for key, value in normalize_keys(parameter_options).items():
        if key not in merged:
            merged[key] = value
            continue
        existing = merged[key]
        if _is_array(value) and _is_array(existing):
            merged[key] = [*existing, *value]
        elif _is_array(value) or _is_array(existing):
            alias = Options.model_fields[key].alias or key
            raise OptionsError(
                f"Invalid options from file and/or parameter: '{alias}' mixes a list and a scalar"
            )
        else:
            merged[key] = value

    missing = [
        Options.model_fields[key].alias or key for key in _REQUIRED_KEYS if key not in merged
    ]
    if missing:
        raise OptionsError(
            f"Invalid options from file and/or parameter: missing {', '.join(missing)}"
        )

    try:
        return Options.model_validate(merged)
    except ValidationError as exc:
        raise OptionsError(f"Invalid options from file and/or parameter: {exc}") from exc


def load_options_file(path: Path, *, required: bool) -> dict[str, Any]:
    """Read a JSON options file, returning an empty mapping when it is optional and absent."""
    if not path.exists():
        if required:
            raise OptionsError(f"Options file {path} not found")
        logger.debug("No options file at %s", path)
        return {}
    try:
        content = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise OptionsError(f"Unable to read options file {path}: {exc}") from exc
    if not isinstance(content, dict):
        raise OptionsError(f"{path} does not contain an object")
    return content


def resolve_options(parameter_options: Mapping[str, Any] | None) -> tuple[Options, Path]:
    """Resolve options from the options file and the parameter overlay."""
    parameters = normalize_keys(parameter_options)
    explicit = parameters.get("options_file")
    options_file = Path(explicit or DEFAULT_OPTIONS_FILE).resolve()

    file_options = load_options_file(options_file, required=explicit is not None)
    options = merge_options(file_options, parameters)

    logger.debug("Parameter options: %s", parameters)
    logger.debug("File options: %s", file_options)
    logger.debug("Consolidated options: %s", options.to_mapping())
    return options, options_file


__all__ = [
    "DEFAULT_OPTIONS_FILE",
    "DEFAULT_WATCH_WAIT_MS",
    "AdditionalOption",
    "Filter",
    "Options",
    "Style",
    "Variable",
    "load_options_file",
    "merge_options",
    "normalize_keys",
    "resolve_options",
]
