"""CLI main entry point."""

import logging
from pathlib import Path
from typing import Any, Optional

import click

from .app.schema_ui import SchemaUI
from .config import UiOptions
from .consts import DEFAULT_TEMP_FILE
from .enums import DocumentFormat
from .errors import ExitWithoutSave, SchemaUIException
from .io import (
    OutputDestination,
    OutputOptions,
    emit,
    load_source,
    looks_like_json_schema,
    parse_contents,
    probe_format,
    schema_from_data,
    schema_with_defaults,
)
from .log import setup as setup_log

logger = logging.getLogger(__name__)

STDOUT_SPEC = "-"


class Diagnostics:
    """Input/output problems collected before the form starts."""

    def __init__(self):
        self.entries: list[str] = []

    def input(self, label: str, message: str) -> None:
        self.entries.append(f"input ({label}): {message}")

    def output(self, message: str) -> None:
        self.entries.append(f"output: {message}")

    def __bool__(self) -> bool:
        return bool(self.entries)

    def render(self) -> str:
        lines = ["encountered input/output issues:"]
        lines.extend(f"  {index}. {entry}" for index, entry in enumerate(self.entries, 1))
        return "\n".join(lines)


def _format_hint(spec: Optional[str]) -> DocumentFormat:
    if spec and spec != STDOUT_SPEC:
        return probe_format(spec) or DocumentFormat.JSON
    return DocumentFormat.JSON


def _load_input(
    label: str,
    spec: Optional[str],
    inline: Optional[str],
    diagnostics: Diagnostics,
) -> Any:
    if spec is not None and inline is not None:
        diagnostics.input(label, f"use either --{label} or --{label}-inline, not both")
        return None
    try:
        if inline is not None:
            return parse_contents(inline, DocumentFormat.JSON, f"inline {label}")
        if spec is not None:
            return load_source(spec, _format_hint(spec), label)
    except SchemaUIException as e:
        diagnostics.input(label, str(e))
    return None


def resolve_schema(schema: Any, config: Any) -> tuple[dict[str, Any], Any]:
    """Pick the schema to compile and the data used to seed the form.

    A config document that is itself a JSON Schema takes the schema's place.
    """
    if schema is None and looks_like_json_schema(config):
        logger.info("Config document looks like a JSON schema; using it as the schema")
        return config, None
    if schema is None:
        return schema_from_data(config), config
    if config is None:
        return schema, None
    return schema_with_defaults(schema, config), config


def build_output_options(
    outputs: tuple[str, ...],
    stdout: bool,
    temp_file: Optional[str],
    no_temp_file: bool,
    pretty: bool,
    force: bool,
    fallback_format: DocumentFormat,
    diagnostics: Diagnostics,
) -> OutputOptions:
    destinations: list[OutputDestination] = []
    file_format: Optional[DocumentFormat] = None

    for spec in outputs:
        if spec == STDOUT_SPEC:
            if OutputDestination.stdout() not in destinations:
                destinations.append(OutputDestination.stdout())
            continue
        path = Path(spec).expanduser()
        if path.exists() and not force:
            diagnostics.output(f"file {path} already exists (pass --force to overwrite)")
        fmt = probe_format(path)
        if fmt is None:
            diagnostics.output(f"cannot infer format from output file {path}; use .json/.yaml/.toml")
        elif file_format is not None and fmt != file_format:
            diagnostics.output(
                f"output file {path} uses {fmt.value} but other destinations use "
                f"{file_format.value}; align extensions"
            )
        elif file_format is None:
            file_format = fmt
        destinations.append(OutputDestination.file(path))

    if stdout and OutputDestination.stdout() not in destinations:
        destinations.append(OutputDestination.stdout())

    if not destinations and not no_temp_file:
        path = Path(temp_file or DEFAULT_TEMP_FILE).expanduser()
        destinations.append(OutputDestination.file(path))
        file_format = probe_format(path) or file_format

    return OutputOptions(
        format=file_format or fallback_format,
        pretty=pretty,
        destinations=destinations,
    )


@click.command(name="schemaui")
@click.option("--schema", "-s", "schema_spec", default=None, help="Schema file path, inline JSON/YAML/TOML, or - for stdin")
@click.option("--schema-inline", default=None, help="Schema document given directly as text")
@click.option("--config", "-c", "config_spec", default=None, help="Config file path, inline JSON/YAML/TOML, or - for stdin")
@click.option("--config-inline", default=None, help="Config document given directly as text")
@click.option("--title", default=None, help="Title shown above the form")
@click.option("--stdout", "to_stdout", is_flag=True, default=False, help="Also write the saved value to stdout")
@click.option("--output", "-o", "outputs", multiple=True, help="Output file path (repeatable, - for stdout)")
@click.option("--temp-file", default=None, help=f"Fallback output file when no outputs are given (default {DEFAULT_TEMP_FILE})")
@click.option("--no-temp-file", is_flag=True, default=False, help="Do not write the fallback output file")
@click.option("--no-pretty", is_flag=True, default=False, help="Write compact JSON")
@click.option("--force", "-f", is_flag=True, default=False, help="Overwrite existing output files")
@click.option("--settings", default=None, help="UI settings TOML file")
@click.option("--log-file", default=None, help="Log file path")
def cli(
    schema_spec: Optional[str],
    schema_inline: Optional[str],
    config_spec: Optional[str],
    config_inline: Optional[str],
    title: Optional[str],
    to_stdout: bool,
    outputs: tuple[str, ...],
    temp_file: Optional[str],
    no_temp_file: bool,
    no_pretty: bool,
    force: bool,
    settings: Optional[str],
    log_file: Optional[str],
):
    """SchemaUI - edit JSON Schema backed documents in the terminal."""
    setup_log(log_file)

    if schema_spec is None and schema_inline is None and config_spec is None and config_inline is None:
        raise click.UsageError("provide at least --schema or --config")

    diagnostics = Diagnostics()
    if schema_spec == STDOUT_SPEC and config_spec == STDOUT_SPEC:
        diagnostics.input("schema", "schema and config cannot both read from stdin")
        schema = config = None
    else:
        schema = _load_input("schema", schema_spec, schema_inline, diagnostics)
        config = _load_input("config", config_spec, config_inline, diagnostics)

    fallback_format = _format_hint(config_spec) if config_spec else _format_hint(schema_spec)
    output_options = build_output_options(
        outputs,
        to_stdout,
        temp_file,
        no_temp_file,
        not no_pretty,
        force,
        fallback_format,
        diagnostics,
    )
    if diagnostics:
        raise click.ClickException(diagnostics.render())

    try:
        options = UiOptions.load_from_file(settings) if settings else UiOptions()
        resolved, initial_data = resolve_schema(schema, config)
        value = (
            SchemaUI(resolved)
            .with_title(title)
            .with_options(options)
            .with_initial_data(initial_data)
            .run()
        )
        emit(value, output_options)
    except ExitWithoutSave as e:
        logger.info(f"Nothing written: {e}")
        raise click.ClickException(str(e))
    except SchemaUIException as e:
        logger.error(f"Application error: {e}", exc_info=True)
        raise click.ClickException(str(e))


def main():
    cli()


if __name__ == "__main__":
    main()
