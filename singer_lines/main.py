from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from typing import BinaryIO, Iterator, List, NoReturn, Optional

import typer

from singer_lines.config import get_settings
from singer_lines.domain.errors import SingerError
from singer_lines.infrastructure.sinks import open_writer
from singer_lines.inspector import inspect_lines
from singer_lines.reporter import print_summary
from singer_lines.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Write and inspect line-delimited Singer messages.")
log = get_logger(__name__)


@app.callback()
def setup() -> None:
    """
    Configure logging from settings before any command runs.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


def _fail(exc: SingerError) -> NoReturn:
    typer.echo(f"error: {exc}", err=True)
    raise typer.Exit(code=1)


def _payload_lines(source: BinaryIO) -> Iterator[bytes]:
    for line in source:
        if line.strip():
            yield line


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"output={settings.output} flush={settings.flush} | "
        f"log_level={settings.log_level} log_json={settings.log_json}"
    )


@app.command()
def record(
    stream: str = typer.Argument(..., help="Stream the records belong to."),
    source: typer.FileBinaryRead = typer.Argument(
        "-", help="File of raw JSON objects, one per line ('-' for stdin)."
    ),
    version: str = typer.Option("", "--version", "-v", help="Table version to attach."),
    stamp: bool = typer.Option(
        False, "--stamp", help="Set time_extracted to the current UTC time."
    ),
) -> None:
    """
    Wrap raw JSON objects as RECORD messages.
    """
    time_extracted = datetime.now(timezone.utc) if stamp else None
    with open_writer() as writer:
        try:
            count = writer.write_records(
                stream, _payload_lines(source), version=version, time_extracted=time_extracted
            )
        except SingerError as exc:
            _fail(exc)
    log.debug("Records written", extra={"stream": stream, "count": count})


@app.command()
def schema(
    stream: str = typer.Argument(..., help="Stream the schema describes."),
    schema_file: typer.FileBinaryRead = typer.Argument(
        ..., help="JSON Schema document ('-' for stdin)."
    ),
    key_property: Optional[List[str]] = typer.Option(
        None, "--key-property", "-k", help="Key property; repeat for compound keys."
    ),
    bookmark_property: Optional[List[str]] = typer.Option(
        None, "--bookmark-property", "-b", help="Bookmark property; repeatable."
    ),
) -> None:
    """
    Emit a SCHEMA message.
    """
    with open_writer() as writer:
        try:
            writer.write_schema(
                stream,
                schema_file.read(),
                key_properties=key_property or [],
                bookmark_properties=bookmark_property or [],
            )
        except SingerError as exc:
            _fail(exc)


@app.command()
def state(
    value: str = typer.Argument(..., help="Checkpoint as a JSON object."),
) -> None:
    """
    Emit a STATE message.
    """
    with open_writer() as writer:
        try:
            writer.write_state(value)
        except SingerError as exc:
            _fail(exc)


@app.command("activate-version")
def activate_version(
    stream: str = typer.Argument(..., help="Stream to cut over."),
    version: str = typer.Argument(..., help="Version to activate."),
) -> None:
    """
    Emit an ACTIVATE_VERSION message.
    """
    with open_writer() as writer:
        try:
            writer.write_activate_version(stream, version)
        except SingerError as exc:
            _fail(exc)


@app.command()
def inspect(
    source: typer.FileBinaryRead = typer.Argument(
        "-", help="Message stream to inspect ('-' for stdin)."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the summary as JSON."),
) -> None:
    """
    Parse a message stream and summarize it; exits 1 if any line fails.
    """
    summary = inspect_lines(source)
    if as_json:
        typer.echo(json.dumps(summary.as_dict(), indent=2, default=str))
    else:
        print_summary(summary)
    if not summary.ok:
        raise typer.Exit(code=1)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
