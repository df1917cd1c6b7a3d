from __future__ import annotations

from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from singer_lines.domain.canonical import encode_json
from singer_lines.domain.models import MESSAGE_TYPES
from singer_lines.inspector import StreamSummary

MAX_FAILURES_SHOWN = 20


def build_tables(summary: StreamSummary) -> list[Table]:
    """
    Build rich tables describing an inspected stream.

    Returns the message-type table, the per-stream table, and a failure table
    when any line failed to parse.
    """
    types_table = Table(title="Messages by Type", box=box.ROUNDED)
    types_table.add_column("Type", style="cyan", no_wrap=True)
    types_table.add_column("Count", justify="right", style="magenta")
    for name in MESSAGE_TYPES:
        types_table.add_row(name, f"{summary.message_counts.get(name, 0):,}")
    types_table.add_row("[bold]Total[/bold]", f"[bold]{summary.total_messages:,}[/bold]")

    streams_table = Table(
        title="Streams",
        box=box.ROUNDED,
        caption="Sorted by record count (descending)",
    )
    streams_table.add_column("Stream", style="cyan", no_wrap=True)
    streams_table.add_column("Records", justify="right", style="magenta")
    streams_table.add_column("Schema", justify="center", style="green")
    streams_table.add_column("Active Version", justify="right", style="yellow")

    names = set(summary.records_per_stream) | summary.schema_streams | set(summary.activated_versions)
    # Sort by record count, then name, to show the busiest streams first
    ordered = sorted(names, key=lambda n: (-summary.records_per_stream.get(n, 0), n))
    for name in ordered:
        streams_table.add_row(
            name,
            f"{summary.records_per_stream.get(name, 0):,}",
            "yes" if name in summary.schema_streams else "[red]no[/red]",
            summary.activated_versions.get(name, "-"),
        )

    tables = [types_table, streams_table]

    if summary.failures:
        failures_table = Table(
            title=f"Failures ({len(summary.failures)})",
            box=box.ROUNDED,
            caption=(
                f"Showing first {MAX_FAILURES_SHOWN}"
                if len(summary.failures) > MAX_FAILURES_SHOWN
                else None
            ),
        )
        failures_table.add_column("Line", justify="right", style="magenta")
        failures_table.add_column("Kind", style="red", no_wrap=True)
        failures_table.add_column("Detail")
        for failure in summary.failures[:MAX_FAILURES_SHOWN]:
            failures_table.add_row(str(failure.line), failure.kind, failure.message)
        tables.append(failures_table)

    return tables


def print_summary(summary: StreamSummary, console: Optional[Console] = None) -> None:
    """
    Render an inspection summary as rich tables.
    """
    console = console or Console()

    if summary.lines == 0:
        console.print("[yellow]No lines to inspect.[/yellow]")
        return

    for table in build_tables(summary):
        console.print(table)

    if summary.streams_without_schema:
        names = ", ".join(summary.streams_without_schema)
        console.print(f"[yellow]Records without SCHEMA[/yellow]: {escape(names)}")
    if summary.last_state is not None:
        console.print(f"Last STATE: {escape(encode_json(summary.last_state))}")

    if summary.ok:
        console.print(f"[green]OK[/green]: {summary.total_messages:,} messages in {summary.lines:,} lines.")
    else:
        console.print(
            f"[red]FAILED[/red]: {len(summary.failures):,} of {summary.lines:,} lines could not be parsed."
        )
