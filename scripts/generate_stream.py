"""
Synthetic tap output for singer-lines consumers.

Emits a deterministic pseudo-random message stream (SCHEMA, ACTIVATE_VERSION,
batches of RECORD messages with a STATE checkpoint after each batch) so a
downstream target can be exercised without a real extraction process.
"""

from __future__ import annotations

import json
import random
import sys
import time
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path

import typer

from singer_lines.domain.canonical import encode_json
from singer_lines.infrastructure.sinks import open_sink
from singer_lines.protocol.writer import MessageWriter

app = typer.Typer(help="Generate a synthetic Singer message stream.")

STREAM = "events"
SCHEMA = {
    "type": "object",
    "properties": {
        "id": {"type": "integer"},
        "category": {"type": "string"},
        "amount": {"type": "number"},
        "is_active": {"type": "boolean"},
        "payload": {"type": "object"},
    },
}


def _raw_records(rows: int, seed: int, start_id: int = 1):
    rng = random.Random(seed)
    categories = ["alpha", "beta", "gamma", "delta"]
    for offset in range(rows):
        record = {
            "id": start_id + offset,
            "category": rng.choice(categories),
            "amount": Decimal(f"{rng.uniform(1, 10_000):.2f}"),
            "is_active": rng.choice([True, False]),
            "payload": {
                "user_id": rng.randint(1, 1_000_000),
                "action": rng.choice(["view", "click", "purchase", "impression"]),
            },
        }
        yield encode_json(record).encode("utf-8")


def _generate_stream(
    writer: MessageWriter, rows: int, batch_size: int, seed: int, version: str
) -> int:
    writer.write_schema(STREAM, json.dumps(SCHEMA), key_properties=["id"], bookmark_properties=["id"])
    writer.write_activate_version(STREAM, version)

    extracted = datetime.now(UTC)
    written = 0
    batch: list[bytes] = []
    for raw in _raw_records(rows, seed):
        batch.append(raw)
        if len(batch) >= batch_size:
            written += writer.write_records(STREAM, batch, version=version, time_extracted=extracted)
            writer.write_state(json.dumps({"bookmarks": {STREAM: {"id": written}}}))
            batch.clear()
    if batch:
        written += writer.write_records(STREAM, batch, version=version, time_extracted=extracted)
        writer.write_state(json.dumps({"bookmarks": {STREAM: {"id": written}}}))

    writer.write_activate_version(STREAM, version)
    return written


@app.command()
def main(
    rows: int = typer.Option(1_000, "--rows", "-r", help="Number of records to generate."),
    batch_size: int = typer.Option(
        100, "--batch-size", "-b", help="Records between STATE checkpoints."
    ),
    seed: int = typer.Option(42, "--seed", help="Deterministic RNG seed."),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Output file (stdout when omitted)."
    ),
) -> None:
    """
    Generate a synthetic message stream.
    """
    start = time.perf_counter()
    version = str(int(time.time() * 1000))
    with open_sink(str(output) if output else "stdout") as sink:
        written = _generate_stream(MessageWriter(sink), rows, batch_size, seed, version)
    duration = time.perf_counter() - start
    typer.echo(
        f"Generated {written:,} records in {duration:.2f}s ({written / max(duration, 1e-9):,.0f} records/s)",
        err=True,
    )


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
