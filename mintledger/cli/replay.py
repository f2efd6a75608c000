"""
mintledger replay — event log replay CLI

Usage:
    mintledger replay <log>                  Human output (default)
    mintledger replay <log> --format json    Machine-readable JSON
    mintledger replay <log> --price 5        Price the log was written with

Exit codes:
    0  Log describes a legal history
    1  Log has violations
    2  Error  (file missing, malformed line)
"""

import json
import sys
from pathlib import Path

import click

from mintledger.core.exceptions import ReplayError
from mintledger.core.models import PRICE
from mintledger.core.replay import EventReplay, ReplaySummary


def _print_text(summary: ReplaySummary, log_path: Path) -> None:
    click.echo(f"Event log       {log_path}")
    click.echo(f"Events          {summary.total_events}")
    for event_type, count in sorted(summary.event_type_counts.items()):
        click.echo(f"  {event_type:<18}{count}")
    click.echo(f"Active records  {len(summary.active_records)}")
    click.echo(f"Destroyed       {len(summary.destroyed_records)}")
    click.echo(f"Withdrawn       {summary.withdrawn_total}")
    click.echo(f"Accrued         {summary.accrued_balance}")
    if summary.head_hash:
        click.echo(f"Head hash       {summary.head_hash}")
    click.echo()
    if summary.valid:
        click.echo("OK: history is consistent")
        return
    click.echo(f"VIOLATIONS: {len(summary.violations)}")
    for v in summary.violations:
        click.echo(f"  [{v.at_sequence}] {v.violation_type}: {v.detail}")


@click.command("replay")
@click.argument("log", type=click.Path(path_type=Path))
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Output format.",
)
@click.option(
    "--price",
    type=click.IntRange(min=1),
    default=PRICE,
    show_default=True,
    help="Mint price the log was written with.",
)
def replay_command(log: Path, output_format: str, price: int) -> None:
    """Replay an event log and check its history."""
    engine = EventReplay(price=price)
    try:
        engine.load(log)
    except FileNotFoundError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)
    except ReplayError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    summary = engine.verify()

    if output_format == "json":
        click.echo(json.dumps(summary.to_dict(), indent=2))
    else:
        _print_text(summary, log)

    sys.exit(0 if summary.valid else 1)
