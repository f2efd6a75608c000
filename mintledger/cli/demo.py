"""
mintledger demo — run the reference scenario against a fresh ledger.

    bring-up → mint "x" → mint "y" → combine → withdraw

Events are written to the configured (or --events) JSONL log.
"""

from pathlib import Path
from typing import Optional

import click

from mintledger.config import LedgerConfig
from mintledger.core.coin import CoinAuthority
from mintledger.core.exceptions import ConfigError
from mintledger.ledger.ledger import AssetLedger


def run_demo(config: LedgerConfig) -> dict:
    """Run the scenario and return the final ledger stats."""
    authority = CoinAuthority()
    ledger    = AssetLedger.from_config(config, coin_authority=authority)
    cap       = ledger.bring_up("deployer")

    payment = authority.mint(1_000_000_000)
    record_a, change = ledger.mint("alice", "x", "first record", "ipfs://x", payment, cap)
    record_b, change = ledger.mint("alice", "y", "second record", "ipfs://y", change, cap)

    combined = ledger.combine(record_a, record_b, "img")
    ledger.ownership.transfer(combined, "alice")

    fees = ledger.withdraw(cap)

    stats = ledger.get_stats()
    stats["change"]      = change.amount()
    stats["withdrawn"]   = fees.amount()
    stats["combined_id"] = combined.record_id
    return stats


@click.command("demo")
@click.option(
    "--config", "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML ledger configuration.",
)
@click.option(
    "--events", "event_log",
    type=click.Path(dir_okay=False),
    default=None,
    help="Event log path (overrides config event_log).",
)
def demo_command(config_file: Optional[Path], event_log: Optional[str]) -> None:
    """Run the reference scenario and write an event log."""
    try:
        config = LedgerConfig.from_yaml(config_file) if config_file else LedgerConfig()
    except ConfigError as exc:
        raise click.ClickException(str(exc))

    if event_log:
        config.event_log = event_log
    if not config.event_log:
        config.event_log = ".mintledger/events.jsonl"

    stats = run_demo(config)

    click.echo(f"Ledger          {stats['ledger_id']}")
    click.echo(f"Combined record {stats['combined_id']}")
    click.echo(f"Active records  {stats['active_records']}")
    click.echo(f"Withdrawn       {stats['withdrawn']}")
    click.echo(f"Change returned {stats['change']}")
    click.echo(f"Event log       {config.event_log}")
