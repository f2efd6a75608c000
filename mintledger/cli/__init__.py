"""
mintledger/cli/__init__.py

mintledger CLI — root Click command group.

Registered in pyproject.toml as:

    [project.scripts]
    mintledger = "mintledger.cli:cli"

Adding a new command:
    1. Create mintledger/cli/your_command.py with a @click.command()
    2. Import it here
    3. cli.add_command(your_command)
"""

import click

from mintledger.cli.demo import demo_command
from mintledger.cli.replay import replay_command


@click.group()
@click.version_option(package_name="mintledger")
def cli() -> None:
    """
    mintledger — asset ledger tools.

    \b
    Commands:
      replay    Replay an event log and check its history.
      demo      Run the reference scenario and write an event log.

    \b
    Quick start:
      mintledger demo --events events.jsonl
      mintledger replay events.jsonl
      mintledger replay events.jsonl --format json
    """
    pass


cli.add_command(replay_command)
cli.add_command(demo_command)
