import asyncio
import sys
import traceback
from datetime import datetime
from pathlib import Path

import click
import structlog

from contract_player import __version__
from contract_player.constants import DEFAULT_TRANSFER_COUNT
from contract_player.definition import RunDefinition
from contract_player.exceptions import PlayerError
from contract_player.exceptions.config import ConfigurationError
from contract_player.runner import LifecycleRunner, RunReport
from contract_player.utils.formatting import to_hex
from contract_player.utils.logs import configure_logging, construct_log_file_name

log = structlog.get_logger(__name__)


@click.command(context_settings={"max_content_width": 120})
@click.argument("count", type=click.IntRange(min=0), default=DEFAULT_TRANSFER_COUNT)
@click.option(
    "--definition",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML run definition. Without one, a local development node is assumed.",
)
@click.option("--node-url", default=None, help="JSON-RPC endpoint of the Starknet node.")
@click.option(
    "--private-key",
    envvar="ACCOUNT_PRIVATE_KEY",
    default=None,
    help="Private key of the submitting account.",
)
@click.option("--timeout", type=float, default=None, help="Seconds to wait per transaction.")
@click.option("--poll-interval", type=float, default=None, help="Seconds between receipt polls.")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    show_default=True,
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Also write a debug log file to this directory.",
)
@click.version_option(__version__)
def main(
    count, definition, node_url, private_key, timeout, poll_interval, log_level, log_dir
):
    """Declare and deploy a contract, then submit COUNT transfers to it.

    Exits with 0 once every transaction is accepted, otherwise with the exit
    code of the error that stopped the run:

        2      invalid configuration or contract artifact

        2x     a transaction reverted, timed out or the node failed, or the
               contract address is taken by another class

        10     anything unexpected
    """
    log_file = None
    if log_dir is not None:
        name = definition.stem if definition else "default"
        log_file = construct_log_file_name(log_dir, name, datetime.now())
        click.secho(f"Writing log to {log_file}", fg="yellow")
    configure_logging(log_level, log_file)

    try:
        run_definition = RunDefinition(
            definition,
            overrides={
                "node": {"url": node_url},
                "account": {"private_key": private_key},
                "settings": {"timeout": timeout, "poll_interval": poll_interval},
            },
        )
        runner = LifecycleRunner.from_definition(run_definition)
    except ConfigurationError as ex:
        log.error("Invalid configuration", message=str(ex))
        click.secho(f"Error: {ex}", fg="red", err=True)
        sys.exit(2)

    exit_code = run_(runner, count)
    sys.exit(exit_code)


def run_(runner: LifecycleRunner, count: int) -> int:
    """Execute the run and translate its result into an exit code."""
    try:
        report = asyncio.run(runner.run(count))
    except PlayerError as ex:
        log.error("Run finished", result="error", message=str(ex))
        click.secho(f"Error: {ex}", fg="red", err=True)
        return ex.exit_code
    except Exception:
        log.exception("Exception while running")
        click.secho(traceback.format_exc(), fg="red", err=True)
        return 10

    log.info("Run finished", result="success")
    click.secho(format_report(report), fg="green")
    return 0


def format_report(report: RunReport) -> str:
    return (
        f"Class {to_hex(report.class_hash)} "
        f"({'declared' if report.declared else 'already declared'}), "
        f"contract {to_hex(report.address)} "
        f"({'deployed' if report.deployed else 'already deployed'}), "
        f"{len(report.transfers)} transfers accepted, "
        f"{report.nonces_consumed} nonces consumed."
    )
