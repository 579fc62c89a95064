"""
getpushover CLI — `getpushover` command.

Commands:
  getpushover login      Log in and register this device
  getpushover status     Show saved credentials and ledger size
  getpushover reset      Forget credentials
  getpushover run        Stay connected and show notifications
  getpushover sync       Download and deliver pending messages once
  getpushover pending    List messages waiting on the relay
"""

import asyncio
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from getpushover import __version__
from getpushover.client import RelayClient
from getpushover.store import CONFIG_FILE, LEDGER_FILE, CredentialStore, DedupLedger
from getpushover.transport.http import DEFAULT_API_URL
from getpushover.transport.stream import DEFAULT_PUSH_URL

console = Console()


class Settings:
    def __init__(self, config: Path, db: Path, api_url: str, push_url: str):
        self.config = config
        self.db = db
        self.api_url = api_url
        self.push_url = push_url

    def store(self) -> CredentialStore:
        return CredentialStore(self.config)

    def ledger(self) -> DedupLedger:
        return DedupLedger(self.db)

    def relay(self) -> RelayClient:
        return RelayClient(api_url=self.api_url)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("websockets").setLevel(logging.WARNING)


def _run(coro):
    return asyncio.run(coro)


def _require_device(settings: Settings) -> CredentialStore:
    store = settings.store()
    if not store.credentials().complete:
        console.print("[red]No device registered. Run `getpushover login` first.[/red]")
        raise SystemExit(1)
    return store


@click.group()
@click.version_option(__version__)
@click.option("--config", type=click.Path(path_type=Path), default=CONFIG_FILE, envvar="GETPUSHOVER_CONFIG",
              show_default=True, help="Credential file")
@click.option("--db", type=click.Path(path_type=Path), default=LEDGER_FILE, envvar="GETPUSHOVER_DB",
              show_default=True, help="Delivered-message ledger")
@click.option("--api-url", default=DEFAULT_API_URL, envvar="GETPUSHOVER_API_URL", show_default=True)
@click.option("--push-url", default=DEFAULT_PUSH_URL, envvar="GETPUSHOVER_PUSH_URL", show_default=True)
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
@click.pass_context
def main(ctx: click.Context, config: Path, db: Path, api_url: str, push_url: str, verbose: bool):
    """getpushover — Pushover notifications on your desktop."""
    _setup_logging(verbose)
    ctx.obj = Settings(config=config, db=db, api_url=api_url, push_url=push_url)


# Register subcommands from separate modules
from getpushover.cli.auth import login, status, reset
from getpushover.cli.daemon import run_cmd, sync_cmd, pending_cmd

main.add_command(login)
main.add_command(status)
main.add_command(reset)
main.add_command(run_cmd)
main.add_command(sync_cmd)
main.add_command(pending_cmd)


if __name__ == "__main__":
    main()
