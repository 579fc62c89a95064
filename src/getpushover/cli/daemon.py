"""CLI: getpushover run|sync|pending"""

import json
import logging

import click
import httpx
from rich.console import Console
from rich.table import Table

from getpushover.errors import PushoverError
from getpushover.notify import ConsoleNotifier, DesktopNotifier
from getpushover.session import DEFAULT_IDLE_TIMEOUT_S, SessionManager
from getpushover.sync import SyncPipeline

console = Console()
logger = logging.getLogger(__name__)


def _run(coro):
    from getpushover.cli.main import _run
    return _run(coro)


def _require_device(settings):
    from getpushover.cli.main import _require_device
    return _require_device(settings)


@click.command("run")
@click.option("--sync-on-start/--no-sync-on-start", default=True, show_default=True,
              help="Deliver messages that arrived while offline before connecting")
@click.option("--console", "use_console", is_flag=True, help="Print notifications instead of desktop popups")
@click.option("--idle-timeout", type=float, default=DEFAULT_IDLE_TIMEOUT_S, show_default=True,
              help="Seconds without any frame before reconnecting")
@click.option("--backoff-max", type=float, default=60.0, show_default=True,
              help="Longest wait between reconnect attempts")
@click.pass_obj
def run_cmd(settings, sync_on_start, use_console, idle_timeout, backoff_max):
    """Stay connected to Pushover and show notifications (Ctrl+C to exit)."""
    store = _require_device(settings)
    notifier = ConsoleNotifier(console) if use_console else DesktopNotifier()
    logger.info(f"Using config: {store.path}")

    async def _daemon():
        ledger = settings.ledger()
        async with settings.relay() as relay:
            pipeline = SyncPipeline(relay, store, ledger, notifier)
            session = SessionManager(
                relay, store, pipeline,
                push_url=settings.push_url,
                idle_timeout=idle_timeout,
                backoff_max=backoff_max,
            )
            try:
                if sync_on_start:
                    await pipeline.run()
                await session.run()
            finally:
                await session.stop()
                await session.drain()
                ledger.close()

    try:
        _run(_daemon())
    except KeyboardInterrupt:
        console.print("[dim]Disconnected.[/dim]")


@click.command("sync")
@click.option("--console", "use_console", is_flag=True, help="Print notifications instead of desktop popups")
@click.pass_obj
def sync_cmd(settings, use_console):
    """Download, deliver and acknowledge pending messages once."""
    store = _require_device(settings)
    notifier = ConsoleNotifier(console) if use_console else DesktopNotifier()

    async def _sync():
        ledger = settings.ledger()
        try:
            async with settings.relay() as relay:
                return await SyncPipeline(relay, store, ledger, notifier).run()
        finally:
            ledger.close()

    result = _run(_sync())
    console.print(
        f"[green]{result.fetched} fetched, {len(result.delivered)} delivered, "
        f"{len(result.skipped)} already seen[/green]"
    )
    if result.acknowledged is not None and not result.acknowledge_ok:
        console.print(f"[yellow]Acknowledgment of message {result.acknowledged} failed; will retry next sync.[/yellow]")


@click.command("pending")
@click.option("--json-output", "--json", is_flag=True)
@click.pass_obj
def pending_cmd(settings, json_output):
    """List messages waiting on the relay without acknowledging them."""
    creds = _require_device(settings).credentials()

    async def _pending():
        async with settings.relay() as relay:
            return await relay.fetch_messages(creds.secret, creds.device_id)

    try:
        messages = _run(_pending())
    except (PushoverError, httpx.HTTPError) as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)
    if json_output:
        click.echo(json.dumps([m.model_dump() for m in messages], indent=2))
        return
    table = Table(title=f"Pending messages ({len(messages)})")
    table.add_column("ID", style="bold")
    table.add_column("Received")
    table.add_column("Title")
    table.add_column("Message")
    for m in messages:
        table.add_row(str(m.id), str(m.received_at), m.title or m.app or "", m.body)
    console.print(table)
