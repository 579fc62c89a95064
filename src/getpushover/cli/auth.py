"""CLI: getpushover login|status|reset"""

import socket

import click
from rich.console import Console

from getpushover.errors import AuthError, PushoverError

console = Console()


def _run(coro):
    from getpushover.cli.main import _run
    return _run(coro)


@click.command("login")
@click.option("--email", default=None, help="Pushover account email")
@click.option("--device-name", default=None, help="Name to register this device under")
@click.pass_obj
def login(settings, email, device_name):
    """Log in to Pushover and register this device."""
    store = settings.store()
    email = email or click.prompt("Pushover email", default=store.get("email"))
    password = click.prompt("Password", hide_input=True)
    device_name = device_name or click.prompt(
        "Device name", default=store.get("device_name") or socket.gethostname().split(".")[0],
    )

    async def _login():
        async with settings.relay() as relay:
            try:
                secret = await relay.login(email, password)
            except AuthError as e:
                if not e.needs_twofa:
                    raise
                code = click.prompt("Two-factor code")
                secret = await relay.login(email, password, twofa=code)
            with console.status("Registering device..."):
                device_id = await relay.register_device(
                    secret, device_name, current_device_id=store.get("device_id"),
                )
            return secret, device_id

    try:
        secret, device_id = _run(_login())
    except PushoverError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)
    if not device_id:
        console.print(
            f"[red]A device named {device_name!r} is already registered. "
            "Delete it on the pushover.net dashboard or pick another name.[/red]"
        )
        raise SystemExit(1)

    store.set("email", email)
    store.set("device_name", device_name)
    store.set("secret", secret)
    store.set("device_id", device_id)
    console.print(f"[green]Registered device {device_name} (ID: {device_id})[/green]")
    console.print(f"[dim]Credentials saved to {store.path}[/dim]")


@click.command("status")
@click.pass_obj
def status(settings):
    """Show saved credentials."""
    creds = settings.store().credentials()
    console.print(f"Config: {settings.config}")
    if not creds.complete:
        console.print("[yellow]No device registered. Run `getpushover login`.[/yellow]")
        return
    ledger = settings.ledger()
    try:
        delivered = ledger.count()
    finally:
        ledger.close()
    console.print(f"[green]Registered[/green] as {creds.device_name} for {creds.email or 'unknown'} (ID: {creds.device_id})")
    console.print(f"Delivered messages on record: {delivered}")


@click.command("reset")
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def reset(settings, yes):
    """Forget saved credentials."""
    if not yes and not click.confirm(
        "Reset config? You will have to delete the current device from the pushover.net dashboard."
    ):
        return
    settings.store().clear()
    console.print("[green]Credentials cleared.[/green]")
