"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from adapters.hub.client import HubClient
from core.config import AppSettings, get_user_env_file
from core.errors import HubError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get(url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc)


async def _check_session(settings: AppSettings) -> tuple[bool, str]:
    try:
        async with HubClient(settings) as hub:
            connected = await hub.is_connected()
    except HubError as exc:
        return False, str(exc)
    if connected:
        return True, "Session cookie accepted"
    return False, "Not logged in (run `hubscout login`)"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="hubscout Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    table.add_row("User config", "OK", str(get_user_env_file()))
    if settings.hub_origin:
        table.add_row("Hub origin", "OK", settings.hub_origin)
    else:
        table.add_row("Hub origin", "FAIL", "No Hub origin saved")
    if settings.phone_home_url:
        table.add_row("Phone-home", "OK", settings.phone_home_url)
    else:
        table.add_row("Phone-home", "OPTIONAL", "Disabled (no HUBSCOUT_PHONE_HOME_URL)")

    if settings.hub_origin:
        # Connectivity (best-effort)
        ok_http, detail_http = asyncio.run(_check_http(settings.hub_origin, settings))
        table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", detail_http)

        ok_session, detail_session = asyncio.run(_check_session(settings))
        table.add_row("Session", "OK" if ok_session else "WARN", detail_session)

    _console.print(table)

    if not settings.hub_origin:
        _console.print("\n[yellow]Note:[/yellow] Save an origin with `hubscout origin set https://hub.example.com`.")
