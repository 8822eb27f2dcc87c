"""CLI de hubscout (Typer + Rich).

Por qué aquí:
- Es el único sitio que convierte `HubError` en mensajes para el usuario.
- Cada comando abre un `HubClient`, ejecuta una operación y presenta el
  resultado; la lógica vive en `adapters.hub` y `core.services`.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Coroutine
from typing import Any, NoReturn, TypeVar

import typer
from pydantic import ValidationError
from rich.console import Console

from adapters.hub.client import HubClient
from adapters.hub.permissions import normalize_origin
from cli import doctor
from cli.ui_components import (
    build_bom_table,
    build_external_components_table,
    build_projects_table,
    build_risk_panel,
    build_vulnerabilities_table,
    print_banner,
)
from core.config import AppSettings, read_user_env_vars, write_user_env_vars
from core.domain.models import ComponentKeys
from core.errors import HubError, PermissionDeniedError
from core.interfaces.permissions import PermissionGrantor
from core.logging_config import configure_logging
from core.services.component_report import build_component_report

T = TypeVar("T")

logger = logging.getLogger(__name__)

app = typer.Typer(no_args_is_help=True, help="Explore a Hub server: components, vulnerabilities and projects.")
origin_app = typer.Typer(no_args_is_help=True, help="Manage the saved Hub origin.")
app.add_typer(origin_app, name="origin")
app.add_typer(doctor.app, name="doctor")

_console = Console()

ORIGIN_ENV_KEY = "HUBSCOUT_HUB_ORIGIN"
GRANTED_ORIGINS_ENV_KEY = "HUBSCOUT_GRANTED_ORIGINS"


class PromptPermissions:
    """Pide confirmación antes de enviar credenciales a un origin nuevo.

    Las concesiones se recuerdan en el .env de usuario, como hace el navegador
    con los permisos de una extensión.
    """

    def __init__(self, settings: AppSettings, *, assume_yes: bool = False) -> None:
        self._settings = settings
        self._assume_yes = assume_yes

    async def request_url(self, origin: str) -> None:
        granted = [normalize_origin(o) for o in self._settings.granted_origins]
        if normalize_origin(origin) in granted:
            return

        if not self._assume_yes and not typer.confirm(f"Allow hubscout to send credentials to {origin}?"):
            raise PermissionDeniedError(origin, "declined by user")

        granted.append(normalize_origin(origin))
        write_user_env_vars({GRANTED_ORIGINS_ENV_KEY: json.dumps(sorted(set(granted)))})


def build_hub_client(settings: AppSettings, *, permissions: PermissionGrantor | None = None) -> HubClient:
    return HubClient(settings, permissions=permissions)


def _settings(ctx: typer.Context) -> AppSettings:
    if isinstance(ctx.obj, AppSettings):
        return ctx.obj
    return AppSettings()


def _fail(message: object) -> NoReturn:
    _console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(code=1)


def _run(coro: Coroutine[Any, Any, T]) -> T:
    try:
        return asyncio.run(coro)
    except HubError as exc:
        _fail(exc)


def _print_json(payload: Any) -> None:
    # Plain echo: rich would fold long URLs and break the JSON.
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Log every Hub request."),
) -> None:
    try:
        settings = AppSettings()
    except ValidationError as exc:
        _fail(f"Invalid configuration: {exc}")
    if debug:
        settings = settings.model_copy(update={"debug_requests": True, "log_level": "DEBUG"})
    configure_logging(settings)
    ctx.obj = settings


@origin_app.command("set")
def origin_set(url: str = typer.Argument(..., help="Hub origin, e.g. https://hub.example.com")) -> None:
    """Save the Hub origin in the user config."""

    try:
        origin = AppSettings(hub_origin=url).hub_origin
    except ValidationError as exc:
        raise typer.BadParameter(str(exc.errors()[0]["msg"])) from exc
    if not origin:
        raise typer.BadParameter("origin must not be empty")

    env_path = write_user_env_vars({ORIGIN_ENV_KEY: origin})
    _console.print(f"[green]Saved Hub origin[/green] {origin} -> {env_path}")


@origin_app.command("show")
def origin_show(ctx: typer.Context) -> None:
    """Print the configured Hub origin."""

    origin = _settings(ctx).hub_origin
    if origin:
        _console.print(origin)
    else:
        _console.print("[yellow]No Hub origin saved.[/yellow] Run `hubscout origin set <url>`.")


@origin_app.command("clear")
def origin_clear() -> None:
    """Forget the saved Hub origin."""

    if ORIGIN_ENV_KEY not in read_user_env_vars():
        _console.print("[dim]No Hub origin saved.[/dim]")
        return
    write_user_env_vars({ORIGIN_ENV_KEY: ""})
    _console.print("[green]Hub origin cleared.[/green]")


@app.command()
def login(
    ctx: typer.Context,
    username: str = typer.Option(..., prompt=True, help="Hub username."),
    password: str = typer.Option(..., prompt=True, hide_input=True, help="Hub password."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Grant access to the origin without asking."),
) -> None:
    """Log in to the saved Hub origin."""

    settings = _settings(ctx)

    async def _login() -> None:
        permissions = PromptPermissions(settings, assume_yes=yes)
        async with build_hub_client(settings, permissions=permissions) as hub:
            await hub.login(username, password)
            if settings.phone_home_url:
                try:
                    await hub.phone_home(
                        settings.third_party_name,
                        settings.third_party_version,
                        settings.plugin_version,
                    )
                except HubError as exc:
                    logger.debug("Skipping phone-home: %s", exc)

    _run(_login())
    _console.print(f"[green]Logged in to[/green] {settings.hub_origin} as {username}")


@app.command()
def logout(ctx: typer.Context) -> None:
    """Log out and forget the session cookie."""

    settings = _settings(ctx)

    async def _logout() -> None:
        async with build_hub_client(settings) as hub:
            await hub.logout()

    _run(_logout())
    _console.print("[green]Logged out.[/green]")


@app.command()
def status(ctx: typer.Context) -> None:
    """Show the saved origin and whether the session is still valid."""

    settings = _settings(ctx)
    print_banner(_console)

    if not settings.hub_origin:
        _fail("No Hub origin saved. Run `hubscout origin set <url>`.")

    async def _status() -> Any:
        async with build_hub_client(settings) as hub:
            return await hub.get_current_user()

    user = _run(_status())
    _console.print(f"Origin: {settings.hub_origin}")
    if user:
        name = user.get("userName") if isinstance(user, dict) else None
        _console.print(f"[green]Connected[/green] as {name or 'unknown user'}")
    else:
        _console.print("[yellow]Not connected.[/yellow] Run `hubscout login`.")


@app.command()
def components(
    ctx: typer.Context,
    forge: str = typer.Argument(..., help="Forge name, e.g. maven or npmjs."),
    external_id: str = typer.Argument(..., help="Hub external id, e.g. org.slf4j:slf4j-api:1.7.25."),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON."),
) -> None:
    """Search the Hub for a component."""

    settings = _settings(ctx)
    keys = ComponentKeys(forge_name=forge, hub_external_id=external_id)

    async def _search() -> list[Any]:
        async with build_hub_client(settings) as hub:
            return await hub.graph.get_external_components(keys)

    found = _run(_search())
    if as_json:
        _print_json([component.to_json() for component in found])
        return
    if not found:
        _console.print(f"[yellow]No components found for[/yellow] {keys.query}")
        return
    _console.print(build_external_components_table(found))


@app.command()
def inspect(
    ctx: typer.Context,
    forge: str = typer.Argument(..., help="Forge name, e.g. maven or npmjs."),
    external_id: str = typer.Argument(..., help="Hub external id, e.g. org.slf4j:slf4j-api:1.7.25."),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON."),
) -> None:
    """Vulnerabilities, risk, projects and policy violations for a component."""

    settings = _settings(ctx)
    keys = ComponentKeys(forge_name=forge, hub_external_id=external_id)

    async def _inspect() -> Any:
        async with build_hub_client(settings) as hub:
            return await build_component_report(hub, keys)

    report = _run(_inspect())
    if as_json:
        _print_json(report.to_json())
        return
    if report.external_component is None:
        _console.print(f"[yellow]No components found for[/yellow] {keys.query}")
        return

    _console.print(build_external_components_table([report.external_component]))
    _console.print(build_vulnerabilities_table(report.vulnerabilities))
    if report.risk_profile is not None:
        _console.print(build_risk_panel(report.risk_profile))
    _console.print(build_projects_table(report.project_versions))
    if report.unresolved_references:
        _console.print(f"[yellow]{report.unresolved_references} project reference(s) could not be loaded.[/yellow]")
    _console.print(build_bom_table(report.bom_entries))


@app.command("phone-home")
def phone_home(ctx: typer.Context) -> None:
    """Send the usage phone-home for this client."""

    settings = _settings(ctx)
    if not settings.phone_home_url:
        _fail("No phone-home URL configured (HUBSCOUT_PHONE_HOME_URL).")

    async def _phone_home() -> Any:
        async with build_hub_client(settings) as hub:
            return await hub.phone_home(
                settings.third_party_name,
                settings.third_party_version,
                settings.plugin_version,
            )

    body = _run(_phone_home())
    _console.print(f"[green]Phone-home queued[/green] for registration {body.registration_id}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
