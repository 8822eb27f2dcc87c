"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import HubResource
from core.services.component_report import BomEntry


def _cell(resource: HubResource, key: str) -> str:
    value = resource.get(key)
    if value is None or value == "":
        return "-"
    return str(value)


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida."""

    title = Text("hubscout", style="bold cyan")
    subtitle = Text("Componentes • Vulnerabilidades • Proyectos", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_external_components_table(components: Iterable[HubResource]) -> Table:
    table = Table(title="Components")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Version", style="white")
    table.add_column("Origin id", style="dim")
    table.add_column("Version URL", style="magenta")
    for component in components:
        table.add_row(
            _cell(component, "componentName"),
            _cell(component, "versionName"),
            _cell(component, "originId"),
            _cell(component, "version"),
        )
    return table


def build_vulnerabilities_table(vulnerabilities: Iterable[HubResource]) -> Table:
    table = Table(title="Vulnerabilities")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Source", style="white")
    table.add_column("Severity", style="red")
    table.add_column("Score", style="yellow")
    table.add_column("Details", style="magenta")
    for vulnerability in vulnerabilities:
        table.add_row(
            _cell(vulnerability, "vulnerabilityName"),
            _cell(vulnerability, "source"),
            _cell(vulnerability, "severity"),
            _cell(vulnerability, "baseScore"),
            _cell(vulnerability, "detailsUrl"),
        )
    return table


def build_projects_table(project_versions: Iterable[HubResource]) -> Table:
    table = Table(title="Projects using this version")
    table.add_column("Project", style="cyan", no_wrap=True)
    table.add_column("Version", style="white")
    table.add_column("Phase", style="dim")
    table.add_column("Distribution", style="dim")
    for project_version in project_versions:
        table.add_row(
            _cell(project_version, "projectName"),
            _cell(project_version, "versionName"),
            _cell(project_version, "phase"),
            _cell(project_version, "distribution"),
        )
    return table


def build_bom_table(entries: Iterable[BomEntry]) -> Table:
    table = Table(title="BOM entries")
    table.add_column("Component", style="cyan", no_wrap=True)
    table.add_column("Version", style="white")
    table.add_column("Policy status", style="yellow")
    table.add_column("Violated rules", style="red")
    for entry in entries:
        rules = ", ".join(_cell(rule, "name") for rule in entry.policy_violations) or "-"
        table.add_row(
            _cell(entry.component, "componentName"),
            _cell(entry.component, "componentVersionName"),
            _cell(entry.component, "policyStatus"),
            rules,
        )
    return table


def build_risk_panel(risk_profile: HubResource) -> Panel:
    """Panel con los contadores por categoría del `risk-profile`."""

    categories: Any = risk_profile.get("categories")
    body = Text()
    if isinstance(categories, dict) and categories:
        for category, counts in sorted(categories.items()):
            body.append(f"{category}: ", style="bold")
            if isinstance(counts, dict):
                body.append(", ".join(f"{level}={count}" for level, count in sorted(counts.items())))
            else:
                body.append(str(counts))
            body.append("\n")
    else:
        body.append("No risk data", style="dim")

    return Panel(body, title=Text("Risk profile", style="bold yellow"), border_style="yellow")
