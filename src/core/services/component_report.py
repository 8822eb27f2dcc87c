"""Component report orchestration.

This module walks the Hub graph for one external component (search →
component version → vulnerabilities / risk profile / reference projects →
matching BOM entries → policy violations) and hands the CLI a single result
object, so the commands only deal with presentation.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from adapters.hub.client import HubClient
from core.domain.models import ComponentKeys, HubResource


@dataclass
class BomEntry:
    """A BOM component using the inspected version, with its policy violations."""

    component: HubResource
    policy_violations: list[HubResource] = field(default_factory=list)


@dataclass
class ComponentReport:
    keys: ComponentKeys
    external_component: HubResource | None = None
    component_version: HubResource | None = None
    vulnerabilities: list[HubResource] = field(default_factory=list)
    risk_profile: HubResource | None = None
    project_versions: list[HubResource] = field(default_factory=list)
    unresolved_references: int = 0
    bom_entries: list[BomEntry] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.external_component is not None

    def to_json(self) -> dict[str, Any]:
        def dump(resource: HubResource | None) -> dict[str, Any] | None:
            return resource.to_json() if resource is not None else None

        return {
            "query": self.keys.query,
            "externalComponent": dump(self.external_component),
            "componentVersion": dump(self.component_version),
            "vulnerabilities": [v.to_json() for v in self.vulnerabilities],
            "riskProfile": dump(self.risk_profile),
            "projectVersions": [p.to_json() for p in self.project_versions],
            "unresolvedReferences": self.unresolved_references,
            "bomComponents": [
                {
                    "component": entry.component.to_json(),
                    "policyViolations": [v.to_json() for v in entry.policy_violations],
                }
                for entry in self.bom_entries
            ],
        }


async def build_component_report(hub: HubClient, keys: ComponentKeys) -> ComponentReport:
    report = ComponentReport(keys=keys)

    externals = await hub.graph.get_external_components(keys)
    if not externals:
        return report

    external = externals[0]
    report.external_component = external
    component_version = await hub.graph.get_component_version(external)
    report.component_version = component_version

    vulnerabilities, risk_profile, references = await asyncio.gather(
        hub.graph.get_component_vulnerabilities(component_version),
        hub.graph.get_component_risk_profile(component_version),
        hub.graph.get_component_version_reference_projects(component_version),
    )
    report.vulnerabilities = vulnerabilities
    report.risk_profile = risk_profile
    report.project_versions = [pv for pv in references if pv is not None]
    report.unresolved_references = len(references) - len(report.project_versions)

    bom_components = await hub.graph.get_matching_bom_components(external, report.project_versions)
    violations = await asyncio.gather(
        *(hub.graph.get_component_policy_violations(component) for component in bom_components)
    )
    report.bom_entries = [
        BomEntry(component=component, policy_violations=component_violations)
        for component, component_violations in zip(bom_components, violations)
    ]
    return report
