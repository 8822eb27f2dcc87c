"""Graph traversal over Hub resources.

Every operation here is a thin composition of resolver calls. The two
fan-out points (reference projects and BOM matching) run their sub-requests
concurrently with `asyncio.gather`, which hands results back in input order,
so callers never see completion order.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from urllib.parse import quote

from pydantic import ValidationError

from adapters.hub.relations import RelationResolver
from adapters.hub.transport import HubTransport
from core.domain.models import ComponentKeys, HubResource
from core.domain.relations import Relation, VulnerabilitySource
from core.errors import HubError, RequestError

logger = logging.getLogger(__name__)

COMPONENTS_SEARCH_PATH = "/api/components"
NVD_SEARCH_URL = "https://web.nvd.nist.gov/view/vuln/search-results?query={name}&search_type=all&cves=on"


def vulnerability_details_url(vulnerability: HubResource, origin: str | None) -> str:
    """Where a human can read about `vulnerability`; "" for unknown sources."""

    name = vulnerability.get("vulnerabilityName")
    if not isinstance(name, str) or not name:
        return ""
    # Names are percent-encoded so a stray `&`, `#` or `/` cannot break the link.
    encoded = quote(name, safe="")

    source = vulnerability.get("source")
    if source == VulnerabilitySource.NVD.value:
        return NVD_SEARCH_URL.format(name=encoded)
    if source == VulnerabilitySource.VULNDB.value and origin:
        return f"{origin}/#vulnerabilities/id:{encoded}/view:overview"
    return ""


class HubGraph:
    def __init__(self, transport: HubTransport, resolver: RelationResolver) -> None:
        self._transport = transport
        self._resolver = resolver

    async def get_external_components(self, keys: ComponentKeys) -> list[HubResource]:
        """Search components by `forge:externalId`.

        The search endpoint has no originating resource, so this goes straight
        to the transport. An unset origin still raises.
        """

        try:
            response = await self._transport.get(COMPONENTS_SEARCH_PATH, query={"q": keys.query})
        except RequestError as exc:
            logger.debug("Component search %r failed: %s", keys.query, exc)
            return []

        items = response.get("items") if isinstance(response, dict) else None
        if not isinstance(items, list):
            return []
        components: list[HubResource] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            try:
                components.append(HubResource.model_validate(item))
            except ValidationError as exc:
                logger.debug("Skipping malformed component for %r: %s", keys.query, exc)
        return components

    async def get_component_version(self, external_component: HubResource) -> HubResource:
        version_url = external_component.get("version")
        body = await self._transport.get(version_url)
        if not isinstance(body, dict):
            raise RequestError("Component version response was not a JSON object", url=version_url)
        try:
            return HubResource.model_validate(body)
        except ValidationError as exc:
            raise RequestError(f"Component version response is malformed: {exc}", url=version_url) from exc

    async def get_component_version_references(self, component_version: HubResource) -> list[HubResource]:
        return await self._resolver.get_list_relation(component_version, Relation.REFERENCES)

    async def get_reference_project_version(self, reference: HubResource) -> HubResource | None:
        """Project version a reference points at, tagged with the project name."""

        try:
            body = await self._transport.get(reference.get("projectVersionUrl"))
        except HubError as exc:
            logger.debug("Reference project version %s failed: %s", reference.get("projectVersionUrl"), exc)
            return None

        if not isinstance(body, dict):
            return None
        try:
            project_version = HubResource.model_validate(body)
        except ValidationError as exc:
            logger.debug("Reference project version %s is malformed: %s", reference.get("projectVersionUrl"), exc)
            return None
        return project_version.decorate(projectName=reference.get("projectName"))

    async def get_component_version_reference_projects(
        self, component_version: HubResource
    ) -> list[HubResource | None]:
        """Project versions whose BOM contains `component_version`.

        A reference whose project version could not be fetched leaves `None`
        in its slot.
        """

        references = await self.get_component_version_references(component_version)
        return list(await asyncio.gather(*(self.get_reference_project_version(ref) for ref in references)))

    async def get_matching_bom_components(
        self,
        external_component: HubResource,
        project_versions: Sequence[HubResource],
    ) -> list[HubResource]:
        """One BOM entry per project version that uses exactly this component version."""

        version = external_component.get("version")

        async def matching(project_version: HubResource) -> list[HubResource]:
            bom_components = await self.get_project_version_components(project_version)
            return [c for c in bom_components if c.get("componentVersion") == version]

        per_project = await asyncio.gather(*(matching(pv) for pv in project_versions))
        return [component for components in per_project for component in components]

    async def get_component_policy_violations(self, bom_component: HubResource) -> list[HubResource]:
        return await self._resolver.get_list_relation(bom_component, Relation.POLICY_RULES)

    async def get_project_version_components(self, project_version: HubResource) -> list[HubResource]:
        return await self._resolver.get_list_relation(project_version, Relation.COMPONENTS)

    async def get_component_vulnerabilities(self, component_version: HubResource) -> list[HubResource]:
        vulnerabilities = await self._resolver.get_list_relation(component_version, Relation.VULNERABILITIES)
        origin = self._transport.origin
        return [v.decorate(detailsUrl=vulnerability_details_url(v, origin)) for v in vulnerabilities]

    async def get_component_risk_profile(self, component_version: HubResource) -> HubResource | None:
        return await self._resolver.get_relation(component_version, Relation.RISK_PROFILE)
