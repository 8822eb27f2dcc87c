import asyncio

import httpx
import pytest

from conftest import ORIGIN, hub_resource, resource
from core.domain.models import ComponentKeys
from core.errors import OriginNotConfiguredError, RequestError

VERSION_URL = f"{ORIGIN}/api/components/c1/versions/v1"
PV1_URL = f"{ORIGIN}/api/projects/p1/versions/pv1"
PV2_URL = f"{ORIGIN}/api/projects/p2/versions/pv2"


@pytest.mark.asyncio
async def test_external_components_search_uses_composite_query(settings, make_client, fake_hub):
    fake_hub.add(
        "GET",
        "/api/components",
        json={"totalCount": 1, "items": [{"componentName": "slf4j-api", "version": VERSION_URL}]},
    )
    keys = ComponentKeys(forge_name="maven", hub_external_id="org.slf4j:slf4j-api:1.7.25")

    async with make_client(settings) as hub:
        found = await hub.graph.get_external_components(keys)

    assert [c.get("componentName") for c in found] == ["slf4j-api"]
    assert fake_hub.requests[0].url.params["q"] == "maven:org.slf4j:slf4j-api:1.7.25"
    assert "limit" not in fake_hub.requests[0].url.params


@pytest.mark.asyncio
async def test_external_components_search_failure_is_empty(settings, make_client, fake_hub):
    fake_hub.add("GET", "/api/components", status=401, json={"errorMessage": "Unauthorized"})

    async with make_client(settings) as hub:
        found = await hub.graph.get_external_components(ComponentKeys(forge_name="npmjs", hub_external_id="left-pad/1.0.0"))

    assert found == []


@pytest.mark.asyncio
async def test_external_components_search_without_origin_raises(settings, make_client, fake_hub):
    unconfigured = settings.model_copy(update={"hub_origin": None})

    async with make_client(unconfigured) as hub:
        with pytest.raises(OriginNotConfiguredError):
            await hub.graph.get_external_components(ComponentKeys(forge_name="maven", hub_external_id="a:b:1"))

    assert fake_hub.requests == []


@pytest.mark.asyncio
async def test_component_version_follows_version_url(settings, make_client, fake_hub):
    fake_hub.add("GET", VERSION_URL, json=resource(VERSION_URL, versionName="1.7.25"))
    external = hub_resource(version=VERSION_URL)

    async with make_client(settings) as hub:
        component_version = await hub.graph.get_component_version(external)

    assert component_version.self_url == VERSION_URL
    assert component_version["versionName"] == "1.7.25"


@pytest.mark.asyncio
async def test_component_version_failure_is_a_hard_error(settings, make_client, fake_hub):
    fake_hub.add("GET", VERSION_URL, status=404, json={"errorMessage": "Not found"})

    async with make_client(settings) as hub:
        with pytest.raises(RequestError):
            await hub.graph.get_component_version(hub_resource(version=VERSION_URL))


@pytest.mark.asyncio
async def test_vulnerability_details_urls_depend_on_source(settings, make_client, fake_hub):
    fake_hub.add(
        "GET",
        VERSION_URL + "/vulnerabilities",
        json={
            "items": [
                {"vulnerabilityName": "CVE-2020-1", "source": "NVD"},
                {"vulnerabilityName": "CVE-2020-1", "source": "VULNDB"},
                {"vulnerabilityName": "CVE-2020-1", "source": "OTHER"},
            ]
        },
    )
    component_version = hub_resource(VERSION_URL, {"vulnerabilities": VERSION_URL + "/vulnerabilities"})

    async with make_client(settings) as hub:
        vulnerabilities = await hub.graph.get_component_vulnerabilities(component_version)

    assert [v["detailsUrl"] for v in vulnerabilities] == [
        "https://web.nvd.nist.gov/view/vuln/search-results?query=CVE-2020-1&search_type=all&cves=on",
        "https://hub.example.com/#vulnerabilities/id:CVE-2020-1/view:overview",
        "",
    ]


@pytest.mark.asyncio
async def test_vulnerabilities_absent_relation_is_empty(settings, make_client, fake_hub):
    async with make_client(settings) as hub:
        assert await hub.graph.get_component_vulnerabilities(hub_resource(VERSION_URL)) == []
    assert fake_hub.requests == []


@pytest.mark.asyncio
async def test_matching_bom_components_keeps_input_order(settings, make_client, fake_hub):
    async def slow_pv1_components(request: httpx.Request) -> httpx.Response:
        # pv1 answers last; its matches must still come first.
        await asyncio.sleep(0.05)
        return httpx.Response(
            200,
            json={
                "items": [
                    {"componentName": "a", "componentVersion": "V1", "project": "pv1"},
                    {"componentName": "b", "componentVersion": "V2", "project": "pv1"},
                ]
            },
        )

    fake_hub.add("GET", PV1_URL + "/components", handler=slow_pv1_components)
    fake_hub.add(
        "GET",
        PV2_URL + "/components",
        json={"items": [{"componentName": "a", "componentVersion": "V1", "project": "pv2"}]},
    )
    pv1 = hub_resource(PV1_URL, {"components": PV1_URL + "/components"})
    pv2 = hub_resource(PV2_URL, {"components": PV2_URL + "/components"})

    async with make_client(settings) as hub:
        matches = await hub.graph.get_matching_bom_components(hub_resource(version="V1"), [pv1, pv2])

    assert [(m["project"], m["componentVersion"]) for m in matches] == [("pv1", "V1"), ("pv2", "V1")]


@pytest.mark.asyncio
async def test_matching_bom_components_uses_exact_equality(settings, make_client, fake_hub):
    fake_hub.add(
        "GET",
        PV1_URL + "/components",
        json={"items": [{"componentVersion": VERSION_URL + "/"}, {"componentVersion": VERSION_URL.upper()}]},
    )
    pv1 = hub_resource(PV1_URL, {"components": PV1_URL + "/components"})

    async with make_client(settings) as hub:
        assert await hub.graph.get_matching_bom_components(hub_resource(version=VERSION_URL), [pv1]) == []


@pytest.mark.asyncio
async def test_reference_projects_keep_failed_slots_as_none(settings, make_client, fake_hub):
    fake_hub.add(
        "GET",
        VERSION_URL + "/references",
        json={
            "items": [
                {"projectName": "alpha", "projectVersionUrl": PV1_URL},
                {"projectName": "beta", "projectVersionUrl": PV2_URL},
            ]
        },
    )
    fake_hub.add("GET", PV1_URL, json=resource(PV1_URL, versionName="1.0"))
    fake_hub.add("GET", PV2_URL, status=403, json={"errorMessage": "Forbidden"})
    component_version = hub_resource(VERSION_URL, {"references": VERSION_URL + "/references"})

    async with make_client(settings) as hub:
        projects = await hub.graph.get_component_version_reference_projects(component_version)

    assert len(projects) == 2
    assert projects[0] is not None
    assert projects[0]["projectName"] == "alpha"
    assert projects[0]["versionName"] == "1.0"
    assert projects[1] is None


@pytest.mark.asyncio
async def test_reference_project_decoration_does_not_touch_the_reference(settings, make_client, fake_hub):
    fake_hub.add("GET", PV1_URL, json=resource(PV1_URL, versionName="1.0"))
    reference = hub_resource(projectName="alpha", projectVersionUrl=PV1_URL)

    async with make_client(settings) as hub:
        project_version = await hub.graph.get_reference_project_version(reference)

    assert project_version is not None
    assert project_version["projectName"] == "alpha"
    assert "versionName" not in reference


@pytest.mark.asyncio
async def test_policy_violations_and_project_components_are_lists(settings, make_client, fake_hub):
    bom_url = PV1_URL + "/components/x"
    fake_hub.add("GET", bom_url + "/policy-rules", json={"items": [{"name": "No GPL"}]})
    fake_hub.add("GET", PV1_URL + "/components", json={"items": [{"componentName": "x"}]})
    bom_component = hub_resource(bom_url, {"policy-rules": bom_url + "/policy-rules"})
    project_version = hub_resource(PV1_URL, {"components": PV1_URL + "/components"})

    async with make_client(settings) as hub:
        violations = await hub.graph.get_component_policy_violations(bom_component)
        components = await hub.graph.get_project_version_components(project_version)

    assert [v["name"] for v in violations] == ["No GPL"]
    assert [c["componentName"] for c in components] == ["x"]


@pytest.mark.asyncio
async def test_risk_profile_is_a_single_resource(settings, make_client, fake_hub):
    fake_hub.add("GET", VERSION_URL + "/risk-profile", json={"categories": {"VULNERABILITY": {"HIGH": 2}}})
    component_version = hub_resource(VERSION_URL, {"risk-profile": VERSION_URL + "/risk-profile"})

    async with make_client(settings) as hub:
        risk_profile = await hub.graph.get_component_risk_profile(component_version)

    assert risk_profile is not None
    assert risk_profile["categories"]["VULNERABILITY"]["HIGH"] == 2


@pytest.mark.asyncio
async def test_external_components_search_skips_malformed_items(settings, make_client, fake_hub):
    fake_hub.add(
        "GET",
        "/api/components",
        json={
            "items": [
                {"componentName": "broken", "_meta": {"links": None}},
                {"componentName": "slf4j-api", "version": VERSION_URL},
            ]
        },
    )

    async with make_client(settings) as hub:
        found = await hub.graph.get_external_components(ComponentKeys(forge_name="maven", hub_external_id="a:b:1"))

    assert [c["componentName"] for c in found] == ["slf4j-api"]


@pytest.mark.asyncio
async def test_malformed_component_version_is_a_request_error(settings, make_client, fake_hub):
    fake_hub.add("GET", VERSION_URL, json={"_meta": {"links": [{"href": VERSION_URL + "/references"}]}})

    async with make_client(settings) as hub:
        with pytest.raises(RequestError, match="malformed"):
            await hub.graph.get_component_version(hub_resource(version=VERSION_URL))


@pytest.mark.asyncio
async def test_malformed_reference_project_leaves_a_none_slot(settings, make_client, fake_hub):
    fake_hub.add(
        "GET",
        VERSION_URL + "/references",
        json={
            "items": [
                {"projectName": "alpha", "projectVersionUrl": PV1_URL},
                {"projectName": "beta", "projectVersionUrl": PV2_URL},
            ]
        },
    )
    fake_hub.add("GET", PV1_URL, json=resource(PV1_URL, versionName="1.0"))
    fake_hub.add("GET", PV2_URL, json={"_meta": {"links": [{"href": PV2_URL + "/components"}]}})
    component_version = hub_resource(VERSION_URL, {"references": VERSION_URL + "/references"})

    async with make_client(settings) as hub:
        projects = await hub.graph.get_component_version_reference_projects(component_version)

    assert len(projects) == 2
    assert projects[0] is not None
    assert projects[0]["projectName"] == "alpha"
    assert projects[1] is None
