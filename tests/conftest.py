"""Shared fixtures: an in-memory Hub served through `httpx.MockTransport`."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from http.cookiejar import CookieJar
from typing import Any, Union

import httpx
import pytest

from adapters.hub.client import HubClient
from adapters.hub.permissions import StaticPermissions
from core.config import AppSettings
from core.domain.models import HubResource

ORIGIN = "https://hub.example.com"

Handler = Callable[[httpx.Request], Union[httpx.Response, Awaitable[httpx.Response]]]


def resource(self_url: str | None = None, links: dict[str, str] | None = None, **fields: Any) -> dict[str, Any]:
    """Raw Hub JSON for a resource with `_meta.links`."""

    meta: dict[str, Any] = {"links": [{"rel": rel, "href": href} for rel, href in (links or {}).items()]}
    if self_url:
        meta["href"] = self_url
    return {"_meta": meta, **fields}


def hub_resource(self_url: str | None = None, links: dict[str, str] | None = None, **fields: Any) -> HubResource:
    return HubResource.model_validate(resource(self_url, links, **fields))


class FakeHub:
    """Routes requests by method + URL without query string; records everything."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        status: int = 200,
        text: str | None = None,
        headers: dict[str, str] | None = None,
        handler: Handler | None = None,
    ) -> None:
        if url.startswith("/"):
            url = ORIGIN + url

        if handler is None:

            def handler(request: httpx.Request) -> httpx.Response:
                if text is not None:
                    return httpx.Response(status, text=text, headers=headers)
                return httpx.Response(status, json=json, headers=headers)

        self.routes[(method, url)] = handler

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, f"{request.url.scheme}://{request.url.host}{request.url.path}")
        handler = self.routes.get(key)
        if handler is None:
            return httpx.Response(404, json={"errorMessage": f"No route for {key}"})
        response = handler(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def fake_hub() -> FakeHub:
    return FakeHub()


@pytest.fixture
def settings(tmp_path) -> AppSettings:
    return AppSettings(
        _env_file=None,
        hub_origin=ORIGIN,
        cookie_jar_path=tmp_path / "cookies.lwp",
        granted_origins=[ORIGIN],
    )


@pytest.fixture
def make_client(fake_hub: FakeHub) -> Callable[..., HubClient]:
    def factory(settings: AppSettings, **kwargs: Any) -> HubClient:
        kwargs.setdefault("cookie_jar", CookieJar())
        kwargs.setdefault("permissions", StaticPermissions(settings.granted_origins))
        return HubClient(settings, http_transport=fake_hub.transport(), **kwargs)

    return factory


VERSION_URL = f"{ORIGIN}/api/components/c1/versions/v1"
PROJECT_VERSION_URL = f"{ORIGIN}/api/projects/p1/versions/pv1"
BOM_COMPONENT_URL = f"{PROJECT_VERSION_URL}/components/c1"


def seed_component_graph(fake_hub: FakeHub) -> None:
    """One component version used by one project, with one policy violation."""

    fake_hub.add(
        "GET",
        "/api/components",
        json={"totalCount": 1, "items": [{"componentName": "slf4j-api", "version": VERSION_URL}]},
    )
    fake_hub.add(
        "GET",
        VERSION_URL,
        json=resource(
            VERSION_URL,
            {
                "vulnerabilities": VERSION_URL + "/vulnerabilities",
                "risk-profile": VERSION_URL + "/risk-profile",
                "references": VERSION_URL + "/references",
            },
            versionName="1.7.25",
        ),
    )
    fake_hub.add(
        "GET",
        VERSION_URL + "/vulnerabilities",
        json={"items": [{"vulnerabilityName": "CVE-2018-8088", "source": "NVD", "severity": "HIGH"}]},
    )
    fake_hub.add("GET", VERSION_URL + "/risk-profile", json={"categories": {"VULNERABILITY": {"HIGH": 1}}})
    fake_hub.add(
        "GET",
        VERSION_URL + "/references",
        json={"items": [{"projectName": "billing", "projectVersionUrl": PROJECT_VERSION_URL}]},
    )
    fake_hub.add(
        "GET",
        PROJECT_VERSION_URL,
        json=resource(PROJECT_VERSION_URL, {"components": PROJECT_VERSION_URL + "/components"}, versionName="2.0"),
    )
    fake_hub.add(
        "GET",
        PROJECT_VERSION_URL + "/components",
        json={
            "items": [
                resource(
                    BOM_COMPONENT_URL,
                    {"policy-rules": BOM_COMPONENT_URL + "/policy-rules"},
                    componentName="slf4j-api",
                    componentVersion=VERSION_URL,
                ),
                resource(componentName="guava", componentVersion=f"{ORIGIN}/api/components/c2/versions/v9"),
            ]
        },
    )
    fake_hub.add("GET", BOM_COMPONENT_URL + "/policy-rules", json={"items": [{"name": "No high vulnerabilities"}]})
