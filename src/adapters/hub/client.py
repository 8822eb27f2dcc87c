"""Fachada del cliente del Hub.

Por qué una fachada:
- Es dueña del `httpx.AsyncClient` (y su jar de cookies) y lo comparte entre
  transporte, resolver, grafo y sesión.
- Los colaboradores externos (permisos, envío de telemetría, transporte HTTP
  de tests) se inyectan aquí y en ningún otro sitio.
"""

from __future__ import annotations

import asyncio
import logging
from http.cookiejar import CookieJar, LWPCookieJar
from typing import Any

import httpx

from adapters.http_client import build_async_client
from adapters.hub.cookies import clear_cookie_jar, load_cookie_jar, save_cookie_jar
from adapters.hub.graph import HubGraph
from adapters.hub.permissions import StaticPermissions
from adapters.hub.phone_home import PhoneHomeClient, PhoneHomeRequestBodyBuilder
from adapters.hub.relations import RelationResolver
from adapters.hub.session import HubSession
from adapters.hub.transport import HubTransport
from core.config import AppSettings
from core.domain.models import PhoneHomeRequestBody
from core.errors import RequestError
from core.interfaces.permissions import PermissionGrantor
from core.interfaces.telemetry import PhoneHomeSender

logger = logging.getLogger(__name__)

REGISTRATION_PATH = "/api/v1/registrations"
CURRENT_VERSION_PATH = "/api/v1/current-version"


class HubClient:
    """Punto de entrada único: `async with HubClient(settings) as hub: ...`."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        permissions: PermissionGrantor | None = None,
        sender: PhoneHomeSender | None = None,
        cookie_jar: CookieJar | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        if cookie_jar is None:
            cookie_jar = load_cookie_jar(self._settings.resolved_cookie_jar_path())
        self._cookie_jar = cookie_jar

        self._http = build_async_client(self._settings, cookies=cookie_jar, transport=http_transport)
        self.transport = HubTransport(
            self._http,
            self._settings.hub_origin,
            debug=self._settings.debug_requests,
        )
        self.relations = RelationResolver(self.transport, page_size=self._settings.relation_page_size)
        self.graph = HubGraph(self.transport, self.relations)
        self.session = HubSession(
            self.transport,
            permissions or StaticPermissions(self._settings.granted_origins),
        )
        self._sender: PhoneHomeSender = sender or PhoneHomeClient(self._settings)
        self._pending: set[asyncio.Task[None]] = set()

    async def __aenter__(self) -> HubClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    @property
    def origin(self) -> str | None:
        return self.transport.origin

    async def aclose(self) -> None:
        if self._pending:
            _, still_pending = await asyncio.wait(
                set(self._pending),
                timeout=self._settings.phone_home_grace_seconds,
            )
            for task in still_pending:
                task.cancel()
        await self._http.aclose()

    # Session

    async def login(self, username: str, password: str) -> Any:
        response = await self.session.login(username, password)
        if isinstance(self._cookie_jar, LWPCookieJar):
            save_cookie_jar(self._cookie_jar)
        return response

    async def logout(self) -> Any:
        try:
            return await self.session.logout()
        finally:
            if isinstance(self._cookie_jar, LWPCookieJar):
                clear_cookie_jar(self._cookie_jar)

    async def is_connected(self) -> bool:
        return await self.session.is_connected()

    async def get_current_user(self) -> Any:
        return await self.session.get_current_user()

    # Telemetry

    async def get_registration_id(self) -> str:
        body = await self.transport.get(REGISTRATION_PATH)
        registration_id = body.get("registrationId") if isinstance(body, dict) else None
        if not registration_id:
            raise RequestError("Hub registration response has no registrationId", url=REGISTRATION_PATH)
        return str(registration_id)

    async def get_hub_version(self) -> str:
        body = await self.transport.get(CURRENT_VERSION_PATH)
        if isinstance(body, str) and body:
            return body
        if isinstance(body, dict) and body.get("version"):
            return str(body["version"])
        raise RequestError("Hub version response has no version", url=CURRENT_VERSION_PATH)

    async def phone_home(
        self,
        third_party_name: str,
        third_party_version: str,
        plugin_version: str,
    ) -> PhoneHomeRequestBody:
        """Build the phone-home body and hand it to the sender without waiting.

        Fetching the registration id and Hub version can fail like any other
        request; the send itself never reports back.
        """

        builder = PhoneHomeRequestBodyBuilder()
        builder.registration_id = await self.get_registration_id()
        builder.black_duck_version = await self.get_hub_version()
        builder.plugin_version = plugin_version
        builder.third_party_name = third_party_name
        builder.third_party_version = third_party_version
        body = builder.build()

        task = asyncio.create_task(self._sender.send(body))
        self._pending.add(task)
        task.add_done_callback(self._on_sent)
        return body

    def _on_sent(self, task: asyncio.Task[None]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            logger.debug("Phone-home send cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.debug("Phone-home send failed: %s", exc)
