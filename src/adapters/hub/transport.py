"""Transporte HTTP del Hub.

Responsabilidad:
- Construir URLs absolutas (rutas `/...` contra el origin configurado) con
  parámetros de query en orden de inserción.
- Ejecutar peticiones con credenciales (el jar de cookies del cliente) y
  normalizar fallos HTTP, de red y de JSON en un único canal: `RequestError`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from core.errors import InvalidUrlError, OriginNotConfiguredError, RequestError

logger = logging.getLogger(__name__)

_DECODE_FAILURE = "Unable to decode the Hub response body"


def _decode_json(response: httpx.Response) -> tuple[Any, bool]:
    """Devuelve `(body, decoded)`; un cuerpo que no es JSON da `(None, False)`."""

    try:
        return response.json(), True
    except ValueError:
        return None, False


def _error_message(response: httpx.Response, body: Any, decoded: bool) -> str:
    if isinstance(body, dict):
        message = body.get("errorMessage")
        if isinstance(message, str) and message:
            return message
    if not decoded:
        return _DECODE_FAILURE
    return response.reason_phrase or "Hub request failed"


class HubTransport:
    """Peticiones al Hub sobre un `httpx.AsyncClient` compartido.

    `origin=None` es el estado explícito "sin configurar": cualquier ruta
    relativa falla de inmediato con `OriginNotConfiguredError`.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        origin: str | None,
        *,
        debug: bool = False,
    ) -> None:
        self._client = client
        self._origin = origin.rstrip("/") if origin else None
        self._debug = debug

    @property
    def origin(self) -> str | None:
        return self._origin

    def require_origin(self) -> str:
        if not self._origin:
            raise OriginNotConfiguredError()
        return self._origin

    def build_url(self, base: str, query: Mapping[str, object] | None = None) -> httpx.URL:
        if not isinstance(base, str) or not base:
            raise InvalidUrlError(f"Invalid Hub URL: {base!r}")

        try:
            if base.startswith("//"):
                raise InvalidUrlError(f"Protocol-relative URLs are not supported: {base}")
            if base.startswith("/"):
                url = httpx.URL(self.require_origin()).join(base)
            else:
                url = httpx.URL(base)
                if not url.is_absolute_url:
                    raise InvalidUrlError(f"Expected an absolute or root-relative URL: {base}")
        except httpx.InvalidURL as exc:
            raise InvalidUrlError(f"Invalid Hub URL {base!r}: {exc}") from exc

        for key, value in (query or {}).items():
            url = url.copy_add_param(key, str(value))
        return url

    async def request(
        self,
        method: str,
        base: str,
        *,
        query: Mapping[str, object] | None = None,
        headers: Mapping[str, str] | None = None,
        content: str | bytes | None = None,
    ) -> Any:
        url = self.build_url(base, query)

        if self._debug:
            logger.info("Make Hub %s request: %s", method, url)

        try:
            response = await self._client.request(method, url, headers=headers, content=content)
        except httpx.HTTPError as exc:
            if self._debug:
                logger.warning("Hub %s request failed: %s (%s)", method, url, exc)
            raise RequestError(f"{method} {url} failed: {exc}", url=str(url)) from exc

        body, decoded = _decode_json(response)

        if not response.is_success:
            if self._debug:
                logger.warning("Hub %s request failed: %s (HTTP %s)", method, url, response.status_code)
            raise RequestError(
                _error_message(response, body, decoded),
                status_code=response.status_code,
                url=str(url),
                body_decoded=decoded,
            )

        if self._debug:
            logger.info("Hub %s request completed: %s", method, response.url)
            logger.info("Hub %s request status: %s", method, response.status_code)

        return body

    async def get(self, base: str, **opts: Any) -> Any:
        return await self.request("GET", base, **opts)

    async def post(self, base: str, **opts: Any) -> Any:
        return await self.request("POST", base, **opts)
