"""Phone-home (telemetría de uso).

Responsabilidad:
- Construir el cuerpo (`PhoneHomeRequestBodyBuilder`) con el id de registro y
  la versión del Hub.
- Enviarlo sin bloquear a nadie: `PhoneHomeClient.send` nunca lanza, solo
  registra el resultado.
"""

from __future__ import annotations

import logging

import httpx

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.models import PhoneHomeRequestBody

logger = logging.getLogger(__name__)

PRODUCT_NAME = "Hub"


class PhoneHomeRequestBodyBuilder:
    """Acumula los campos del phone-home y valida que estén todos."""

    def __init__(self) -> None:
        self.registration_id: str | None = None
        self.black_duck_name: str = PRODUCT_NAME
        self.black_duck_version: str | None = None
        self.plugin_version: str | None = None
        self.third_party_name: str | None = None
        self.third_party_version: str | None = None

    def build(self) -> PhoneHomeRequestBody:
        values = {
            "registration_id": self.registration_id,
            "black_duck_name": self.black_duck_name,
            "black_duck_version": self.black_duck_version,
            "plugin_version": self.plugin_version,
            "third_party_name": self.third_party_name,
            "third_party_version": self.third_party_version,
        }
        missing = [name for name, value in values.items() if not value]
        if missing:
            raise ValueError(f"Phone-home body is missing: {', '.join(missing)}")
        return PhoneHomeRequestBody(**values)


class PhoneHomeClient:
    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._transport = transport

    async def send(self, body: PhoneHomeRequestBody) -> None:
        url = self._settings.phone_home_url
        if not url:
            logger.debug("Phone-home disabled (no phone_home_url); dropping payload")
            return

        try:
            async with build_async_client(self._settings, transport=self._transport) as client:
                response = await client.post(url, json=body.to_json())
        except httpx.HTTPError as exc:
            logger.debug("Phone-home to %s failed: %s", url, exc)
            return

        if not response.is_success:
            logger.debug("Phone-home to %s answered HTTP %s", url, response.status_code)
