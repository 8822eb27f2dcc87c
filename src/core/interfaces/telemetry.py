"""Contrato del emisor de telemetría (phone-home).

El envío es "fire-and-forget": quien lo invoca no espera ni inspecciona el
resultado, así que `send` no debe lanzar excepciones.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import PhoneHomeRequestBody


@runtime_checkable
class PhoneHomeSender(Protocol):
    async def send(self, body: PhoneHomeRequestBody) -> None:
        ...
