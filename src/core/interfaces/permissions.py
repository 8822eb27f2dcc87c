"""Contrato del colaborador de permisos.

Por qué Protocol:
- Antes de enviar credenciales a un origin hay que obtener permiso (en el
  navegador lo concede el usuario; en la CLI, una allow-list o un prompt).
- El Core solo depende del contrato; cualquier fallo aborta el login.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class PermissionGrantor(Protocol):
    """Concede (o deniega) acceso a un origin.

    Reglas de diseño:
    - `request_url` es asíncrono porque puede implicar interacción o I/O.
    - Debe lanzar `PermissionDeniedError` si no se concede; no devuelve nada.
    """

    async def request_url(self, origin: str) -> None:
        ...
