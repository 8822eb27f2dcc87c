"""Permisos de origin para la CLI no interactiva.

`StaticPermissions` concede solo los origins de una allow-list (por defecto,
`AppSettings.granted_origins`). El prompt interactivo vive en la CLI.
"""

from __future__ import annotations

from collections.abc import Iterable

from core.errors import PermissionDeniedError


def normalize_origin(origin: str) -> str:
    return origin.strip().rstrip("/").lower()


class StaticPermissions:
    def __init__(self, granted: Iterable[str] = ()) -> None:
        self._granted = {normalize_origin(o) for o in granted if o.strip()}

    async def request_url(self, origin: str) -> None:
        if normalize_origin(origin) not in self._granted:
            raise PermissionDeniedError(origin, "origin is not in the granted list")
