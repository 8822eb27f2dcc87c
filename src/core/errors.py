"""Errores del Core.

Todo fallo "duro" del cliente del Hub es un `HubError`; la CLI es la única capa
que los convierte en mensajes para el usuario.
"""

from __future__ import annotations


class HubError(Exception):
    """Base de todos los errores del cliente del Hub."""


class OriginNotConfiguredError(HubError, RuntimeError):
    def __init__(self, message: str = "No Hub origin saved") -> None:
        super().__init__(message)


class InvalidUrlError(HubError, ValueError):
    """A request target that is neither root-relative nor absolute."""


class PermissionDeniedError(HubError):
    def __init__(self, origin: str, reason: str | None = None) -> None:
        self.origin = origin
        message = f"Permission to access {origin} was not granted"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class RequestError(HubError):
    """A Hub request failed.

    `status_code` is `None` when the request never produced a response
    (connection refused, DNS failure, timeout). `body_decoded` is `False` when
    the server answered with something that was not JSON.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str | None = None,
        body_decoded: bool = True,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.url = url
        self.body_decoded = body_decoded
        super().__init__(message)

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"HTTP {self.status_code}: {self.message}"
