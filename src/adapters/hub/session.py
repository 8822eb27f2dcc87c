"""Session operations: login, logout and the "am I logged in?" check.

The session state is never stored locally; it is whatever the server says
`/api/v1/currentuser` returns for the cookies we hold.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlencode

from adapters.hub.transport import HubTransport
from core.errors import RequestError
from core.interfaces.permissions import PermissionGrantor

logger = logging.getLogger(__name__)

SECURITY_CHECK_PATH = "/j_spring_security_check"
SECURITY_LOGOUT_PATH = "/j_spring_security_logout"
CURRENT_USER_PATH = "/api/v1/currentuser"

FORM_HEADERS = {"Content-type": "application/x-www-form-urlencoded; charset=UTF-8"}


class HubSession:
    def __init__(self, transport: HubTransport, permissions: PermissionGrantor) -> None:
        self._transport = transport
        self._permissions = permissions

    async def login(self, username: str, password: str) -> Any:
        origin = self._transport.require_origin()

        # Raises PermissionDeniedError when the grant is refused.
        await self._permissions.request_url(origin)

        body = urlencode({"j_username": username, "j_password": password})
        response = await self._transport.post(SECURITY_CHECK_PATH, headers=FORM_HEADERS, content=body)
        logger.info("Logged in to %s as %s", origin, username)
        return response

    async def logout(self) -> Any:
        return await self._transport.get(SECURITY_LOGOUT_PATH)

    async def get_current_user(self) -> Any:
        try:
            return await self._transport.get(CURRENT_USER_PATH)
        except RequestError as exc:
            logger.debug("Current user lookup failed: %s", exc)
            return None

    async def is_connected(self) -> bool:
        return bool(await self.get_current_user())
