"""Resolución de relaciones HATEOAS.

Cada recurso del Hub lista sus enlaces en `_meta.links`. Seguir una relación
es: localizar el primer `href` con ese `rel` y hacer GET con un `limit` grande
para traer toda la colección en una sola página.

Política de errores:
- Relación ausente => no se hace ninguna petición (el recurso no ofrece esa
  operación; es un estado legítimo).
- Cualquier `HubError` al seguirla => se registra y se trata como "sin datos".
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from adapters.hub.transport import HubTransport
from core.domain.models import HubResource
from core.domain.relations import Absent, Failed, Ok, RelationOutcome, collapse
from core.errors import HubError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10_000


class RelationResolver:
    def __init__(self, transport: HubTransport, *, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self._transport = transport
        self._page_size = page_size

    async def fetch(self, resource: HubResource, relation: str) -> RelationOutcome:
        relation = str(relation)
        url = resource.first_link(relation)
        if url is None:
            return Absent(relation)

        try:
            body = await self._transport.get(url, query={"limit": self._page_size})
        except HubError as exc:
            logger.debug("Relation %r of %s failed: %s", relation, resource.self_url, exc)
            return Failed(relation, exc)

        if not isinstance(body, dict):
            return Failed(relation, ValueError(f"Relation {relation!r} did not return a JSON object"))
        try:
            return Ok(HubResource.model_validate(body))
        except ValidationError as exc:
            logger.debug("Relation %r of %s returned a malformed resource: %s", relation, resource.self_url, exc)
            return Failed(relation, exc)

    async def get_relation(self, resource: HubResource, relation: str) -> HubResource | None:
        return collapse(await self.fetch(resource, relation))

    async def get_list_relation(self, resource: HubResource, relation: str) -> list[HubResource]:
        page = await self.get_relation(resource, relation)
        if page is None:
            return []
        items = page.get("items")
        if not isinstance(items, list):
            return []
        resources: list[HubResource] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            try:
                resources.append(HubResource.model_validate(item))
            except ValidationError as exc:
                logger.debug("Skipping malformed %r item: %s", str(relation), exc)
        return resources
