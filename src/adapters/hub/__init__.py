"""Cliente del Hub (API REST HATEOAS).

Capas, de abajo arriba:
- `transport`: URLs + peticiones con credenciales, un único canal de error.
- `relations`: seguir enlaces `_meta.links` con soft-fail.
- `graph`, `session`, `phone_home`: operaciones de dominio.
- `client`: fachada que las une.
"""

from adapters.hub.client import HubClient
from adapters.hub.graph import HubGraph
from adapters.hub.relations import RelationResolver
from adapters.hub.session import HubSession
from adapters.hub.transport import HubTransport

__all__ = [
    "HubClient",
    "HubGraph",
    "HubSession",
    "HubTransport",
    "RelationResolver",
]
