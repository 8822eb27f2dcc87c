"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- El Hub devuelve JSON con un esquema amplio que no queremos fijar: los
  recursos aceptan campos extra y solo tipamos lo que el cliente navega
  (`_meta.links`).
- Facilita la serialización (`model_dump(by_alias=True)`) para la CLI.

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class ResourceLink(BaseModel):
    """Una entrada de `_meta.links`: relación nombrada + URL navegable."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    rel: str = Field(..., description="Nombre de la relación (p.ej. 'vulnerabilities').")
    href: str | None = Field(default=None, description="URL de la relación.")


class ResourceMeta(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    href: str | None = Field(default=None, description="URL canónica (self) del recurso.")
    allow: list[str] = Field(default_factory=list, description="Métodos HTTP permitidos.")
    links: list[ResourceLink] = Field(default_factory=list)


class HubResource(BaseModel):
    """Recurso opaco devuelto por el Hub.

    Por qué existe:
    - Da acceso tipado a la colección de enlaces (HATEOAS) sin modelar el
      resto del payload, que queda como mapa clave/valor (`get`, `[]`).
    - Es inmutable: las "decoraciones" locales (`detailsUrl`, `projectName`)
      producen una copia con `decorate`.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    meta: ResourceMeta | None = Field(
        default=None,
        alias="_meta",
        description="Metadatos HATEOAS del recurso.",
    )

    @property
    def self_url(self) -> str | None:
        return self.meta.href if self.meta else None

    def links_for(self, name: str) -> list[str] | None:
        """URLs de la relación `name`, o `None` si el recurso no la ofrece.

        La comparación es sensible a mayúsculas. Una relación declarada sin
        `href` devuelve lista vacía, no `None`.
        """

        if self.meta is None:
            return None
        matches = [link for link in self.meta.links if link.rel == name]
        if not matches:
            return None
        return [link.href for link in matches if link.href]

    def first_link(self, name: str) -> str | None:
        links = self.links_for(name)
        if not links:
            return None
        return links[0]

    @property
    def payload(self) -> dict[str, Any]:
        """Payload opaco (todo lo que no es `_meta`)."""

        return dict(self.model_extra or {})

    def get(self, key: str, default: Any = None) -> Any:
        return (self.model_extra or {}).get(key, default)

    def __getitem__(self, key: str) -> Any:
        extra = self.model_extra or {}
        if key not in extra:
            raise KeyError(key)
        return extra[key]

    def __contains__(self, key: object) -> bool:
        return key in (self.model_extra or {})

    def decorate(self, **fields: Any) -> HubResource:
        """Copia del recurso con campos derivados localmente."""

        return self.model_copy(update=fields)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ComponentKeys(BaseModel):
    """Claves de búsqueda de un componente externo (forge + id externo)."""

    forge_name: str = Field(..., min_length=1, description="Forge (p.ej. 'maven', 'npmjs').")
    hub_external_id: str = Field(
        ...,
        min_length=1,
        description="Identificador externo en formato del Hub (p.ej. 'org.slf4j:slf4j-api:1.7.25').",
    )

    @property
    def query(self) -> str:
        return f"{self.forge_name}:{self.hub_external_id}"


class PhoneHomeRequestBody(BaseModel):
    """Payload de telemetría (phone-home)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    registration_id: str = Field(..., min_length=1, alias="registrationId")
    black_duck_name: str = Field(default="Hub", min_length=1, alias="blackDuckName")
    black_duck_version: str = Field(..., min_length=1, alias="blackDuckVersion")
    plugin_version: str = Field(..., min_length=1, alias="pluginVersion")
    third_party_name: str = Field(..., min_length=1, alias="thirdPartyName")
    third_party_version: str = Field(..., min_length=1, alias="thirdPartyVersion")

    def to_json(self) -> dict[str, str]:
        return self.model_dump(mode="json", by_alias=True)
