"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- El origin del Hub vive aquí: la CLI lo escribe (`hubscout origin set`) y el
  Core solo lo lee.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "hubscout"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "hubscout"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "hubscout"
    return Path.home() / ".config" / "hubscout"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def read_user_env_vars() -> dict[str, str]:
    env_path = get_user_env_file()
    if not env_path.exists():
        return {}
    return _parse_env_lines(env_path.read_text(encoding="utf-8"))


def write_user_env_vars(values: dict[str, str | None]) -> Path:
    """Escribe/actualiza variables en el .env global del usuario.

    Un valor vacío ("") se conserva: para `hub_origin` significa "sin configurar".
    """

    env_path = get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing = read_user_env_vars()
    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# hubscout user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="HUBSCOUT_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    hub_origin: str | None = Field(
        default=None,
        description="Origin del Hub (p.ej. 'https://hub.example.com'). Vacío = sin configurar.",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="hubscout/0.1",
        min_length=1,
        description="User-Agent para las peticiones al Hub.",
    )
    debug_requests: bool = Field(
        default=False,
        description="Registra método, URL y resultado de cada request al Hub.",
    )
    log_level: str = Field(
        default="WARNING",
        description="Nivel de logging (DEBUG, INFO, WARNING, ERROR).",
    )
    relation_page_size: int = Field(
        default=10_000,
        ge=1,
        description="Valor de `limit` al seguir relaciones de lista (una sola página).",
    )

    granted_origins: list[str] = Field(
        default_factory=list,
        description="Origins a los que el usuario ya autorizó enviar credenciales.",
    )
    cookie_jar_path: Path | None = Field(
        default=None,
        description="Fichero de cookies de sesión (por defecto en el directorio de usuario).",
    )

    phone_home_url: str | None = Field(
        default=None,
        description="Endpoint de telemetría (phone-home). Sin valor = desactivado.",
    )
    phone_home_grace_seconds: float = Field(
        default=5.0,
        ge=0,
        description="Tiempo máximo que se concede a envíos pendientes al cerrar el cliente.",
    )
    plugin_version: str = Field(
        default="0.1.0",
        min_length=1,
        description="Versión de este cliente reportada en el phone-home.",
    )
    third_party_name: str = Field(
        default="hubscout-cli",
        min_length=1,
        description="Nombre del integrador reportado en el phone-home.",
    )
    third_party_version: str = Field(
        default="0.1.0",
        min_length=1,
        description="Versión del integrador reportada en el phone-home.",
    )

    @field_validator("hub_origin", mode="before")
    @classmethod
    def _normalize_origin(cls, value: object) -> object:
        if value is None:
            return None
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
            if not value.startswith(("http://", "https://")):
                raise ValueError("hub_origin must be an http(s) URL")
            return value.rstrip("/")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        return value.strip().upper()

    def resolved_cookie_jar_path(self) -> Path:
        return self.cookie_jar_path or get_user_config_dir() / "cookies.lwp"
