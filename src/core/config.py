"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (REST/upload/credenciales) lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "market-admin"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "market-admin"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "market-admin"
    return Path.home() / ".config" / "market-admin"


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


def write_user_env_vars(values: dict[str, str], *, env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# market-admin user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la consola.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="MARKET_ADMIN_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    api_base_url: str = Field(
        default="http://localhost:3000/dev",
        min_length=8,
        description="Base URL del backend REST del marketplace.",
    )
    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="market-admin/0.1",
        min_length=1,
        description="User-Agent para peticiones al backend.",
    )

    page_size: int = Field(
        default=10,
        ge=1,
        le=500,
        description="Filas por página en los listados.",
    )
    search_debounce_seconds: float = Field(
        default=0.5,
        ge=0,
        description="Espera tras la última tecla antes de relanzar la búsqueda.",
    )

    upload_endpoint: str = Field(
        default="file/upload",
        min_length=1,
        description="Endpoint que emite URLs firmadas para subir ficheros.",
    )
    owner_user_id: int | None = Field(
        default=1,
        description="Id enviado como propietario al crear jobs/cursos (userId/createdById).",
    )

    token: str | None = Field(
        default=None,
        description="Bearer token fijo (tiene prioridad sobre el fichero de token).",
    )
    token_file: Path | None = Field(
        default=None,
        description="Ruta del fichero donde `login` guarda el token.",
    )

    log_level: str = Field(
        default="WARNING",
        description="Nivel de logging por defecto de la CLI.",
    )

    def resolved_token_file(self) -> Path:
        return self.token_file or (get_user_config_dir() / "token")

    def api_url(self, path: str) -> str:
        return f"{self.api_base_url.rstrip('/')}/{path.lstrip('/')}"
