"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- Facilita normalizar respuestas heterogéneas del backend (`pagination` vs
  `meta`, listas desnudas, `totalPages` en la raíz).

Nota:
- Las filas de cada entidad se mantienen como `dict` plano: su forma la describe
  `core.domain.schema.EntitySchema`, no una clase por entidad.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


_META_KEYS = ("pagination", "meta")


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


class Page(BaseModel):
    """Una página de resultados ya normalizada.

    La metadata de paginación siempre sale de la respuesta del servidor; nunca
    se deduce del número de filas.
    """

    rows: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Filas de la página en el orden devuelto por el backend.",
    )
    total_pages: int = Field(
        default=1,
        ge=1,
        description="Total de páginas (1 si el backend no lo informa).",
    )
    total: int | None = Field(
        default=None,
        description="Total de registros si el backend lo informa.",
    )
    page: int | None = Field(
        default=None,
        description="Página que el backend dice haber servido.",
    )
    limit: int | None = Field(
        default=None,
        description="Tamaño de página informado por el backend.",
    )

    @classmethod
    def from_response(cls, body: Any, *, rows_key: str | None = "data") -> "Page":
        """Normaliza el cuerpo JSON de un listado.

        Soporta:
        - `{rows_key: [...], pagination: {...}}` y `{rows_key: [...], meta: {...}}`
        - `{data: [...], totalPages: n, pageSize: m}` (metadata en la raíz)
        - `[...]` (endpoints sin paginar)
        """

        if isinstance(body, list):
            rows = body
            meta: dict[str, Any] = {}
        elif isinstance(body, dict):
            raw_rows = body.get(rows_key) if rows_key else None
            rows = raw_rows if isinstance(raw_rows, list) else []
            meta = {}
            for key in _META_KEYS:
                candidate = body.get(key)
                if isinstance(candidate, dict):
                    meta = candidate
                    break
            else:
                meta = body
        else:
            rows = []
            meta = {}

        total_pages = _as_int(meta.get("totalPages"))
        limit = _as_int(meta.get("limit"))
        if limit is None:
            limit = _as_int(meta.get("pageSize"))

        return cls(
            rows=[row for row in rows if isinstance(row, dict)],
            total_pages=total_pages if total_pages and total_pages > 0 else 1,
            total=_as_int(meta.get("total")),
            page=_as_int(meta.get("page")),
            limit=limit,
        )


class UploadResult(BaseModel):
    """Resultado de la subida en dos pasos (URL firmada + PUT)."""

    file_url: str = Field(
        ...,
        min_length=1,
        description="URL pública del objeto (URL firmada sin query string).",
    )
    signed_url: str = Field(
        ...,
        min_length=1,
        description="URL firmada usada para el PUT.",
    )
