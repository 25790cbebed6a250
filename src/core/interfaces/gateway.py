"""Contrato del acceso remoto a entidades.

Por qué Protocol:
- Las máquinas de estado (`core.services`) dependen de esta abstracción y no de
  httpx; el adaptador real es `adapters.rest_client.RemoteDataClient`.
- Permite testear listados/editores con un gateway en memoria.

Reglas de diseño:
- Todo es asíncrono porque cada operación es I/O.
- Los fallos se señalan con `core.domain.errors.AdminError` y subclases.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

from core.domain.models import Page
from core.domain.schema import EntitySchema


@runtime_checkable
class EntityGateway(Protocol):
    async def list_page(
        self,
        schema: EntitySchema,
        *,
        page: int,
        page_size: int,
        search: str | None = None,
        filters: Mapping[str, Any] | None = None,
        scope: str | int | None = None,
    ) -> Page:
        ...

    async def get_one(
        self,
        schema: EntitySchema,
        identifier: Any,
        *,
        scope: str | int | None = None,
    ) -> dict[str, Any]:
        ...

    async def create(
        self,
        schema: EntitySchema,
        payload: Mapping[str, Any],
        *,
        scope: str | int | None = None,
    ) -> dict[str, Any]:
        ...

    async def update(
        self,
        schema: EntitySchema,
        identifier: Any,
        payload: Mapping[str, Any],
        *,
        scope: str | int | None = None,
    ) -> dict[str, Any]:
        ...

    async def delete(
        self,
        schema: EntitySchema,
        identifier: Any,
        *,
        scope: str | int | None = None,
    ) -> None:
        ...
