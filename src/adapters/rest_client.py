"""Cliente REST del backend del marketplace.

Implementa `core.interfaces.gateway.EntityGateway` sobre httpx:
- GET paginado con normalización de metadata (`Page.from_response`).
- POST/PATCH/DELETE por entidad, con la ruta que indica su `EntitySchema`.

Reglas:
- Cada petición lleva `Authorization: Bearer <token>`; sin token no se envía
  nada y se lanza `Unauthenticated`.
- Cualquier no-2xx o fallo de red se convierte en un único `RequestFailed`.
- Sin reintentos: el llamador decide qué mostrar.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from adapters.http_client import build_async_client, error_message_from
from core.config import AppSettings
from core.domain.errors import RequestFailed, Unauthenticated
from core.domain.models import Page
from core.domain.schema import EntitySchema
from core.interfaces.credentials import CredentialProvider

logger = logging.getLogger(__name__)


def clean_token(raw: str | None) -> str | None:
    """Quita espacios y comillas envolventes (tokens guardados como JSON)."""

    if raw is None:
        return None
    token = raw.strip().strip('"').strip("'").strip()
    return token or None


def _unwrap(body: Any) -> dict[str, Any]:
    if isinstance(body, dict):
        inner = body.get("data")
        if isinstance(inner, dict):
            return inner
        return body
    return {}


class RemoteDataClient:
    """Gateway HTTP autenticado para todas las entidades del catálogo."""

    def __init__(
        self,
        settings: AppSettings,
        credentials: CredentialProvider,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._credentials = credentials
        self._client = build_async_client(settings, transport=transport)

    async def __aenter__(self) -> "RemoteDataClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _auth_headers(self) -> dict[str, str]:
        token = clean_token(self._credentials.get_token())
        if not token:
            raise Unauthenticated()
        return {"Authorization": f"Bearer {token}"}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Mapping[str, Any] | None = None,
    ) -> httpx.Response:
        headers = self._auth_headers()
        logger.debug("%s %s params=%s", method, path, dict(params or {}))
        try:
            response = await self._client.request(
                method,
                path,
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            message = str(exc) or exc.__class__.__name__
            logger.warning("%s %s failed: %s", method, path, message)
            raise RequestFailed(None, message) from exc

        if not response.is_success:
            message = error_message_from(response)
            logger.warning("%s %s -> %s %s", method, path, response.status_code, message)
            raise RequestFailed(response.status_code, message)
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    def list_params(
        self,
        schema: EntitySchema,
        *,
        page: int,
        page_size: int,
        search: str | None = None,
        filters: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if schema.paginated:
            params[schema.page_param] = page
            params[schema.page_size_param] = page_size
        term = (search or "").strip()
        if term and schema.search_param:
            params[schema.search_param] = term
        for name, value in (filters or {}).items():
            if value is None or (isinstance(value, str) and not value.strip()):
                continue
            params[name] = value
        return params

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
        params = self.list_params(
            schema,
            page=page,
            page_size=page_size,
            search=search,
            filters=filters,
        )
        response = await self._request("GET", schema.path(scope), params=params)
        return Page.from_response(self._json(response), rows_key=schema.rows_key)

    async def get_one(
        self,
        schema: EntitySchema,
        identifier: Any,
        *,
        scope: str | int | None = None,
    ) -> dict[str, Any]:
        response = await self._request("GET", schema.item_path(identifier, scope))
        return _unwrap(self._json(response))

    async def create(
        self,
        schema: EntitySchema,
        payload: Mapping[str, Any],
        *,
        scope: str | int | None = None,
    ) -> dict[str, Any]:
        response = await self._request("POST", schema.path(scope), json=payload)
        logger.info("Created %s", schema.key)
        return _unwrap(self._json(response))

    async def update(
        self,
        schema: EntitySchema,
        identifier: Any,
        payload: Mapping[str, Any],
        *,
        scope: str | int | None = None,
    ) -> dict[str, Any]:
        response = await self._request("PATCH", schema.item_path(identifier, scope), json=payload)
        logger.info("Updated %s %s", schema.key, identifier)
        return _unwrap(self._json(response))

    async def delete(
        self,
        schema: EntitySchema,
        identifier: Any,
        *,
        scope: str | int | None = None,
    ) -> None:
        await self._request("DELETE", schema.item_path(identifier, scope))
        logger.info("Deleted %s %s", schema.key, identifier)
