"""Subida de ficheros a object storage con URL firmada.

Protocolo en dos pasos:
1) POST autenticado `{fileName, fileType}` al backend -> `{url}` firmada.
2) PUT de los bytes crudos directamente a esa URL (sin bearer).

La URL pública es la URL firmada sin query string; es lo que se guarda en el
campo de la entidad (imagen de blog, media de anuncio, escaneo de documento).
"""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path

import httpx

from adapters.http_client import build_async_client, error_message_from
from adapters.rest_client import clean_token
from core.config import AppSettings
from core.domain.errors import Unauthenticated, UploadFailed
from core.domain.models import UploadResult
from core.interfaces.credentials import CredentialProvider

logger = logging.getLogger(__name__)


def guess_content_type(path: Path) -> str:
    content_type, _ = mimetypes.guess_type(path.name)
    return content_type or "application/octet-stream"


class S3Uploader:
    """Colaborador de subida usado por el editor (`EntityEditor.attach_upload`)."""

    def __init__(
        self,
        settings: AppSettings,
        credentials: CredentialProvider,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._credentials = credentials
        self._transport = transport

    async def _signed_url(self, client: httpx.AsyncClient, *, filename: str, content_type: str) -> str:
        token = clean_token(self._credentials.get_token())
        if not token:
            raise Unauthenticated()

        try:
            response = await client.post(
                self._settings.api_url(self._settings.upload_endpoint),
                json={"fileName": filename, "fileType": content_type},
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as exc:
            raise UploadFailed("sign", str(exc) or exc.__class__.__name__) from exc

        if not response.is_success:
            raise UploadFailed("sign", error_message_from(response))
        try:
            body = response.json()
        except ValueError:
            body = None
        url = body.get("url") if isinstance(body, dict) else None
        if not isinstance(url, str) or not url.strip():
            raise UploadFailed("sign", "Failed to get signed URL")
        return url.strip()

    async def upload_bytes(self, data: bytes, *, filename: str, content_type: str) -> UploadResult:
        async with build_async_client(
            self._settings,
            transport=self._transport,
            with_base_url=False,
        ) as client:
            signed_url = await self._signed_url(client, filename=filename, content_type=content_type)
            logger.debug("Uploading %s (%s, %d bytes)", filename, content_type, len(data))
            try:
                response = await client.put(
                    signed_url,
                    content=data,
                    headers={"Content-Type": content_type},
                )
            except httpx.HTTPError as exc:
                raise UploadFailed("put", str(exc) or exc.__class__.__name__) from exc

        if not response.is_success:
            raise UploadFailed("put", f"Failed to upload file to storage (HTTP {response.status_code})")

        result = UploadResult(file_url=signed_url.split("?", 1)[0], signed_url=signed_url)
        logger.info("Uploaded %s -> %s", filename, result.file_url)
        return result

    async def upload(self, path: Path, *, content_type: str | None = None) -> UploadResult:
        content_type = content_type or guess_content_type(path)
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise UploadFailed("read", str(exc)) from exc
        return await self.upload_bytes(data, filename=path.name, content_type=content_type)
